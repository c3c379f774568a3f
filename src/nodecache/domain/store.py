"""Process-wide normalized entity store."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from .types import Entity, EntityId, RelationValue, StoreSnapshot

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping


@dataclass(slots=True)
class NormalizedStore:
    """Two-level mapping ``type name -> entity id -> entity``.

    Only the merge policy writes entities; readers get read-only views.
    """

    _buckets: dict[str, dict[EntityId, Entity]] = field(
        default_factory=dict[str, dict[EntityId, Entity]]
    )
    _root_aliases: dict[str, RelationValue] = field(default_factory=dict[str, RelationValue])

    def get(self, type_name: str, entity_id: EntityId) -> Entity | None:
        bucket = self._buckets.get(type_name)
        if bucket is None:
            return None
        return bucket.get(entity_id)

    def has_type(self, type_name: str) -> bool:
        return type_name in self._buckets

    def bucket(self, type_name: str) -> Mapping[EntityId, Entity]:
        return MappingProxyType(self._buckets.get(type_name, {}))

    def put(self, type_name: str, entity_id: EntityId, record: Entity) -> None:
        self._buckets.setdefault(type_name, {})[entity_id] = record

    def type_names(self) -> Iterator[str]:
        return iter(self._buckets)

    def set_root_alias(self, field_name: str, value: RelationValue) -> None:
        self._root_aliases[field_name] = value

    def root_alias(self, field_name: str) -> RelationValue | None:
        return self._root_aliases.get(field_name)

    def clear(self) -> None:
        self._buckets.clear()
        self._root_aliases.clear()

    def snapshot(self) -> StoreSnapshot:
        """Return a deep copy of every stored entity, suitable for persistence."""

        return copy.deepcopy(self._buckets)

    def restore(self, snapshot: Mapping[str, Mapping[EntityId, Entity]]) -> None:
        """Replace the store content with a previously persisted snapshot."""

        self.clear()
        for type_name, entities in snapshot.items():
            self._buckets[type_name] = {
                str(entity_id): dict(record) for entity_id, record in entities.items()
            }

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())

    def __contains__(self, identity: object) -> bool:
        if not isinstance(identity, tuple) or len(identity) != 2:  # noqa: PLR2004
            return False
        type_name, entity_id = identity
        return self.get(str(type_name), str(entity_id)) is not None
