"""Flatten nested response trees into the normalized store.

Every response object is classified once into an ``ObjectKind``:

- ``WRAPPER``: mutation payloads and the root query object; never stored, their
  object-valued fields are normalized independently.
- ``CONNECTION``: paginated collections; never stored, only their members are.
- ``LEAF``: no nested objects; stored with the back-reference to its owner.
- ``COMPOSITE``: nested objects are normalized first and replaced by
  identifier references.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from nodecache.config.normalization import NormalizationConfig

from .conflicts import RelationConflictTable
from .errors import MalformedResponseError
from .types import Entity, EntityId, ObjectKind, ParentLink, RelationValue

if TYPE_CHECKING:
    from .merge import MergePolicy
    from .ports.type_resolution import TypeResolver

log = getLogger(__name__)

type Path = tuple[str, ...]


def _is_nested(value: object) -> bool:
    if isinstance(value, Mapping):
        return True
    return isinstance(value, list) and any(isinstance(item, Mapping) for item in value)


def _copy_scalar(value: object) -> object:
    return list(value) if isinstance(value, list) else value


@dataclass(slots=True)
class Normalizer:
    merge_policy: MergePolicy
    type_resolver: TypeResolver
    conflicts: RelationConflictTable = field(default_factory=RelationConflictTable)
    config: NormalizationConfig = field(default_factory=NormalizationConfig)

    def normalize_root(self, result: Mapping[str, object]) -> dict[str, RelationValue]:
        """Normalize every top-level field of a response and record root aliases."""

        aliases: dict[str, RelationValue] = {}
        for key, value in result.items():
            if key == self.config.typename_field:
                continue
            identity = self._normalize_value(value, link=None, path=(key,))
            if identity is None:
                continue
            self.merge_policy.store.set_root_alias(key, identity)
            aliases[key] = identity
        return aliases

    def normalize(
        self,
        obj: Mapping[str, object],
        *,
        link: ParentLink | None = None,
        path: Path = (),
    ) -> RelationValue | None:
        """Normalize one object and return its identifier(s).

        Returns ``None`` for wrapper objects, a list of identifiers for
        connections and a single identifier otherwise.
        """

        type_name = self._type_name(obj, path)
        kind = self.classify(obj, type_name)
        log.debug("Normalizing %s as %s at %s", type_name, kind, ".".join(path) or "<root>")

        match kind:
            case ObjectKind.WRAPPER:
                self._normalize_wrapper(obj, path)
                return None
            case ObjectKind.CONNECTION:
                return self._normalize_connection(obj, link, path)
            case ObjectKind.LEAF:
                return self._normalize_leaf(obj, type_name, link, path)
            case ObjectKind.COMPOSITE:
                return self._normalize_composite(obj, type_name, path)

    def classify(self, obj: Mapping[str, object], type_name: str) -> ObjectKind:
        if self.config.is_wrapper_type(type_name):
            return ObjectKind.WRAPPER
        if self.config.is_connection_type(type_name):
            return ObjectKind.CONNECTION
        typename_field = self.config.typename_field
        if any(_is_nested(value) for key, value in obj.items() if key != typename_field):
            return ObjectKind.COMPOSITE
        return ObjectKind.LEAF

    def _normalize_value(
        self,
        value: object,
        *,
        link: ParentLink | None,
        path: Path,
    ) -> RelationValue | None:
        if isinstance(value, Mapping):
            return self.normalize(value, link=link, path=path)
        if isinstance(value, list) and any(isinstance(item, Mapping) for item in value):
            return self._normalize_members(value, link, path)
        return None

    def _normalize_wrapper(self, obj: Mapping[str, object], path: Path) -> None:
        for key, value in obj.items():
            if key == self.config.typename_field:
                continue
            self._normalize_value(value, link=None, path=(*path, key))

    def _normalize_connection(
        self,
        obj: Mapping[str, object],
        link: ParentLink | None,
        path: Path,
    ) -> list[EntityId]:
        nodes = obj.get(self.config.nodes_key)
        if isinstance(nodes, list):
            return self._normalize_members(nodes, link, (*path, self.config.nodes_key))

        edges = obj.get(self.config.edges_key)
        if not isinstance(edges, list):
            return []
        members = [
            edge.get(self.config.node_key) if isinstance(edge, Mapping) else edge
            for edge in edges
        ]
        return self._normalize_members(members, link, (*path, self.config.edges_key))

    def _normalize_members(
        self,
        members: list[object],
        link: ParentLink | None,
        path: Path,
    ) -> list[EntityId]:
        # Members of a to-many relation each point back at a single owner.
        member_link = link.to_one() if link is not None else None
        identifiers: list[EntityId] = []
        for index, member in enumerate(members):
            if member is None:
                continue
            if not isinstance(member, Mapping):
                raise MalformedResponseError(
                    f"Expected an object in list, got {type(member).__name__}",
                    path=(*path, str(index)),
                )
            identity = self.normalize(member, link=member_link, path=(*path, str(index)))
            if isinstance(identity, list):
                identifiers.extend(identity)
            elif identity is not None:
                identifiers.append(identity)
        return identifiers

    def _normalize_leaf(
        self,
        obj: Mapping[str, object],
        type_name: str,
        link: ParentLink | None,
        path: Path,
    ) -> EntityId:
        entity_id = self._identity(obj, type_name, path)
        record: Entity = {key: _copy_scalar(value) for key, value in obj.items()}
        if link is not None:
            record[link.key] = link.value
        self.merge_policy.upsert(type_name, entity_id, record)
        return entity_id

    def _normalize_composite(
        self,
        obj: Mapping[str, object],
        type_name: str,
        path: Path,
    ) -> EntityId:
        entity_id = self._identity(obj, type_name, path)
        record: Entity = {}
        relation_sources: dict[str, str] = {}

        for key, value in obj.items():
            if key == self.config.typename_field or not _is_nested(value):
                record[key] = _copy_scalar(value)
                continue

            child_path = (*path, key)
            target_type, many = self._relation_target(value, child_path)
            child_link = ParentLink(
                key=self.conflicts.inverse_key(key, type_name),
                owner_id=entity_id,
                many=many or key in self.conflicts,
            )
            identity = self._normalize_value(value, link=child_link, path=child_path)
            if identity is None:
                continue

            forward_key = self.conflicts.forward_key(key, target_type)
            previous = relation_sources.get(forward_key)
            if previous is not None and previous != key:
                log.warning(
                    "Fields %r and %r of %s both map to relation key %r; "
                    "register a relation conflict to keep them apart",
                    previous,
                    key,
                    type_name,
                    forward_key,
                )
            relation_sources[forward_key] = key
            record[forward_key] = identity

        self.merge_policy.upsert(type_name, entity_id, record)
        return entity_id

    def _relation_target(self, value: object, path: Path) -> tuple[str, bool]:
        """Return the target entity type of a nested value and whether it is to-many."""

        if isinstance(value, Mapping):
            child_type = self._type_name(value, path)
            if self.config.is_connection_type(child_type):
                return self.type_resolver.infer_element_type(child_type), True
            return child_type, False

        assert isinstance(value, list)
        first = next(item for item in value if isinstance(item, Mapping))
        return self._type_name(first, (*path, "0")), True

    def _type_name(self, obj: Mapping[str, object], path: Path) -> str:
        type_name = obj.get(self.config.typename_field)
        if not isinstance(type_name, str) or not type_name:
            raise MalformedResponseError(
                f"Object is missing its {self.config.typename_field!r} discriminator",
                path=path,
            )
        return type_name

    def _identity(self, obj: Mapping[str, object], type_name: str, path: Path) -> EntityId:
        value = obj.get(self.config.id_field)
        if isinstance(value, bool) or not isinstance(value, (str, int)) or value == "":
            raise MalformedResponseError(
                f"{type_name} object has no usable {self.config.id_field!r}",
                path=path,
            )
        return str(value)
