"""Value types shared by the normalizer, the store and the field resolver."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

type EntityId = str
type Entity = dict[str, object]
type RelationValue = EntityId | list[EntityId]
type StoreSnapshot = dict[str, dict[EntityId, Entity]]


class ObjectKind(StrEnum):
    """How a single response object is treated during normalization."""

    WRAPPER = "wrapper"
    CONNECTION = "connection"
    LEAF = "leaf"
    COMPOSITE = "composite"


@dataclass(frozen=True, slots=True)
class ParentLink:
    """Back-reference a nested child records to the object that owns it."""

    key: str
    owner_id: EntityId
    many: bool = False

    def to_one(self) -> ParentLink:
        return ParentLink(key=self.key, owner_id=self.owner_id, many=False)

    @property
    def value(self) -> RelationValue:
        return [self.owner_id] if self.many else self.owner_id


@dataclass(slots=True)
class EntitySet:
    """Resolved connection: entities of one type in relation order."""

    element_type: str
    entities: dict[EntityId, Entity] = field(default_factory=dict[EntityId, Entity])
    connection_type: str | None = None

    def __len__(self) -> int:
        return len(self.entities)

    def nodes(self) -> list[Entity]:
        return list(self.entities.values())


@dataclass(frozen=True, slots=True)
class FieldInfo:
    """Per-field details handed to the resolver by a query executor."""

    is_leaf: bool
    alias: str | None = None


@dataclass(frozen=True, slots=True)
class QueryResult:
    """Outcome of a cache-only query: either ``data`` or an ``error`` message."""

    data: dict[str, object] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class RootAliases:
    """Read root carrying the identifiers one response stored per top-level key."""

    values: Mapping[str, RelationValue]


@dataclass(frozen=True, slots=True)
class EdgeView:
    """Edge wrapper around a connection member, as seen by ``edges { node }``."""

    node: Entity
