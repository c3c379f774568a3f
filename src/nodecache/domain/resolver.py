"""Field resolver that answers queries from the normalized store."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from nodecache.config.normalization import NormalizationConfig

from .conflicts import RelationConflictTable
from .errors import CacheMiss, UnknownFieldError
from .filtering import filter_by_args, filter_by_identity
from .store import NormalizedStore
from .types import EdgeView, Entity, EntitySet, FieldInfo, RootAliases

if TYPE_CHECKING:
    from .ports.type_resolution import TypeResolver
    from .types import RelationValue

log = getLogger(__name__)

TOTAL_COUNT_FIELD = "totalCount"


@dataclass(slots=True)
class FieldResolver:
    """Resolve one field against the store root, an entity or an ``EntitySet``.

    Instances are passed as the resolver callback to a query executor. The
    resolver never writes to the store.
    """

    store: NormalizedStore
    type_resolver: TypeResolver
    conflicts: RelationConflictTable = field(default_factory=RelationConflictTable)
    config: NormalizationConfig = field(default_factory=NormalizationConfig)

    def __call__(
        self,
        field_name: str,
        current: object,
        args: dict[str, object],
        info: FieldInfo,
    ) -> object:
        if info.is_leaf:
            return self._resolve_leaf(field_name, current)

        if isinstance(current, EntitySet):
            if field_name == self.config.nodes_key:
                return current.nodes()
            if field_name == self.config.edges_key:
                return [EdgeView(node=entity) for entity in current.nodes()]
        if isinstance(current, EdgeView) and field_name == self.config.node_key:
            return current.node

        field_type = self.type_resolver.resolve_type(field_name)
        if field_type is None:
            raise UnknownFieldError(field_name)
        if self.config.is_connection_type(field_type):
            return self._resolve_connection(field_name, field_type, current, args)
        return self._resolve_to_one(field_name, field_type, current, args, info)

    def _resolve_leaf(self, field_name: str, current: object) -> object:
        if isinstance(current, EntitySet):
            if field_name == TOTAL_COUNT_FIELD:
                return len(current)
            if field_name == self.config.typename_field and current.connection_type:
                return current.connection_type
        if isinstance(current, Mapping) and field_name in current:
            return current[field_name]
        if _is_root(current) and field_name == self.config.typename_field:
            return self.config.root_marker

        type_name = None
        if isinstance(current, Mapping):
            raw_type = current.get(self.config.typename_field)
            type_name = raw_type if isinstance(raw_type, str) else None
        raise CacheMiss(field_name, type_name=type_name)

    def _resolve_connection(
        self,
        field_name: str,
        field_type: str,
        current: object,
        args: dict[str, object],
    ) -> EntitySet | Entity | None:
        element_type = self.type_resolver.infer_element_type(field_type)

        if _is_root(current):
            if not self.store.has_type(element_type):
                raise CacheMiss(field_name)
            relation: object = list(self.store.bucket(element_type))
        elif isinstance(current, Mapping):
            accessor = field_name if field_name in self.conflicts else element_type
            relation = current.get(accessor)
        else:
            return None

        if relation is None:
            return None
        if isinstance(relation, list):
            entities = filter_by_identity(self.store.bucket(element_type), relation)
            if args:
                entities = filter_by_args(entities, args)
            return EntitySet(
                element_type=element_type,
                entities=entities,
                connection_type=field_type,
            )
        return self.store.get(element_type, str(relation))

    def _resolve_to_one(
        self,
        field_name: str,
        field_type: str,
        current: object,
        args: dict[str, object],
        info: FieldInfo,
    ) -> Entity | None:
        relation: object
        if _is_root(current):
            requested = args.get(self.config.id_field)
            if requested is not None:
                relation = str(requested)
            else:
                relation = self._root_alias(current, info.alias or field_name)
            if relation is None:
                raise CacheMiss(field_name)
        elif isinstance(current, Mapping):
            key = field_name if field_name in self.conflicts else field_type
            relation = current.get(key)
        else:
            return None

        if relation is None:
            return None
        candidates = relation if isinstance(relation, list) else [relation]
        for entity_id in candidates:
            entity = self.store.get(field_type, str(entity_id))
            if entity is not None:
                return entity
        if _is_root(current):
            raise CacheMiss(field_name, type_name=field_type)
        log.debug("No stored %s for field %r", field_type, field_name)
        return None

    def _root_alias(self, root: object, response_key: str) -> RelationValue | None:
        # a response key is the query alias when one is given
        if isinstance(root, RootAliases):
            return root.values.get(response_key)
        return self.store.root_alias(response_key)


def _is_root(current: object) -> bool:
    return isinstance(current, (NormalizedStore, RootAliases))
