"""Normalized cache facade: ingest responses, answer queries, persist snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from logging import getLogger
from typing import TYPE_CHECKING

from graphql import GraphQLError, parse

from nodecache.config.normalization import NormalizationConfig

from .conflicts import RelationConflictTable
from .errors import CacheError
from .merge import MergePolicy
from .normalizer import Normalizer
from .resolver import FieldResolver
from .store import NormalizedStore
from .types import QueryResult, RootAliases

if TYPE_CHECKING:
    from collections.abc import Mapping

    from graphql import DocumentNode

    from .ports.execution import QueryExecutor
    from .ports.notifications import ChangeNotifier
    from .ports.persistence import SnapshotRepository
    from .ports.type_resolution import TypeResolver
    from .types import RelationValue, StoreSnapshot

log = getLogger(__name__)


@lru_cache(maxsize=256)
def parse_query(query: str) -> DocumentNode:
    return parse(query)


@dataclass(slots=True)
class NormalizedCache:
    """Owns one store and the components that read and write it."""

    type_resolver: TypeResolver
    executor: QueryExecutor
    conflicts: RelationConflictTable = field(default_factory=RelationConflictTable)
    config: NormalizationConfig = field(default_factory=NormalizationConfig)
    notifier: ChangeNotifier | None = None
    persistence: SnapshotRepository | None = None
    store: NormalizedStore = field(default_factory=NormalizedStore)
    normalizer: Normalizer = field(init=False)
    resolver: FieldResolver = field(init=False)

    def __post_init__(self) -> None:
        merge_policy = MergePolicy(store=self.store, notifier=self.notifier)
        self.normalizer = Normalizer(
            merge_policy=merge_policy,
            type_resolver=self.type_resolver,
            conflicts=self.conflicts,
            config=self.config,
        )
        self.resolver = FieldResolver(
            store=self.store,
            type_resolver=self.type_resolver,
            conflicts=self.conflicts,
            config=self.config,
        )

    def ingest(
        self,
        result: Mapping[str, object],
        *,
        persist: bool = True,
    ) -> dict[str, RelationValue]:
        """Normalize a query or mutation result into the store."""

        aliases = self.normalizer.normalize_root(result)
        log.info(
            "Ingested %d root field(s); store holds %d entities",
            len(aliases),
            len(self.store),
        )
        if persist:
            self.persist()
        return aliases

    def write(
        self,
        data: Mapping[str, object] | None,
        *,
        persist: bool = True,
    ) -> dict[str, RelationValue]:
        if data is None:
            return {}
        return self.ingest(data, persist=persist)

    def persist(self) -> None:
        if self.persistence is None:
            return
        self.persistence.save(self.store.snapshot())

    def load(self) -> int:
        """Restore the store from the configured persistence; return the entity count."""

        if self.persistence is None:
            return 0
        self.store.restore(self.persistence.load())
        return len(self.store)

    def read(
        self,
        query: str,
        variables: Mapping[str, object] | None = None,
        *,
        root_aliases: Mapping[str, RelationValue] | None = None,
    ) -> dict[str, object]:
        """Resolve ``query`` from the store, raising on any failure.

        ``root_aliases`` pins top-level fields to the identifiers one earlier
        response stored for them; without it the latest ingest wins.
        """

        document = parse_query(query)
        root: object = self.store if root_aliases is None else RootAliases(root_aliases)
        return self.executor.execute(self.resolver, document, root, variables)

    def load_query(
        self,
        query: str,
        variables: Mapping[str, object] | None = None,
    ) -> QueryResult:
        """Resolve ``query`` from the store; failures become an error result."""

        try:
            data = self.read(query, variables)
        except (CacheError, GraphQLError) as exc:
            log.debug("Cache query failed: %s", exc)
            return QueryResult(error=str(exc))
        return QueryResult(data=data)

    def snapshot(self) -> StoreSnapshot:
        return self.store.snapshot()

    def clear(self) -> None:
        self.store.clear()
        if self.persistence is not None:
            self.persistence.clear()
        log.info("Cache cleared")
