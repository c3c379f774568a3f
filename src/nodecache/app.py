"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
import json
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from nodecache.adapters.execution import DocumentExecutor
from nodecache.adapters.graphql import GraphQLHttpTransport
from nodecache.adapters.notifications import TypeChangeEmitter
from nodecache.adapters.persistence import JsonSnapshotRepository
from nodecache.adapters.sqlalchemy import SqlAlchemySnapshotRepository
from nodecache.adapters.type_map import StaticTypeMap
from nodecache.config import get_normalization_config, get_storage_config
from nodecache.domain import NormalizedCache, RelationConflictTable, RequestCoordinator

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from nodecache.config.normalization import NormalizationConfig
    from nodecache.domain.ports import (
        ChangeNotifier,
        GraphQLTransport,
        SnapshotRepository,
        TypeResolver,
    )
    from nodecache.domain.types import RelationValue

type PersistenceBackend = Literal["json", "database", "none"]

log = getLogger(__name__)


def build_persistence(backend: PersistenceBackend = "json") -> SnapshotRepository | None:
    match backend:
        case "json":
            return JsonSnapshotRepository(get_storage_config().snapshot_path())
        case "database":
            return SqlAlchemySnapshotRepository.from_uri()
        case "none":
            return None


def build_type_resolver(
    schema_path: Path | None,
    normalization: NormalizationConfig,
) -> TypeResolver:
    if schema_path is None:
        log.warning("No introspection file given; only built-in fields can be resolved")
        return StaticTypeMap(connection_suffix=normalization.connection_suffix)
    return StaticTypeMap.from_file(
        schema_path,
        connection_suffix=normalization.connection_suffix,
    )


def build_cache(
    *,
    schema_path: Path | None = None,
    type_resolver: TypeResolver | None = None,
    normalization: NormalizationConfig | None = None,
    persistence: SnapshotRepository | None = None,
    backend: PersistenceBackend = "json",
    notifier: ChangeNotifier | None = None,
    load: bool = True,
) -> NormalizedCache:
    """Wire a ``NormalizedCache`` from configuration and restore its snapshot."""

    config = normalization or get_normalization_config()
    cache = NormalizedCache(
        type_resolver=type_resolver or build_type_resolver(schema_path, config),
        executor=DocumentExecutor(),
        conflicts=RelationConflictTable.from_pairs(config.relation_conflicts),
        config=config,
        notifier=notifier or TypeChangeEmitter(),
        persistence=persistence if persistence is not None else build_persistence(backend),
    )
    if load:
        restored = cache.load()
        log.info("Restored %d cached entities", restored)
    return cache


def build_coordinator(
    cache: NormalizedCache,
    transport: GraphQLTransport | None = None,
) -> RequestCoordinator:
    return RequestCoordinator(cache=cache, transport=transport or GraphQLHttpTransport())


def fetch_query(
    query: str,
    variables: Mapping[str, object] | None = None,
    *,
    cache: NormalizedCache | None = None,
    transport: GraphQLTransport | None = None,
    offline: bool = False,
) -> dict[str, object]:
    """Answer ``query``, going to the network unless ``offline`` is set."""

    effective_cache = cache or build_cache()
    if offline:
        log.info("Answering query from cache only")
        return effective_cache.read(query, variables)

    coordinator = build_coordinator(effective_cache, transport)
    data = coordinator.run(query, variables)
    log.info("Fetched query; store now holds %d entities", len(effective_cache.store))
    return data


def ingest_file(path: Path, *, cache: NormalizedCache | None = None) -> dict[str, RelationValue]:
    """Normalize a saved response document (``{"data": ...}`` or bare data)."""

    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"Response file {path} must hold a JSON object")
    data = payload.get("data", payload)
    if not isinstance(data, dict):
        raise ValueError(f"Response file {path} has no data object")

    effective_cache = cache or build_cache()
    aliases = effective_cache.ingest(data)
    log.info("Ingested %s: %d root field(s)", path, len(aliases))
    return aliases


def summarize_cache(cache: NormalizedCache) -> dict[str, int]:
    """Entity count per stored type, sorted by type name."""

    store = cache.store
    return {type_name: len(store.bucket(type_name)) for type_name in sorted(store.type_names())}


def download_schema(path: Path, *, transport: GraphQLHttpTransport | None = None) -> int:
    """Fetch the endpoint's introspection result into ``path``; return its type count."""

    effective_transport = transport or GraphQLHttpTransport()
    data = asyncio.run(effective_transport.introspect())
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"data": data}, indent=2), encoding="utf-8")
    schema = data.get("__schema")
    types = schema.get("types", []) if isinstance(schema, dict) else []
    log.info("Saved introspection result to %s", path)
    return len(types) if isinstance(types, list) else 0
