"""Normalization engine, field resolution and request coordination.

Query text is parsed with graphql-core and the naming constants come from
``NormalizationConfig``. The type resolver, query executor, change notifier,
persistence and network transport are reached through the protocols in
``nodecache.domain.ports``.
"""

from __future__ import annotations

from .cache import NormalizedCache
from .conflicts import RelationConflictTable
from .coordinator import RequestCoordinator
from .errors import (
    CacheError,
    CacheMiss,
    MalformedResponseError,
    QueryExecutionError,
    UnknownFieldError,
)
from .merge import MergePolicy, merge_records
from .normalizer import Normalizer
from .requests import RequestRegistry, RequestState, RequestStatus, request_signature
from .resolver import FieldResolver
from .store import NormalizedStore
from .types import EntitySet, FieldInfo, ObjectKind, ParentLink, QueryResult, RootAliases

__all__ = [
    "CacheError",
    "CacheMiss",
    "EntitySet",
    "FieldInfo",
    "FieldResolver",
    "MalformedResponseError",
    "MergePolicy",
    "NormalizedCache",
    "NormalizedStore",
    "Normalizer",
    "ObjectKind",
    "ParentLink",
    "QueryExecutionError",
    "QueryResult",
    "RelationConflictTable",
    "RequestCoordinator",
    "RequestRegistry",
    "RequestState",
    "RequestStatus",
    "RootAliases",
    "UnknownFieldError",
    "merge_records",
    "request_signature",
]
