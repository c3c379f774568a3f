"""Domain port definitions for adapters."""

from __future__ import annotations

from .execution import FieldResolverFn, QueryExecutor
from .notifications import ChangeNotifier
from .persistence import SnapshotRepository
from .transport import GraphQLTransport, TransportResponse
from .type_resolution import TypeResolver

__all__ = [
    "ChangeNotifier",
    "FieldResolverFn",
    "GraphQLTransport",
    "QueryExecutor",
    "SnapshotRepository",
    "TransportResponse",
    "TypeResolver",
]
