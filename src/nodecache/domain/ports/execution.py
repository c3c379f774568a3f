"""Port for the query execution engine."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from graphql import DocumentNode

    from nodecache.domain.types import FieldInfo

type FieldResolverFn = Callable[[str, object, dict[str, object], FieldInfo], object]


@runtime_checkable
class QueryExecutor(Protocol):
    """Walks a parsed query and asks ``resolver`` for every selected field."""

    def execute(
        self,
        resolver: FieldResolverFn,
        document: DocumentNode,
        root: object,
        variables: Mapping[str, object] | None = None,
    ) -> dict[str, object]: ...
