"""Port for schema type-name lookups."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TypeResolver(Protocol):
    """Maps field names to declared result types."""

    def resolve_type(self, field_name: str) -> str | None:
        """Return the named type a field resolves to, or ``None`` if unknown."""
        ...

    def infer_element_type(self, connection_type: str) -> str:
        """Return the element type of a connection type."""
        ...
