"""Exceptions raised by the normalized cache."""

from __future__ import annotations


class CacheError(RuntimeError):
    """Base class for cache-level failures surfaced to query callers."""


class CacheMiss(CacheError):
    """Raised when a queried field was never ingested."""

    def __init__(self, field_name: str, *, type_name: str | None = None) -> None:
        where = f" on {type_name}" if type_name else ""
        super().__init__(f"Field {field_name!r}{where} is not in the cache")
        self.field_name = field_name
        self.type_name = type_name


class UnknownFieldError(CacheError):
    """Raised when the type resolver cannot name the type of a field."""

    def __init__(self, field_name: str) -> None:
        super().__init__(f"No type is known for field {field_name!r}")
        self.field_name = field_name


class MalformedResponseError(CacheError):
    """Raised when a response object lacks its type discriminator or identifier."""

    def __init__(self, message: str, *, path: tuple[str, ...] = ()) -> None:
        location = ".".join(path) if path else "<root>"
        super().__init__(f"{message} (at {location})")
        self.path = path


class QueryExecutionError(CacheError):
    """Raised when a query document cannot be executed against the store."""
