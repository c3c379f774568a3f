"""Port for sending queries over the network."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(slots=True)
class TransportResponse:
    """Decoded response envelope of one network operation."""

    data: dict[str, object] | None
    errors: tuple[str, ...] = field(default_factory=tuple)


@runtime_checkable
class GraphQLTransport(Protocol):
    async def post(
        self,
        query: str,
        variables: Mapping[str, object] | None = None,
    ) -> TransportResponse: ...
