"""GraphQL-over-HTTP transport adapter."""

from __future__ import annotations

from .client import GraphQLAPIError, GraphQLHttpTransport
from .schema import GraphQLErrorPayload, GraphQLResponse

__all__ = [
    "GraphQLAPIError",
    "GraphQLErrorPayload",
    "GraphQLHttpTransport",
    "GraphQLResponse",
]
