"""HTTP transport for GraphQL operations."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from graphql import get_introspection_query
from pydantic import ValidationError

from nodecache.adapters.http_resilience import ResilientClient
from nodecache.config.graphql import get_graphql_config
from nodecache.domain.ports.transport import GraphQLTransport, TransportResponse

from .schema import GraphQLResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    import httpx

    from nodecache.config.graphql import GraphQLEndpointConfig
    from nodecache.config.http_resilience import ResilienceConfig

log = getLogger(__name__)


class GraphQLAPIError(RuntimeError):
    """Raised when the endpoint answers with errors and no data."""

    def __init__(
        self,
        message: str,
        *,
        errors: tuple[str, ...] = (),
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.errors = errors
        self.status_code = status_code


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class GraphQLHttpTransport:
    config: GraphQLEndpointConfig = field(default_factory=get_graphql_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    async def post(
        self,
        query: str,
        variables: Mapping[str, object] | None = None,
    ) -> TransportResponse:
        async with self.client_factory(self.config.resilience) as client:
            response = await self._send(client, query, variables)
        parsed = self._parse(response)

        messages = parsed.error_messages()
        if parsed.data is None:
            message = messages[0] if messages else "GraphQL response carried no data"
            log.error("GraphQL request failed: %s", message)
            raise GraphQLAPIError(message, errors=messages, status_code=response.status_code)
        return TransportResponse(data=parsed.data, errors=messages)

    async def introspect(self) -> dict[str, object]:
        """Fetch the endpoint's introspection result (the ``data`` member)."""

        result = await self.post(get_introspection_query(descriptions=False))
        return result.data or {}

    async def _send(
        self,
        client: ResilientClient,
        query: str,
        variables: Mapping[str, object] | None,
    ) -> httpx.Response:
        if self.config.http_method == "GET":
            params = {"query": query}
            if variables:
                params["variables"] = json.dumps(dict(variables))
            return await client.get(self.config.endpoint, params=params)
        body = {"query": query, "variables": dict(variables or {})}
        return await client.post(self.config.endpoint, json=body)

    def _parse(self, response: httpx.Response) -> GraphQLResponse:
        try:
            payload = response.json()
        except json.JSONDecodeError:
            response.raise_for_status()
            raise GraphQLAPIError(
                "GraphQL endpoint returned a non-JSON body",
                status_code=response.status_code,
            ) from None

        if not isinstance(payload, dict):
            response.raise_for_status()
            raise GraphQLAPIError(
                "Unexpected GraphQL response payload",
                status_code=response.status_code,
            )

        try:
            parsed = GraphQLResponse.model_validate(payload)
        except ValidationError as exc:
            response.raise_for_status()
            raise GraphQLAPIError(
                f"Malformed GraphQL response: {exc.error_count()} validation error(s)",
                status_code=response.status_code,
            ) from exc

        if response.is_error and not parsed.errors:
            response.raise_for_status()
        return parsed


if TYPE_CHECKING:
    _transport_check: GraphQLTransport = GraphQLHttpTransport()
