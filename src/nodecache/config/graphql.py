"""GraphQL endpoint configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

GRAPHQL_TIMEOUT_SECONDS = 30.0

type HttpMethod = Literal["GET", "POST"]
type HttpCacheBackend = Literal["memory", "sqlite"]


@dataclass(frozen=True, slots=True)
class GraphQLEndpointConfig:
    """Where and how queries are sent over HTTP."""

    endpoint: str
    resilience: ResilienceConfig
    http_method: HttpMethod = "POST"


def _parse_http_method(value: str | None) -> HttpMethod:
    if value is None:
        return "POST"
    method = value.upper()
    if method == "GET":
        return "GET"
    if method == "POST":
        return "POST"
    raise ConfigurationError(f"Unsupported GRAPHQL_HTTP_METHOD: {value}")


def _parse_http_cache(value: str | None) -> HttpCacheBackend | None:
    if value is None:
        return "memory"
    backend = value.lower()
    if backend == "none":
        return None
    if backend == "memory":
        return "memory"
    if backend == "sqlite":
        return "sqlite"
    raise ConfigurationError(f"Unsupported GRAPHQL_HTTP_CACHE: {value}")


def is_cacheable_response(payload: object) -> bool:
    """Whether a GraphQL response body may be stored in the HTTP cache."""

    if not isinstance(payload, dict):
        return False
    return payload.get("data") is not None and not payload.get("errors")


def _parse_rate_limit(value: str | None) -> RateLimit | None:
    if value is None:
        return None
    try:
        calls = int(value)
    except ValueError as exc:
        raise ConfigurationError(f"GRAPHQL_RATE_LIMIT must be an integer: {value}") from exc
    if calls <= 0:
        raise ConfigurationError("GRAPHQL_RATE_LIMIT must be positive")
    return RateLimit(max_calls=calls, per_seconds=1.0)


def get_graphql_config(*, resilience: ResilienceConfig | None = None) -> GraphQLEndpointConfig:
    values = require_env_vars(("GRAPHQL_ENDPOINT",))
    endpoint = values["GRAPHQL_ENDPOINT"]
    http_method = _parse_http_method(optional_env_var("GRAPHQL_HTTP_METHOD"))

    headers = {"Accept": "application/json"}
    token = optional_env_var("GRAPHQL_AUTH_TOKEN")
    if token is not None:
        headers["Authorization"] = f"Bearer {token}"

    # only GET requests are cacheable at the HTTP layer
    http_cache: CacheConfig | None = None
    backend = _parse_http_cache(optional_env_var("GRAPHQL_HTTP_CACHE"))
    if http_method == "GET" and backend is not None:
        http_cache = CacheConfig(backend=backend, should_cache=is_cacheable_response)

    return GraphQLEndpointConfig(
        endpoint=endpoint,
        http_method=http_method,
        resilience=resilience
        or ResilienceConfig(
            name="graphql",
            timeout_seconds=GRAPHQL_TIMEOUT_SECONDS,
            retry=RetryPolicy(),
            ratelimit=_parse_rate_limit(optional_env_var("GRAPHQL_RATE_LIMIT")),
            cache=http_cache,
            default_headers=headers,
        ),
    )
