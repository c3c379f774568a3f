"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .graphql import GraphQLEndpointConfig, get_graphql_config
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .normalization import NormalizationConfig, get_normalization_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "GraphQLEndpointConfig",
    "MissingConfigurationError",
    "NormalizationConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_graphql_config",
    "get_normalization_config",
    "get_storage_config",
    "optional_env_var",
    "require_env_vars",
]
