from __future__ import annotations

import json
from pathlib import Path  # noqa: TC003

import pytest

from nodecache.config import (
    ConfigurationError,
    MissingConfigurationError,
    get_database_config,
    get_graphql_config,
    get_normalization_config,
    get_storage_config,
    optional_env_var,
    require_env_vars,
)
from nodecache.config.graphql import is_cacheable_response
from nodecache.config.normalization import load_relation_conflicts
from nodecache.config.storage import SNAPSHOT_FILENAME


def test_require_env_vars_returns_values(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("GRAPHQL_ENDPOINT", "https://api.example.test/graphql")

    assert require_env_vars(["GRAPHQL_ENDPOINT"]) == {
        "GRAPHQL_ENDPOINT": "https://api.example.test/graphql"
    }


def test_require_env_vars_lists_every_missing_name(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("GRAPHQL_AUTH_TOKEN", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["GRAPHQL_ENDPOINT", "GRAPHQL_AUTH_TOKEN"])

    assert "GRAPHQL_AUTH_TOKEN, GRAPHQL_ENDPOINT" in str(exc.value)


def test_optional_env_var_treats_blank_as_unset(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("NODECACHE_ID_FIELD", "  ")

    assert optional_env_var("NODECACHE_ID_FIELD") is None


def test_graphql_config_defaults(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("GRAPHQL_ENDPOINT", "https://api.example.test/graphql")

    config = get_graphql_config()

    assert config.endpoint == "https://api.example.test/graphql"
    assert config.http_method == "POST"
    assert config.resilience.cache is None
    assert config.resilience.ratelimit is None
    assert config.resilience.default_headers == {"Accept": "application/json"}


def test_graphql_config_from_environment(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("GRAPHQL_ENDPOINT", "https://api.example.test/graphql")
    clean_env.setenv("GRAPHQL_AUTH_TOKEN", "secret")
    clean_env.setenv("GRAPHQL_HTTP_METHOD", "get")
    clean_env.setenv("GRAPHQL_RATE_LIMIT", "5")

    config = get_graphql_config()

    assert config.http_method == "GET"
    assert config.resilience.cache is not None
    assert config.resilience.cache.backend == "memory"
    assert config.resilience.cache.should_cache is is_cacheable_response
    assert config.resilience.ratelimit is not None
    assert config.resilience.ratelimit.max_calls == 5
    assert config.resilience.default_headers is not None
    assert config.resilience.default_headers["Authorization"] == "Bearer secret"


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("GRAPHQL_HTTP_METHOD", "PUT"),
        ("GRAPHQL_RATE_LIMIT", "fast"),
        ("GRAPHQL_RATE_LIMIT", "0"),
        ("GRAPHQL_HTTP_CACHE", "redis"),
    ],
)
def test_graphql_config_rejects_bad_values(
    clean_env: pytest.MonkeyPatch,
    name: str,
    value: str,
) -> None:
    clean_env.setenv("GRAPHQL_ENDPOINT", "https://api.example.test/graphql")
    clean_env.setenv(name, value)

    with pytest.raises(ConfigurationError):
        get_graphql_config()


@pytest.mark.parametrize(
    ("method", "backend", "expected"),
    [
        ("get", "sqlite", "sqlite"),
        ("get", "none", None),
        ("post", "sqlite", None),
    ],
)
def test_graphql_http_cache_backend(
    clean_env: pytest.MonkeyPatch,
    method: str,
    backend: str,
    expected: str | None,
) -> None:
    clean_env.setenv("GRAPHQL_ENDPOINT", "https://api.example.test/graphql")
    clean_env.setenv("GRAPHQL_HTTP_METHOD", method)
    clean_env.setenv("GRAPHQL_HTTP_CACHE", backend)

    cache = get_graphql_config().resilience.cache

    assert (cache.backend if cache is not None else None) == expected


def test_only_complete_graphql_answers_are_cacheable() -> None:
    assert is_cacheable_response({"data": {"activityById": None}})
    assert not is_cacheable_response({"data": {"a": 1}, "errors": [{"message": "partial"}]})
    assert not is_cacheable_response({"data": None, "errors": [{"message": "denied"}]})
    assert not is_cacheable_response(["not", "an", "object"])


def test_graphql_config_requires_endpoint(clean_env: pytest.MonkeyPatch) -> None:  # noqa: ARG001
    with pytest.raises(MissingConfigurationError):
        get_graphql_config()


def test_normalization_config_reads_conflict_file(
    clean_env: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    path = tmp_path / "conflicts.json"
    path.write_text(json.dumps({"activityByActivity": "activityPrerequisitesByActivity"}))
    clean_env.setenv("NODECACHE_RELATION_CONFLICTS", str(path))
    clean_env.setenv("NODECACHE_ID_FIELD", "id")

    config = get_normalization_config()

    assert config.id_field == "id"
    assert config.relation_conflicts == (
        ("activityByActivity", "activityPrerequisitesByActivity"),
    )
    assert config.is_wrapper_type("UpdateActivityPayload")
    assert config.is_wrapper_type("Query")
    assert config.is_connection_type("CommentsConnection")
    assert not config.is_connection_type("Comment")


def test_normalization_config_defaults(clean_env: pytest.MonkeyPatch) -> None:  # noqa: ARG001
    config = get_normalization_config()

    assert config.id_field == "nodeId"
    assert config.relation_conflicts == ()


@pytest.mark.parametrize("content", ["not json", "[]", '{"a": 1}'])
def test_load_relation_conflicts_rejects_bad_files(tmp_path: Path, content: str) -> None:
    path = tmp_path / "conflicts.json"
    path.write_text(content)

    with pytest.raises(ConfigurationError):
        load_relation_conflicts(path)


def test_storage_config_prefers_explicit_dir(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    clean_env.setenv("NODECACHE_DATA_DIR", str(tmp_path / "data"))

    storage = get_storage_config()

    assert storage.snapshot_path() == (tmp_path / "data" / SNAPSHOT_FILENAME).resolve()
    assert (tmp_path / "data").is_dir()


def test_database_config_uses_env_override(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("DATABASE_URI", "sqlite:///override.db")

    assert get_database_config().uri == "sqlite:///override.db"


def test_database_config_defaults_to_data_dir(
    clean_env: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    clean_env.setenv("NODECACHE_DATA_DIR", str(tmp_path / "data"))

    uri = get_database_config().uri

    expected = (tmp_path / "data" / "nodecache.db").resolve()
    assert uri == f"sqlite+pysqlite:///{expected}"
