"""Normalization constants and relation conflict configuration."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from .env import optional_env_var
from .errors import ConfigurationError

DEFAULT_ID_FIELD: Final[str] = "nodeId"
DEFAULT_TYPENAME_FIELD: Final[str] = "__typename"
DEFAULT_PAYLOAD_SUFFIX: Final[str] = "Payload"
DEFAULT_ROOT_MARKER: Final[str] = "Query"
DEFAULT_CONNECTION_SUFFIX: Final[str] = "Connection"


@dataclass(frozen=True, slots=True)
class NormalizationConfig:
    """Reserved keys and type-name conventions shared by every entity type."""

    id_field: str = DEFAULT_ID_FIELD
    typename_field: str = DEFAULT_TYPENAME_FIELD
    payload_suffix: str = DEFAULT_PAYLOAD_SUFFIX
    root_marker: str = DEFAULT_ROOT_MARKER
    connection_suffix: str = DEFAULT_CONNECTION_SUFFIX
    nodes_key: str = "nodes"
    edges_key: str = "edges"
    node_key: str = "node"
    relation_conflicts: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    def is_wrapper_type(self, type_name: str) -> bool:
        return (
            type_name.endswith(self.payload_suffix)
            or type_name.casefold() == self.root_marker.casefold()
        )

    def is_connection_type(self, type_name: str) -> bool:
        return type_name.endswith(self.connection_suffix)


def load_relation_conflicts(path: Path) -> tuple[tuple[str, str], ...]:
    """Read ``{"fieldName": "inverseFieldName", ...}`` pairs from a JSON file."""

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot read relation conflicts from {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Relation conflicts in {path} must be a JSON object")

    pairs: list[tuple[str, str]] = []
    for key, value in payload.items():
        if not isinstance(value, str):
            raise ConfigurationError(f"Relation conflict for {key!r} must be a string")
        pairs.append((str(key), value))
    return tuple(pairs)


def get_normalization_config() -> NormalizationConfig:
    conflicts_path = optional_env_var("NODECACHE_RELATION_CONFLICTS")
    conflicts = load_relation_conflicts(Path(conflicts_path)) if conflicts_path else ()
    return NormalizationConfig(
        id_field=optional_env_var("NODECACHE_ID_FIELD") or DEFAULT_ID_FIELD,
        relation_conflicts=conflicts,
    )
