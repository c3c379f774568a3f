"""JSON file persistence for store snapshots."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, cast

from nodecache.domain.errors import CacheError
from nodecache.domain.ports.persistence import SnapshotRepository
from nodecache.domain.types import Entity

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from nodecache.domain.types import StoreSnapshot

log = getLogger(__name__)


class SnapshotFormatError(CacheError):
    """Raised when a persisted snapshot cannot be decoded."""


@dataclass(slots=True)
class JsonSnapshotRepository:
    """Keep the whole store in one JSON document (``cache.json``)."""

    path: Path

    def save(self, snapshot: Mapping[str, Mapping[str, Entity]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {type_name: dict(bucket) for type_name, bucket in snapshot.items()}
        # readers only ever see a complete file
        staging = self.path.with_suffix(self.path.suffix + ".tmp")
        staging.write_text(json.dumps(payload, default=str), encoding="utf-8")
        os.replace(staging, self.path)
        log.debug("Saved snapshot with %d type(s) to %s", len(payload), self.path)

    def load(self) -> StoreSnapshot:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise SnapshotFormatError(f"Snapshot {self.path} is not valid JSON") from exc
        if not isinstance(raw, dict):
            raise SnapshotFormatError(f"Snapshot {self.path} must hold a JSON object")

        snapshot: StoreSnapshot = {}
        for type_name, bucket in cast(dict[str, object], raw).items():
            if not isinstance(bucket, dict):
                raise SnapshotFormatError(f"Snapshot bucket {type_name!r} is not an object")
            snapshot[type_name] = {
                str(entity_id): entity
                for entity_id, entity in cast(dict[str, Entity], bucket).items()
            }
        log.debug("Loaded snapshot with %d type(s) from %s", len(snapshot), self.path)
        return snapshot

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


if TYPE_CHECKING:
    _repository_check: SnapshotRepository = JsonSnapshotRepository(Path("cache.json"))
