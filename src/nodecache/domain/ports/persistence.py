"""Port for persisting store snapshots."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from nodecache.domain.types import Entity, StoreSnapshot


@runtime_checkable
class SnapshotRepository(Protocol):
    """Durable home for the full ``type -> id -> entity`` mapping."""

    def save(self, snapshot: Mapping[str, Mapping[str, Entity]]) -> None: ...

    def load(self) -> StoreSnapshot: ...

    def clear(self) -> None: ...
