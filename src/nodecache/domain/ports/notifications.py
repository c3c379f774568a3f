"""Port for store change notifications."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ChangeNotifier(Protocol):
    """Receives the name of every entity type whose stored entities changed."""

    def notify(self, type_name: str) -> None: ...
