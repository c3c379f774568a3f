"""Merge policy for repeated writes of the same entity identity."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ports.notifications import ChangeNotifier
    from .store import NormalizedStore
    from .types import Entity, EntityId

log = getLogger(__name__)


def union_values(existing: list[object], incoming: object) -> list[object]:
    """Order-preserving union: existing items first, then unseen incoming items."""

    if incoming is None:
        return list(existing)
    additions = incoming if isinstance(incoming, list) else [incoming]
    merged = list(existing)
    for item in additions:
        if item not in merged:
            merged.append(item)
    return merged


def merge_records(existing: Entity, incoming: Entity) -> Entity:
    """Combine two records of one identity into a new record.

    List-valued fields accumulate so that pages of a to-many relation seen in
    separate responses add up; every other incoming field replaces the stored one.
    """

    merged = dict(existing)
    for key, value in incoming.items():
        current = existing.get(key)
        if isinstance(current, list):
            merged[key] = union_values(current, value)
        else:
            merged[key] = value
    return merged


@dataclass(slots=True)
class MergePolicy:
    store: NormalizedStore
    notifier: ChangeNotifier | None = None

    def upsert(self, type_name: str, entity_id: EntityId, record: Entity) -> bool:
        """Insert or merge ``record``; return whether the store changed."""

        existing = self.store.get(type_name, entity_id)
        if existing is None:
            self.store.put(type_name, entity_id, record)
            log.debug("Inserted %s:%s", type_name, entity_id)
            self._notify(type_name)
            return True

        if existing == record:
            return False

        self.store.put(type_name, entity_id, merge_records(existing, record))
        log.debug("Merged %s:%s", type_name, entity_id)
        self._notify(type_name)
        return True

    def _notify(self, type_name: str) -> None:
        if self.notifier is not None:
            self.notifier.notify(type_name)
