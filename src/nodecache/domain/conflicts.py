"""Relation conflict table.

Two relation fields on one parent type may point at the same target type
(``activityByActivity`` and ``activityByPrerequisite`` both reach ``Activity``).
Keying both relations by the target type name would make them overwrite each
other, so such fields are registered here together with the key their target
uses for the inverse relation.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field


@dataclass(slots=True)
class RelationConflictTable:
    """Maps an ambiguous relation field to the back-reference key of its target."""

    _entries: dict[str, str] = field(default_factory=dict[str, str])

    @classmethod
    def from_mapping(cls, entries: Mapping[str, str]) -> RelationConflictTable:
        return cls(dict(entries))

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> RelationConflictTable:
        """Register every ``(field, inverse)`` pair in both directions."""

        table = cls()
        for field_name, inverse in pairs:
            table.register(field_name, inverse, symmetric=True)
        return table

    def register(self, field_name: str, inverse: str, *, symmetric: bool = False) -> None:
        self._entries[field_name] = inverse
        if symmetric:
            self._entries[inverse] = field_name

    def get(self, field_name: str) -> str | None:
        return self._entries.get(field_name)

    def __contains__(self, field_name: object) -> bool:
        return field_name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def forward_key(self, field_name: str, target_type: str) -> str:
        """Key under which the owner stores the relation reached through ``field_name``."""

        return field_name if field_name in self._entries else target_type

    def inverse_key(self, field_name: str, owner_type: str) -> str:
        """Key under which the target stores its back-reference to the owner."""

        return self._entries.get(field_name, owner_type)
