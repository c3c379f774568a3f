"""SQLAlchemy adapter package for nodecache."""

from __future__ import annotations

from .mappings import cache_entity_table, create_all_tables, metadata
from .repositories import SqlAlchemySnapshotRepository

__all__ = [
    "SqlAlchemySnapshotRepository",
    "cache_entity_table",
    "create_all_tables",
    "metadata",
]
