"""SQLAlchemy table metadata for persisted store snapshots."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Column, Index, MetaData, String, Table

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

metadata = MetaData()

cache_entity_table = Table(
    "cache_entities",
    metadata,
    Column("type_name", String, primary_key=True),
    Column("entity_id", String, primary_key=True),
    Column("payload", JSON, nullable=False),
    Index("ix_cache_entities_type_name", "type_name"),
)


def create_all_tables(engine: Engine) -> None:
    log.debug("Ensuring cache tables exist")
    metadata.create_all(engine, checkfirst=True)
