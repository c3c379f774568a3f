"""Snapshot repository backed by a relational table."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, cast

from sqlalchemy import create_engine, delete, insert, select

from nodecache.adapters.sqlalchemy.mappings import cache_entity_table, create_all_tables
from nodecache.config.storage import get_database_config
from nodecache.domain.ports.persistence import SnapshotRepository

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy.engine import Engine

    from nodecache.domain.types import Entity, StoreSnapshot

log = getLogger(__name__)


class SqlAlchemySnapshotRepository:
    """One row per entity: ``(type_name, entity_id) -> payload``.

    ``save`` replaces the table contents inside a single transaction, so a
    snapshot is written completely or not at all.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        create_all_tables(engine)

    @classmethod
    def from_uri(cls, database_uri: str | None = None) -> SqlAlchemySnapshotRepository:
        uri = database_uri or get_database_config().uri
        return cls(create_engine(uri, future=True))

    def save(self, snapshot: Mapping[str, Mapping[str, Entity]]) -> None:
        rows = [
            {"type_name": type_name, "entity_id": entity_id, "payload": dict(entity)}
            for type_name, bucket in snapshot.items()
            for entity_id, entity in bucket.items()
        ]
        with self.engine.begin() as connection:
            connection.execute(delete(cache_entity_table))
            if rows:
                connection.execute(insert(cache_entity_table), rows)
        log.debug("Saved %d cached entities", len(rows))

    def load(self) -> StoreSnapshot:
        stmt = select(
            cache_entity_table.c.type_name,
            cache_entity_table.c.entity_id,
            cache_entity_table.c.payload,
        ).order_by(cache_entity_table.c.type_name)
        snapshot: StoreSnapshot = {}
        with self.engine.connect() as connection:
            for type_name, entity_id, payload in connection.execute(stmt):
                snapshot.setdefault(type_name, {})[entity_id] = cast("Entity", payload)
        return snapshot

    def clear(self) -> None:
        with self.engine.begin() as connection:
            connection.execute(delete(cache_entity_table))
        log.debug("Cleared cached entities")


if TYPE_CHECKING:
    _repository_check: type[SnapshotRepository] = SqlAlchemySnapshotRepository
