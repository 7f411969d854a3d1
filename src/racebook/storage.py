"""SQLite persistence layer.

One connection serves both domains. Start times are stored as RFC 3339 UTC
text. Records are seeded once per process and are read-only afterwards; the
status field is derived on every read and never written.
"""

from __future__ import annotations

import asyncio
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import aiosqlite
from loguru import logger

from racebook.events import (
    EVENTS_INSERT_QUERY,
    EVENTS_LIST_QUERY,
    Event,
    demo_events,
    project_events,
)
from racebook.query import build_query
from racebook.races import (
    RACES_INSERT_QUERY,
    RACES_LIST_QUERY,
    Race,
    demo_races,
    project_races,
)
from racebook.records import RecordNotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from racebook.messages import ListRequestFilter, ListRequestOrderBy

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StorageConfig:
    """Configuration for the SQLite storage backend."""

    db_path: str = field(default_factory=lambda: os.environ.get("DB_PATH", "data/racebook.db"))
    seed_count: int = field(default_factory=lambda: int(os.environ.get("SEED_COUNT", "100")))


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS races (
        id                    INTEGER PRIMARY KEY,
        meeting_id            INTEGER,
        name                  TEXT,
        number                INTEGER,
        visible               INTEGER,
        advertised_start_time DATETIME
    );

    CREATE TABLE IF NOT EXISTS events (
        id                    INTEGER PRIMARY KEY,
        meeting_id            INTEGER,
        name                  TEXT,
        visible               INTEGER,
        advertised_start_time DATETIME
    );
"""

# ---------------------------------------------------------------------------
# Storage class
# ---------------------------------------------------------------------------


class Storage:
    """Async SQLite connection shared by the race and event repositories."""

    def __init__(self, config: StorageConfig) -> None:
        self._config = config
        self._db: aiosqlite.Connection | None = None

    @property
    def config(self) -> StorageConfig:
        return self._config

    async def connect(self) -> None:
        """Open the database connection and create tables if missing."""
        if self._config.db_path != ":memory:":
            os.makedirs(os.path.dirname(self._config.db_path) or ".", exist_ok=True)
        self._db = await aiosqlite.connect(self._config.db_path)
        self._db.row_factory = aiosqlite.Row
        logger.info("Storage connected: {}", self._config.db_path)
        await self.create_schema()

    async def close(self) -> None:
        """Close the database connection."""
        if self._db is not None:
            await self._db.close()
            self._db = None
            logger.info("Storage closed")

    def _conn(self) -> aiosqlite.Connection:
        if self._db is None:
            raise RuntimeError("Storage is not connected; call connect() first")
        return self._db

    async def create_schema(self) -> None:
        """Create the races and events tables (idempotent)."""
        db = self._conn()
        await db.executescript(_SCHEMA)
        await db.commit()
        logger.debug("Schema ready")

    async def fetch(self, query: str, args: Sequence[Any] = ()) -> list[aiosqlite.Row]:
        """Run a parameterized SELECT and return all rows."""
        db = self._conn()
        logger.debug("Query: {} args={}", query, list(args))
        cur = await db.execute(query, tuple(args))
        rows = await cur.fetchall()
        await cur.close()
        return list(rows)

    async def insert_or_ignore(self, query: str, rows: Sequence[Sequence[Any]]) -> None:
        """Run an INSERT OR IGNORE for every row and commit once."""
        db = self._conn()
        await db.executemany(query, [tuple(r) for r in rows])
        await db.commit()


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------

R = TypeVar("R", Race, Event)


class _Repo(ABC, Generic[R]):
    """List/get access to one table plus a seed-once guard."""

    _table: str
    _list_query: str
    _insert_query: str

    def __init__(self, storage: Storage) -> None:
        self._storage = storage
        self._seeded = False
        self._init_lock = asyncio.Lock()

    @abstractmethod
    def _project(self, rows: Sequence[Any], current_time: datetime) -> list[R]:
        """Map rows from the list query to records."""

    @abstractmethod
    def _demo_rows(self, count: int, now: datetime) -> list[tuple[Any, ...]]:
        """Build insert tuples for the seed."""

    async def init(self) -> None:
        """Seed demo data once per repository.

        Concurrent first callers wait on the lock until the seed finishes. If
        the seed fails, the error propagates and the next call tries again.
        """
        if self._seeded:
            return
        async with self._init_lock:
            if self._seeded:
                return
            await self._seed()
            self._seeded = True

    async def _seed(self) -> None:
        count = self._storage.config.seed_count
        rows = self._demo_rows(count, datetime.now(UTC))
        await self._storage.insert_or_ignore(self._insert_query, rows)
        logger.info("Seeded {} demo rows into {}", count, self._table)

    async def list(
        self,
        filter: ListRequestFilter | None,
        order_by: Sequence[ListRequestOrderBy] | None,
        current_time: datetime,
    ) -> list[R]:
        """Return the rows matching *filter* in *order_by* order."""
        query, args = build_query(self._list_query, filter, order_by)
        rows = await self._storage.fetch(query, args)
        records = self._project(rows, current_time)
        logger.debug("Listed {} rows from {}", len(records), self._table)
        return records

    async def get(self, record_id: int, current_time: datetime) -> R:
        """Return the row with *record_id*; raise RecordNotFoundError if absent."""
        rows = await self._storage.fetch(self._list_query + " WHERE id = ?", (record_id,))
        records = self._project(rows, current_time)
        if len(records) != 1:
            raise RecordNotFoundError(self._table, record_id)
        return records[0]


class RacesRepo(_Repo[Race]):
    """Repository access to races."""

    _table = "races"
    _list_query = RACES_LIST_QUERY
    _insert_query = RACES_INSERT_QUERY

    def _project(self, rows: Sequence[Any], current_time: datetime) -> list[Race]:
        return project_races(rows, current_time)

    def _demo_rows(self, count: int, now: datetime) -> list[tuple[Any, ...]]:
        return demo_races(count, now)


class EventsRepo(_Repo[Event]):
    """Repository access to sports events."""

    _table = "events"
    _list_query = EVENTS_LIST_QUERY
    _insert_query = EVENTS_INSERT_QUERY

    def _project(self, rows: Sequence[Any], current_time: datetime) -> list[Event]:
        return project_events(rows, current_time)

    def _demo_rows(self, count: int, now: datetime) -> list[tuple[Any, ...]]:
        return demo_events(count, now)
