"""Shared pytest fixtures."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
import pytest_asyncio

from racebook.events import EVENTS_INSERT_QUERY
from racebook.races import RACES_INSERT_QUERY
from racebook.storage import EventsRepo, RacesRepo, Storage, StorageConfig

# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------

# Reference "current time" for every read in the tests; equal to row 2's start
NOW = datetime(2023, 7, 15, 12, 0, 0, tzinfo=UTC)

START_2022 = datetime(2022, 7, 15, 12, 0, 0, tzinfo=UTC)
START_2023 = datetime(2023, 7, 15, 12, 0, 0, tzinfo=UTC)
START_2024 = datetime(2024, 7, 15, 12, 0, 0, tzinfo=UTC)

# ---------------------------------------------------------------------------
# Fixture rows — (id, meeting_id, name, [number,] visible, start)
# ---------------------------------------------------------------------------

RACE_ROWS = [
    (1, 5, "North Dakota foes", 12, 0, "2022-07-15T12:00:00Z"),
    (2, 1, "Connecticut griffins", 1, 1, "2023-07-15T12:00:00Z"),
    (3, 8, "Rhode Island ghosts", 3, 0, "2024-07-15T12:00:00Z"),
]

EVENT_ROWS = [
    (1, 5, "North Dakota foes", 0, "2022-07-15T12:00:00Z"),
    (2, 1, "Connecticut griffins", 1, "2023-07-15T12:00:00Z"),
    (3, 8, "Rhode Island ghosts", 0, "2024-07-15T12:00:00Z"),
]

# ---------------------------------------------------------------------------
# Storage fixtures
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def storage() -> Storage:  # type: ignore[misc]
    """In-memory Storage instance with empty tables."""
    s = Storage(StorageConfig(db_path=":memory:", seed_count=25))
    await s.connect()
    yield s
    await s.close()


@pytest_asyncio.fixture
async def fixture_storage(storage: Storage) -> Storage:
    """In-memory Storage holding the three known races and events."""
    await storage.insert_or_ignore(RACES_INSERT_QUERY, RACE_ROWS)
    await storage.insert_or_ignore(EVENTS_INSERT_QUERY, EVENT_ROWS)
    return storage


@pytest.fixture
def races_repo(fixture_storage: Storage) -> RacesRepo:
    return RacesRepo(fixture_storage)


@pytest.fixture
def events_repo(fixture_storage: Storage) -> EventsRepo:
    return EventsRepo(fixture_storage)
