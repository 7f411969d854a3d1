"""Tests for race projection, demo data and the races repository."""

from __future__ import annotations

import random
from datetime import UTC, datetime, timedelta, timezone
from typing import TYPE_CHECKING

import pytest
from conftest import NOW, START_2022, START_2023, START_2024

from racebook.messages import (
    ListRequestFilter,
    ListRequestOrderBy,
    OrderByDirection,
    VisibilityStatus,
)
from racebook.races import RACE_COLUMNS, RACES_INSERT_QUERY, Race, demo_races, project_races
from racebook.records import (
    RecordNotFoundError,
    TimestampDecodeError,
    format_timestamp,
    parse_timestamp,
)
from racebook.storage import RacesRepo

if TYPE_CHECKING:
    from racebook.storage import Storage

_RACE_1 = Race(1, 5, "North Dakota foes", 12, False, START_2022, "CLOSED")
_RACE_2 = Race(2, 1, "Connecticut griffins", 1, True, START_2023, "OPEN")
_RACE_3 = Race(3, 8, "Rhode Island ghosts", 3, False, START_2024, "OPEN")


# ---------------------------------------------------------------------------
# Pure function tests (no DB needed)
# ---------------------------------------------------------------------------


def test_project_races_decodes_columns_in_order() -> None:
    rows = [(2, 1, "Connecticut griffins", 1, 1, "2023-07-15T12:00:00Z")]
    assert project_races(rows, NOW) == [_RACE_2]


def test_project_races_empty() -> None:
    assert project_races([], NOW) == []


def test_project_races_status_uses_reference_time() -> None:
    rows = [(1, 5, "North Dakota foes", 12, 0, "2022-07-15T12:00:00Z")]
    assert project_races(rows, START_2022 - timedelta(days=1))[0].status == "OPEN"
    assert project_races(rows, START_2022 + timedelta(days=1))[0].status == "CLOSED"


def test_project_races_bad_timestamp_fails_whole_batch() -> None:
    rows = [
        (1, 5, "North Dakota foes", 12, 0, "2022-07-15T12:00:00Z"),
        (2, 1, "Connecticut griffins", 1, 1, "garbage"),
    ]
    with pytest.raises(TimestampDecodeError):
        project_races(rows, NOW)


def test_race_columns_match_select() -> None:
    assert RACE_COLUMNS[0] == "id"
    assert RACE_COLUMNS[-1] == "advertised_start_time"
    assert "number" in RACE_COLUMNS


def test_demo_races_shape() -> None:
    rows = demo_races(50, NOW, random.Random(7))
    assert [r[0] for r in rows] == list(range(1, 51))
    for _id, meeting_id, name, number, visible, start in rows:
        assert 1 <= meeting_id <= 10
        assert name
        assert 1 <= number <= 12
        assert visible in (0, 1)
        assert NOW - timedelta(days=1) <= parse_timestamp(start) <= NOW + timedelta(days=2)


# ---------------------------------------------------------------------------
# Repository tests (in-memory DB via conftest fixtures)
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("flt", "order_by", "expected"),
    [
        pytest.param(None, None, [_RACE_1, _RACE_2, _RACE_3], id="no-filter"),
        pytest.param(
            ListRequestFilter(meeting_ids=[5, 8]), None, [_RACE_1, _RACE_3], id="meeting-ids"
        ),
        pytest.param(
            ListRequestFilter(meeting_ids=[5, 1], visibility_status=VisibilityStatus.VISIBLE),
            None,
            [_RACE_2],
            id="meeting-ids-and-visible",
        ),
        pytest.param(
            ListRequestFilter(visibility_status=VisibilityStatus.VISIBLE),
            None,
            [_RACE_2],
            id="visible",
        ),
        pytest.param(
            ListRequestFilter(visibility_status=VisibilityStatus.HIDDEN),
            None,
            [_RACE_1, _RACE_3],
            id="hidden",
        ),
        pytest.param(
            None,
            [ListRequestOrderBy(field_name="advertisedStartTime", direction=OrderByDirection.DESC)],
            [_RACE_3, _RACE_2, _RACE_1],
            id="start-desc",
        ),
        pytest.param(ListRequestFilter(meeting_ids=[99]), None, [], id="no-match"),
    ],
)
async def test_list_races(
    races_repo: RacesRepo,
    flt: ListRequestFilter | None,
    order_by: list[ListRequestOrderBy] | None,
    expected: list[Race],
) -> None:
    assert await races_repo.list(flt, order_by, NOW) == expected


async def test_get_race(races_repo: RacesRepo) -> None:
    assert await races_repo.get(2, NOW) == _RACE_2


async def test_get_race_not_found(races_repo: RacesRepo) -> None:
    with pytest.raises(RecordNotFoundError) as info:
        await races_repo.get(999, NOW)
    assert info.value.record_id == 999


async def test_list_races_bad_stored_timestamp(races_repo: RacesRepo, storage: Storage) -> None:
    await storage.insert_or_ignore(
        "INSERT INTO races (id, meeting_id, name, number, visible, advertised_start_time)"
        " VALUES (?, ?, ?, ?, ?, ?)",
        [(4, 2, "Broken start", 1, 1, "yesterday-ish")],
    )
    with pytest.raises(TimestampDecodeError):
        await races_repo.list(None, None, NOW)


# ---------------------------------------------------------------------------
# Ordering ties and stored text form
# ---------------------------------------------------------------------------

_TIED_START = "2025-01-01T00:00:00Z"


@pytest.mark.parametrize("direction", [OrderByDirection.ASC, OrderByDirection.DESC])
async def test_list_races_equal_starts_keep_storage_order(
    storage: Storage, direction: OrderByDirection
) -> None:
    await storage.insert_or_ignore(
        RACES_INSERT_QUERY,
        [
            (10, 4, "Tied one", 1, 1, _TIED_START),
            (11, 2, "Tied two", 2, 0, _TIED_START),
            (12, 9, "Tied three", 3, 1, _TIED_START),
            (13, 1, "Tied four", 4, 0, _TIED_START),
        ],
    )
    repo = RacesRepo(storage)
    order = [ListRequestOrderBy(field_name="advertisedStartTime", direction=direction)]
    races = await repo.list(None, order, NOW)
    assert [r.id for r in races] == [10, 11, 12, 13]


async def test_list_races_desc_with_offset_inputs_written_as_utc(storage: Storage) -> None:
    # 22:00+10:00 is 12:00Z, so it sorts below 13:00Z once normalised
    starts = [
        datetime(2023, 7, 15, 22, 0, 0, tzinfo=timezone(timedelta(hours=10))),
        datetime(2023, 7, 15, 13, 0, 0, tzinfo=UTC),
        datetime(2023, 7, 15, 6, 30, 0, tzinfo=timezone(timedelta(hours=-7))),
    ]
    await storage.insert_or_ignore(
        RACES_INSERT_QUERY,
        [(i, 1, f"Race {i}", i, 1, format_timestamp(s)) for i, s in enumerate(starts, 1)],
    )
    repo = RacesRepo(storage)
    order = [ListRequestOrderBy(field_name="advertisedStartTime", direction=OrderByDirection.DESC)]
    races = await repo.list(None, order, NOW)
    assert [r.id for r in races] == [3, 2, 1]
    got = [r.advertised_start_time for r in races]
    assert got == sorted(got, reverse=True)
