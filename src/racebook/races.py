"""Race records — domain object, row projection and demo data.

Pure domain logic only. No database access here; the repository lives in
storage.py. This module is importable without a database or a running server.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from racebook.records import derive_status, format_timestamp, parse_timestamp

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


# ---------------------------------------------------------------------------
# Domain objects
# ---------------------------------------------------------------------------


@dataclass
class Race:
    """A single race as returned to callers."""

    id: int
    meeting_id: int
    name: str  # e.g. "North Dakota foes"
    number: int  # race number within the meeting
    visible: bool
    advertised_start_time: datetime  # UTC
    status: str = ""  # "OPEN" | "CLOSED", derived on read


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

# Column order of every races SELECT; project_races() relies on it
RACE_COLUMNS: tuple[str, ...] = (
    "id",
    "meeting_id",
    "name",
    "number",
    "visible",
    "advertised_start_time",
)

RACES_LIST_QUERY = f"SELECT {', '.join(RACE_COLUMNS)} FROM races"  # noqa: S608

RACES_INSERT_QUERY = (
    "INSERT OR IGNORE INTO races"
    " (id, meeting_id, name, number, visible, advertised_start_time)"
    " VALUES (?, ?, ?, ?, ?, ?)"
)


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------


def project_races(rows: Iterable[Sequence[Any]], current_time: datetime) -> list[Race]:
    """Map raw rows to Race objects with status derived from *current_time*.

    Raises TimestampDecodeError if any row carries a malformed start time; no
    partial list is returned in that case.
    """
    races: list[Race] = []
    for row in rows:
        race_id, meeting_id, name, number, visible, start_raw = tuple(row)
        start = parse_timestamp(start_raw)
        races.append(
            Race(
                id=int(race_id),
                meeting_id=int(meeting_id),
                name=name,
                number=int(number),
                visible=bool(visible),
                advertised_start_time=start,
                status=derive_status(start, current_time),
            )
        )
    return races


# ---------------------------------------------------------------------------
# Demo data
# ---------------------------------------------------------------------------

_PLACES = [
    "North Dakota",
    "Connecticut",
    "Rhode Island",
    "Ballard",
    "Flemington",
    "Randwick",
    "Caulfield",
    "Eagle Farm",
    "Moonee Valley",
    "Rosehill",
]

_NOUNS = ["foes", "griffins", "ghosts", "comets", "rivals", "sprinters", "stayers", "chargers"]


def demo_name(rng: random.Random) -> str:
    """Return a short made-up display name, e.g. ``"Rhode Island ghosts"``."""
    return f"{rng.choice(_PLACES)} {rng.choice(_NOUNS)}"


def demo_start(now: datetime, rng: random.Random) -> datetime:
    """Return a start time uniformly within [now - 1 day, now + 2 days]."""
    window_s = int(timedelta(days=3).total_seconds())
    return now - timedelta(days=1) + timedelta(seconds=rng.randint(0, window_s))


def demo_races(
    count: int, now: datetime, rng: random.Random | None = None
) -> list[tuple[Any, ...]]:
    """Build *count* insert tuples (ids 1..count) matching RACES_INSERT_QUERY."""
    rng = rng or random.Random()  # noqa: S311
    return [
        (
            i,
            rng.randint(1, 10),
            demo_name(rng),
            rng.randint(1, 12),
            rng.randint(0, 1),
            format_timestamp(demo_start(now, rng)),
        )
        for i in range(1, count + 1)
    ]
