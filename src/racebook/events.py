"""Sports event records — domain object, row projection and demo data."""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from racebook.races import demo_name, demo_start
from racebook.records import derive_status, format_timestamp, parse_timestamp

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


@dataclass
class Event:
    """A single sports event as returned to callers."""

    id: int
    meeting_id: int
    name: str
    visible: bool
    advertised_start_time: datetime  # UTC
    status: str = ""  # "OPEN" | "CLOSED", derived on read


EVENT_COLUMNS: tuple[str, ...] = (
    "id",
    "meeting_id",
    "name",
    "visible",
    "advertised_start_time",
)

EVENTS_LIST_QUERY = f"SELECT {', '.join(EVENT_COLUMNS)} FROM events"  # noqa: S608

EVENTS_INSERT_QUERY = (
    "INSERT OR IGNORE INTO events"
    " (id, meeting_id, name, visible, advertised_start_time)"
    " VALUES (?, ?, ?, ?, ?)"
)


def project_events(rows: Iterable[Sequence[Any]], current_time: datetime) -> list[Event]:
    """Map raw rows to Event objects; see project_races() for the rules."""
    events: list[Event] = []
    for row in rows:
        event_id, meeting_id, name, visible, start_raw = tuple(row)
        start = parse_timestamp(start_raw)
        events.append(
            Event(
                id=int(event_id),
                meeting_id=int(meeting_id),
                name=name,
                visible=bool(visible),
                advertised_start_time=start,
                status=derive_status(start, current_time),
            )
        )
    return events


def demo_events(
    count: int, now: datetime, rng: random.Random | None = None
) -> list[tuple[Any, ...]]:
    """Build *count* insert tuples (ids 1..count) matching EVENTS_INSERT_QUERY."""
    rng = rng or random.Random()  # noqa: S311
    return [
        (
            i,
            rng.randint(1, 10),
            demo_name(rng),
            rng.randint(0, 1),
            format_timestamp(demo_start(now, rng)),
        )
        for i in range(1, count + 1)
    ]
