"""Racing and sports services — thin adapters over the repositories.

Each call takes a fresh reference time from the clock so that status reflects
the moment of the request, not process start.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from loguru import logger

from racebook.messages import (
    GetEventRequest,
    GetEventResponse,
    GetRaceRequest,
    GetRaceResponse,
    ListEventsRequest,
    ListEventsResponse,
    ListRacesRequest,
    ListRacesResponse,
)
from racebook.records import RecordNotFoundError, ServiceNotFoundError

if TYPE_CHECKING:
    from collections.abc import Callable

    from racebook.storage import EventsRepo, RacesRepo


def utc_now() -> datetime:
    return datetime.now(UTC)


class RacingService:
    """Serves ListRaces and GetRace."""

    def __init__(self, races_repo: RacesRepo, clock: Callable[[], datetime] = utc_now) -> None:
        self._races_repo = races_repo
        self._clock = clock

    async def list_races(self, request: ListRacesRequest) -> ListRacesResponse:
        races = await self._races_repo.list(request.filter, request.order_by, self._clock())
        return ListRacesResponse(races=races)

    async def get_race(self, request: GetRaceRequest) -> GetRaceResponse:
        try:
            race = await self._races_repo.get(request.id, self._clock())
        except RecordNotFoundError as exc:
            logger.warning("Race {} not found", request.id)
            raise ServiceNotFoundError("race", request.id) from exc
        return GetRaceResponse(race=race)


class SportsService:
    """Serves ListEvents and GetEvent."""

    def __init__(self, events_repo: EventsRepo, clock: Callable[[], datetime] = utc_now) -> None:
        self._events_repo = events_repo
        self._clock = clock

    async def list_events(self, request: ListEventsRequest) -> ListEventsResponse:
        events = await self._events_repo.list(request.filter, request.order_by, self._clock())
        return ListEventsResponse(events=events)

    async def get_event(self, request: GetEventRequest) -> GetEventResponse:
        try:
            event = await self._events_repo.get(request.id, self._clock())
        except RecordNotFoundError as exc:
            logger.warning("Event {} not found", request.id)
            raise ServiceNotFoundError("event", request.id) from exc
        return GetEventResponse(event=event)
