"""FastAPI request/response interface for the racing and sports services.

The app factory pattern (create_app) keeps this testable without running a
live server. Routes:

  POST /v1/list-races      ListRacesRequest  → ListRacesResponse
  GET  /v1/races/{id}                        → GetRaceResponse
  POST /v1/list-events     ListEventsRequest → ListEventsResponse
  GET  /v1/events/{id}                       → GetEventResponse

A missing id is a 404; decode and store failures surface as 500.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fastapi import FastAPI, HTTPException

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
from racebook.records import ServiceNotFoundError
from racebook.service import RacingService, SportsService, utc_now
from racebook.storage import EventsRepo, RacesRepo

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from racebook.storage import Storage

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ServerConfig:
    """Web server bind configuration (from environment variables)."""

    web_host: str = field(default_factory=lambda: os.environ.get("WEB_HOST", "0.0.0.0"))
    web_port: int = field(default_factory=lambda: int(os.environ.get("WEB_PORT", "9000")))


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(
    storage: Storage,
    *,
    races_repo: RacesRepo | None = None,
    events_repo: EventsRepo | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> FastAPI:
    """Create and return the FastAPI application bound to the given Storage.

    Repositories default to fresh ones over *storage*; pass them in to share
    the seed-once guard with the caller.
    """
    app = FastAPI(title="Racebook")
    racing = RacingService(races_repo or RacesRepo(storage), clock=clock)
    sports = SportsService(events_repo or EventsRepo(storage), clock=clock)

    # ------------------------------------------------------------------
    # Racing
    # ------------------------------------------------------------------

    @app.post("/v1/list-races", response_model=ListRacesResponse)
    async def api_list_races(body: ListRacesRequest) -> ListRacesResponse:
        return await racing.list_races(body)

    @app.get("/v1/races/{race_id}", response_model=GetRaceResponse)
    async def api_get_race(race_id: int) -> GetRaceResponse:
        try:
            return await racing.get_race(GetRaceRequest(id=race_id))
        except ServiceNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    # ------------------------------------------------------------------
    # Sports
    # ------------------------------------------------------------------

    @app.post("/v1/list-events", response_model=ListEventsResponse)
    async def api_list_events(body: ListEventsRequest) -> ListEventsResponse:
        return await sports.list_events(body)

    @app.get("/v1/events/{event_id}", response_model=GetEventResponse)
    async def api_get_event(event_id: int) -> GetEventResponse:
        try:
            return await sports.get_event(GetEventRequest(id=event_id))
        except ServiceNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    return app
