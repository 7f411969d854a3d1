"""Request and response messages for the racing and sports APIs.

Filter and ordering messages are shared by both domains; the query builder
consumes them directly.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from racebook.events import Event
from racebook.races import Race

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class VisibilityStatus(str, Enum):
    UNSPECIFIED = "UNSPECIFIED"
    VISIBLE = "VISIBLE"
    HIDDEN = "HIDDEN"


class OrderByDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


# ---------------------------------------------------------------------------
# Shared filter / ordering
# ---------------------------------------------------------------------------


class ListRequestFilter(BaseModel):
    """Constraints for a list call. Empty fields add no constraint."""

    meeting_ids: list[int] = Field(default_factory=list)
    visibility_status: VisibilityStatus = VisibilityStatus.UNSPECIFIED


class ListRequestOrderBy(BaseModel):
    field_name: str
    direction: OrderByDirection = OrderByDirection.ASC


# ---------------------------------------------------------------------------
# Racing
# ---------------------------------------------------------------------------


class ListRacesRequest(BaseModel):
    filter: ListRequestFilter | None = None
    order_by: list[ListRequestOrderBy] = Field(default_factory=list)


class ListRacesResponse(BaseModel):
    races: list[Race]


class GetRaceRequest(BaseModel):
    id: int


class GetRaceResponse(BaseModel):
    race: Race


# ---------------------------------------------------------------------------
# Sports
# ---------------------------------------------------------------------------


class ListEventsRequest(BaseModel):
    filter: ListRequestFilter | None = None
    order_by: list[ListRequestOrderBy] = Field(default_factory=list)


class ListEventsResponse(BaseModel):
    events: list[Event]


class GetEventRequest(BaseModel):
    id: int


class GetEventResponse(BaseModel):
    event: Event
