"""Helpers shared by the race and event record projections.

Stored start times are RFC 3339 / ISO 8601 text. Status is never persisted;
it is derived from the start time and a reference time supplied by the caller.
"""

from __future__ import annotations

from datetime import UTC, datetime

# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------

STATUS_OPEN = "OPEN"
STATUS_CLOSED = "CLOSED"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class RacebookError(Exception):
    """Base class for errors raised by racebook."""


class RecordNotFoundError(RacebookError):
    """No row matched the requested id."""

    def __init__(self, table: str, record_id: int) -> None:
        super().__init__(f"no {table} row with id={record_id}")
        self.table = table
        self.record_id = record_id


class TimestampDecodeError(RacebookError):
    """A stored advertised start time could not be parsed."""


class ServiceNotFoundError(RacebookError):
    """Caller-visible not-found error raised by the service layer."""

    def __init__(self, kind: str, record_id: int) -> None:
        super().__init__(f"{kind} not found for id={record_id}")
        self.kind = kind
        self.record_id = record_id


# ---------------------------------------------------------------------------
# Pure functions
# ---------------------------------------------------------------------------


def parse_timestamp(value: object) -> datetime:
    """Decode a stored start time into an aware UTC datetime.

    Accepts ISO 8601 text (a trailing ``Z`` is allowed) or a datetime. Naive
    values are taken to be UTC.

    Rows are expected to hold the ``YYYY-MM-DDTHH:MM:SSZ`` text written by
    :func:`format_timestamp`. ORDER BY compares the stored TEXT, so rows in
    any other form (``+10:00`` offsets, naive text) still decode here but do
    not sort chronologically against canonical rows.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as exc:
            raise TimestampDecodeError(f"invalid advertised_start_time {value!r}") from exc
    else:
        raise TimestampDecodeError(f"invalid advertised_start_time {value!r}")

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def format_timestamp(dt: datetime) -> str:
    """Format a datetime as RFC 3339 UTC text, e.g. ``2023-07-15T12:00:00Z``."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def derive_status(start: datetime, current_time: datetime) -> str:
    """Return ``"CLOSED"`` if *start* is strictly before *current_time*, else ``"OPEN"``."""
    if current_time.tzinfo is None:
        current_time = current_time.replace(tzinfo=UTC)
    return STATUS_CLOSED if start < current_time else STATUS_OPEN
