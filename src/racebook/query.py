"""SQL construction for list calls.

Pure string building, no database access. Filter values only ever reach the
query as positional ``?`` parameters; the returned argument list lines up with
the placeholders in order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from racebook.messages import OrderByDirection, VisibilityStatus

if TYPE_CHECKING:
    from collections.abc import Sequence

    from racebook.messages import ListRequestFilter, ListRequestOrderBy

# Order-by field name as it appears on the wire, compared case-insensitively
START_TIME_FIELD = "advertisedStartTime"
START_TIME_COLUMN = "advertised_start_time"

# Recognised order-by fields → column
_ORDER_COLUMNS: dict[str, str] = {
    START_TIME_FIELD.lower(): START_TIME_COLUMN,
}


def apply_filter(query: str, filter: ListRequestFilter | None) -> tuple[str, list[Any]]:
    """Append a WHERE clause for *filter* and return ``(query, args)``.

    Example::

        apply_filter("SELECT * FROM races", ListRequestFilter(meeting_ids=[5, 8]))
        # → ("SELECT * FROM races WHERE meeting_id IN (?, ?)", [5, 8])
    """
    clauses: list[str] = []
    args: list[Any] = []

    if filter is None:
        return query, args

    if filter.meeting_ids:
        placeholders = ", ".join("?" for _ in filter.meeting_ids)
        clauses.append(f"meeting_id IN ({placeholders})")
        args.extend(filter.meeting_ids)

    match filter.visibility_status:
        case VisibilityStatus.VISIBLE:
            clauses.append("visible = 1")
        case VisibilityStatus.HIDDEN:
            clauses.append("visible = 0")

    if clauses:
        query += " WHERE " + " AND ".join(clauses)

    return query, args


def apply_order_by(query: str, order_by: Sequence[ListRequestOrderBy] | None) -> str:
    """Append an ORDER BY clause for the recognised entries of *order_by*.

    Unrecognised field names are skipped without error.
    """
    clauses: list[str] = []

    for entry in order_by or ():
        column = _ORDER_COLUMNS.get(entry.field_name.lower())
        if column is None:
            continue
        if entry.direction == OrderByDirection.DESC:
            clauses.append(f"{column} DESC")
        else:
            clauses.append(column)

    if clauses:
        query += " ORDER BY " + ", ".join(clauses)

    return query


def build_query(
    base_query: str,
    filter: ListRequestFilter | None,
    order_by: Sequence[ListRequestOrderBy] | None,
) -> tuple[str, list[Any]]:
    """Return the list query for *filter* and *order_by* plus its arguments."""
    query, args = apply_filter(base_query, filter)
    return apply_order_by(query, order_by), args
