"""Entry point — wires storage, repositories and the web app together.

Business logic lives in the other modules; this module only orchestrates them.

Subcommands:
  serve        Seed demo data and serve the racing and sports APIs.
  seed         Create the schema and seed demo data, then exit.
  list-races   Print races matching a filter.
  get-race     Print one race by id.
  list-events  Print sports events matching a filter.
  get-event    Print one sports event by id.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from racebook.events import Event
    from racebook.messages import ListRequestFilter, ListRequestOrderBy
    from racebook.races import Race


def _load_env() -> None:
    """Load .env file if present (best-effort)."""
    try:
        from dotenv import load_dotenv

        load_dotenv()
    except ImportError:  # pragma: no cover
        pass


def _setup_logging() -> None:
    import os

    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logger.remove()
    logger.add(sys.stderr, level=log_level)


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


async def _serve() -> None:
    """Seed both repositories, then run uvicorn until cancelled."""
    import uvicorn

    from racebook.storage import EventsRepo, RacesRepo, Storage, StorageConfig
    from racebook.web import ServerConfig, create_app

    storage_config = StorageConfig()
    server_config = ServerConfig()
    storage = Storage(storage_config)
    await storage.connect()
    try:
        races_repo = RacesRepo(storage)
        events_repo = EventsRepo(storage)
        await races_repo.init()
        await events_repo.init()

        app = create_app(storage, races_repo=races_repo, events_repo=events_repo)
        server = uvicorn.Server(
            uvicorn.Config(
                app,
                host=server_config.web_host,
                port=server_config.web_port,
                log_level="info",
            )
        )
        logger.info(
            "Racebook listening on {}:{} db={}",
            server_config.web_host,
            server_config.web_port,
            storage_config.db_path,
        )
        await server.serve()
    finally:
        await storage.close()
        logger.info("Racebook stopped")


# ---------------------------------------------------------------------------
# seed
# ---------------------------------------------------------------------------


async def _seed() -> None:
    from racebook.storage import EventsRepo, RacesRepo, Storage, StorageConfig

    storage = Storage(StorageConfig())
    await storage.connect()
    try:
        await RacesRepo(storage).init()
        await EventsRepo(storage).init()
    finally:
        await storage.close()


# ---------------------------------------------------------------------------
# list / get
# ---------------------------------------------------------------------------


def _build_filter(meeting_ids: Sequence[int], visibility: str | None) -> ListRequestFilter:
    from racebook.messages import ListRequestFilter, VisibilityStatus

    status = VisibilityStatus(visibility) if visibility else VisibilityStatus.UNSPECIFIED
    return ListRequestFilter(meeting_ids=list(meeting_ids), visibility_status=status)


def _parse_order(specs: Sequence[str]) -> list[ListRequestOrderBy]:
    """Parse ``field[:asc|desc]`` strings into order-by messages."""
    from racebook.messages import ListRequestOrderBy, OrderByDirection

    result = []
    for spec in specs:
        name, _, direction = spec.partition(":")
        try:
            dir_ = OrderByDirection(direction.upper()) if direction else OrderByDirection.ASC
        except ValueError:
            logger.error("Invalid order direction in {!r}; use asc or desc", spec)
            sys.exit(2)
        result.append(ListRequestOrderBy(field_name=name, direction=dir_))
    return result


def _print_records(records: Sequence[Race | Event]) -> None:
    if not records:
        print("No records found.")
        return

    print(f"{'Id':>5}  {'Meeting':>7}  {'Name':<32} {'Vis':>3}  {'Start UTC':<25} {'Status'}")
    print("-" * 88)
    for r in records:
        print(
            f"{r.id:>5}  {r.meeting_id:>7}  {r.name[:32]:<32} {'y' if r.visible else 'n':>3}  "
            f"{r.advertised_start_time.isoformat():<25} {r.status}"
        )


async def _list(domain: str, args: argparse.Namespace) -> None:
    from racebook.messages import ListEventsRequest, ListRacesRequest
    from racebook.service import RacingService, SportsService
    from racebook.storage import EventsRepo, RacesRepo, Storage, StorageConfig

    flt = _build_filter(args.meeting_id, args.visibility)
    order_by = _parse_order(args.order)

    storage = Storage(StorageConfig())
    await storage.connect()
    try:
        records: Sequence[Race | Event]
        if domain == "races":
            resp = await RacingService(RacesRepo(storage)).list_races(
                ListRacesRequest(filter=flt, order_by=order_by)
            )
            records = resp.races
        else:
            ev_resp = await SportsService(EventsRepo(storage)).list_events(
                ListEventsRequest(filter=flt, order_by=order_by)
            )
            records = ev_resp.events
    finally:
        await storage.close()

    _print_records(records)


async def _get(domain: str, record_id: int) -> None:
    from racebook.messages import GetEventRequest, GetRaceRequest
    from racebook.records import ServiceNotFoundError
    from racebook.service import RacingService, SportsService
    from racebook.storage import EventsRepo, RacesRepo, Storage, StorageConfig

    storage = Storage(StorageConfig())
    await storage.connect()
    try:
        record: Race | Event
        if domain == "races":
            record = (
                await RacingService(RacesRepo(storage)).get_race(GetRaceRequest(id=record_id))
            ).race
        else:
            record = (
                await SportsService(EventsRepo(storage)).get_event(GetEventRequest(id=record_id))
            ).event
    except ServiceNotFoundError as exc:
        logger.error("{}", exc)
        sys.exit(1)
    finally:
        await storage.close()

    _print_records([record])


# ---------------------------------------------------------------------------
# CLI wiring
# ---------------------------------------------------------------------------


def _add_list_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--meeting-id",
        type=int,
        action="append",
        default=[],
        metavar="ID",
        help="Only include this meeting id (repeatable)",
    )
    vis = p.add_mutually_exclusive_group()
    vis.add_argument(
        "--visible", dest="visibility", action="store_const", const="VISIBLE", help="Visible only"
    )
    vis.add_argument(
        "--hidden", dest="visibility", action="store_const", const="HIDDEN", help="Hidden only"
    )
    p.add_argument(
        "--order",
        action="append",
        default=[],
        metavar="FIELD[:DIR]",
        help="Order by field, e.g. advertisedStartTime:desc (repeatable)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="racebook",
        description="Racing and sports events service",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve", help="Seed demo data and serve the APIs")
    sub.add_parser("seed", help="Create the schema and seed demo data")

    _add_list_args(sub.add_parser("list-races", help="List races"))
    gr = sub.add_parser("get-race", help="Show one race")
    gr.add_argument("id", type=int, help="Race id")

    _add_list_args(sub.add_parser("list-events", help="List sports events"))
    ge = sub.add_parser("get-event", help="Show one sports event")
    ge.add_argument("id", type=int, help="Event id")

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    _load_env()
    _setup_logging()

    args = _build_parser().parse_args(argv)

    logger.debug("Racebook — command={}", args.command)

    try:
        match args.command:
            case "serve":
                asyncio.run(_serve())
            case "seed":
                asyncio.run(_seed())
            case "list-races":
                asyncio.run(_list("races", args))
            case "list-events":
                asyncio.run(_list("events", args))
            case "get-race":
                asyncio.run(_get("races", args.id))
            case "get-event":
                asyncio.run(_get("events", args.id))
    except KeyboardInterrupt:
        logger.info("Interrupted by user — shutting down")
    except Exception as exc:
        logger.exception("Fatal error: {}", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
