from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date
from typing import Optional, Sequence

import orjson

from .api.serializers import serialize_calendar
from .domain import CalendarView
from .logging import configure_logging
from .services import CalendarService, EventLifecycleController, OverdueSweeper, ServiceContext
from .services.calendar import default_range, range_for_viewport


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Curator portal event lifecycle and calendar tools.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    api_parser = subparsers.add_parser("api", help="Start the FastAPI server exposing the lifecycle and calendar API.")
    api_parser.add_argument("--host", default="127.0.0.1")
    api_parser.add_argument("--port", type=int, default=8000)

    calendar_parser = subparsers.add_parser("calendar", help="Print the calendar items for a viewport as JSON.")
    calendar_parser.add_argument("--view", choices=[view.value for view in CalendarView], default=CalendarView.MONTH.value)
    calendar_parser.add_argument("--start", type=date.fromisoformat, help="First visible day (YYYY-MM-DD).")
    calendar_parser.add_argument("--end", type=date.fromisoformat, help="Last visible day (YYYY-MM-DD).")

    sweep_parser = subparsers.add_parser("sweep-overdue", help="Cancel planned events left unmarked past their date.")
    sweep_parser.add_argument("--today", type=date.fromisoformat, help="Reference day (defaults to today).")

    return parser


async def _print_calendar(view: CalendarView, start: Optional[date], end: Optional[date]) -> int:
    context = ServiceContext()
    service = CalendarService(context)
    try:
        if start is None or end is None:
            fallback = default_range(date.today())
            start = start or fallback.start
            end = end or fallback.end
        visible = range_for_viewport(view, start, end)
        items = await service.load_visible(visible)
    finally:
        await context.aclose()
    payload = serialize_calendar(visible, items, loading=service.loading, error=service.error)
    sys.stdout.buffer.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2) + b"\n")
    return 1 if service.error else 0


async def _sweep_overdue(today: Optional[date]) -> int:
    context = ServiceContext()
    sweeper = OverdueSweeper(EventLifecycleController(context))
    try:
        report = await sweeper.run(today)
    finally:
        await context.aclose()
    sys.stdout.buffer.write(orjson.dumps(report.to_record(), option=orjson.OPT_INDENT_2) + b"\n")
    return 1 if report.failed else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure_logging()
    logging.getLogger(__name__).info("Curator portal CLI starting")
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "api":
        from .services.http import run_local_server

        run_local_server(host=args.host, port=args.port)
        return 0
    if args.command == "calendar":
        return asyncio.run(_print_calendar(CalendarView(args.view), args.start, args.end))
    if args.command == "sweep-overdue":
        return asyncio.run(_sweep_overdue(args.today))
    parser.print_help()  # pragma: no cover - argparse enforces choices
    return 2


if __name__ == "__main__":
    sys.exit(main())
