from __future__ import annotations

from datetime import date

import pytest

from curator_portal import cli


def test_parser_accepts_calendar_viewport():
    args = cli.build_parser().parse_args(["calendar", "--view", "week", "--start", "2024-05-06", "--end", "2024-05-12"])
    assert args.command == "calendar"
    assert args.view == "week"
    assert args.start == date(2024, 5, 6)
    assert args.end == date(2024, 5, 12)


def test_parser_rejects_unknown_view():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["calendar", "--view", "year"])


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_sweep_command_parses_reference_day():
    args = cli.build_parser().parse_args(["sweep-overdue", "--today", "2024-05-10"])
    assert args.today == date(2024, 5, 10)
