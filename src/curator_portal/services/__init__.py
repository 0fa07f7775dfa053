"""Application services orchestrating data access and domain logic."""

from __future__ import annotations

from .calendar import CalendarService
from .context import ServiceContext
from .lifecycle import EventLifecycleController, SaveOutcome
from .overdue import OverdueSweeper, SweepReport

__all__ = [
    "CalendarService",
    "EventLifecycleController",
    "OverdueSweeper",
    "SaveOutcome",
    "ServiceContext",
    "SweepReport",
]
