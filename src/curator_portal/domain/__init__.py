"""Domain models for the curator event lifecycle and calendar."""

from __future__ import annotations

from .enums import CalendarItemKind, CalendarView, EventStatus, LifecycleAction, NavigationTarget
from .forms import EventForm
from .models import CalendarItem, DateRange, Event, EventPage, FixedDate, Navigation

__all__ = [
    "CalendarItem",
    "CalendarItemKind",
    "CalendarView",
    "DateRange",
    "Event",
    "EventForm",
    "EventPage",
    "EventStatus",
    "FixedDate",
    "LifecycleAction",
    "Navigation",
    "NavigationTarget",
]
