from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from ..domain import CalendarItem, DateRange, Event, Navigation
from ..services import SaveOutcome
from .models import CalendarItemPayload, CalendarPayload, EventPayload, NavigationPayload, SaveOutcomePayload


def serialize_event(event: Event) -> Dict[str, Any]:
    return EventPayload.from_domain(event).model_dump(mode="json")


def serialize_navigation(navigation: Navigation) -> Dict[str, Any]:
    return NavigationPayload.from_domain(navigation).model_dump(mode="json")


def serialize_outcome(outcome: SaveOutcome) -> Dict[str, Any]:
    return SaveOutcomePayload.from_domain(outcome).model_dump(mode="json")


def serialize_calendar(
    visible: DateRange,
    items: Iterable[CalendarItem],
    *,
    loading: bool = False,
    error: Optional[str] = None,
) -> Dict[str, Any]:
    payload = CalendarPayload(
        start=visible.start,
        end=visible.end,
        loading=loading,
        error=error,
        items=[CalendarItemPayload.from_domain(item) for item in items],
    )
    return payload.model_dump(mode="json")
