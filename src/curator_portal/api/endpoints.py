from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from ..domain import CalendarItemKind, CalendarView, DateRange, EventForm, EventStatus
from ..services.calendar import range_for_viewport, select_item, select_slot
from .registry import register_api
from .serializers import serialize_calendar, serialize_event, serialize_navigation, serialize_outcome
from .state import api_state


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO date: {value}") from exc


def _parse_status(value: Optional[str]) -> Optional[EventStatus]:
    if value is None or value == "":
        return None
    for status in EventStatus:
        if value in (status.value, status.name) or value.upper() == status.name:
            return status
    raise ValueError(f"Unknown event status: {value}")


@register_api(
    "save_event",
    description="Save event fields and optionally move a planned event to Conducted or Cancelled.",
    category="lifecycle",
    tags=("write", "status"),
)
async def save_event(
    form: Dict[str, Any],
    status: Optional[str] = None,
    current_status: Optional[str] = None,
) -> Dict[str, Any]:
    outcome = await api_state.lifecycle.save(
        EventForm.model_validate(form),
        _parse_status(status),
        current_status=_parse_status(current_status),
    )
    return serialize_outcome(outcome)


@register_api(
    "cancel_event",
    description="Append a cancellation reason to the description and cancel a planned event.",
    category="lifecycle",
    tags=("write", "status"),
)
async def cancel_event(
    form: Dict[str, Any],
    reason: str,
    current_status: Optional[str] = None,
) -> Dict[str, Any]:
    outcome = await api_state.lifecycle.cancel(
        EventForm.model_validate(form),
        reason,
        current_status=_parse_status(current_status),
    )
    return serialize_outcome(outcome)


@register_api(
    "event_actions",
    description="List the lifecycle actions available for an event in its current status.",
    category="lifecycle",
    tags=("read", "status"),
)
async def event_actions(event_id: int, elevated: bool = False) -> Dict[str, Any]:
    event = await api_state.context.events.get_event(event_id)
    actions = api_state.lifecycle.actions_for(event, elevated=elevated)
    return {"event": serialize_event(event), "actions": [action.value for action in actions]}


@register_api(
    "override_event_status",
    description="Privileged override that sets any status on an event without lifecycle checks.",
    category="lifecycle",
    tags=("write", "status", "admin"),
)
async def override_event_status(event_id: int, status: str) -> Dict[str, Any]:
    target = _parse_status(status)
    if target is None:
        raise ValueError("status is required")
    outcome = await api_state.lifecycle.override_status(event_id, target)
    return serialize_outcome(outcome)


@register_api(
    "load_visible_calendar",
    description=(
        "Load events and recurring dates for the inclusive visible date range; "
        "with a view, the range is first derived from that viewport."
    ),
    category="calendar",
    tags=("read",),
)
async def load_visible_calendar(start: str, end: str, view: Optional[str] = None) -> Dict[str, Any]:
    if view:
        items = await api_state.calendar.change_viewport(CalendarView(view), _parse_date(start), _parse_date(end))
    else:
        items = await api_state.calendar.load_visible(DateRange(_parse_date(start), _parse_date(end)))
    return serialize_calendar(
        api_state.calendar.visible_range,
        items,
        loading=api_state.calendar.loading,
        error=api_state.calendar.error,
    )


@register_api(
    "calendar_range_for_view",
    description="Return the date range to load for a month, week, day, or agenda viewport.",
    category="calendar",
    tags=("read", "range"),
)
def calendar_range_for_view(view: str, start: str, end: str) -> Dict[str, str]:
    visible = range_for_viewport(CalendarView(view), _parse_date(start), _parse_date(end))
    return {"start": visible.start.isoformat(), "end": visible.end.isoformat()}


@register_api(
    "select_calendar_item",
    description="Resolve where selecting a displayed calendar item should navigate.",
    category="calendar",
    tags=("read", "navigation"),
)
def select_calendar_item(
    kind: str,
    start: str,
    event_id: Optional[int] = None,
    title: Optional[str] = None,
) -> Dict[str, Any]:
    wanted_kind = CalendarItemKind(kind)
    wanted_start = _parse_date(start)
    for item in api_state.calendar.items:
        if item.kind is not wanted_kind or item.start != wanted_start:
            continue
        if wanted_kind is CalendarItemKind.EVENT_INSTANCE and item.source.id != event_id:
            continue
        if wanted_kind is CalendarItemKind.FIXED_ANNOTATION and item.title != title:
            continue
        return serialize_navigation(select_item(item))
    raise ValueError("Calendar item is not in the displayed collection.")


@register_api(
    "select_calendar_slot",
    description="Resolve where selecting empty calendar days should navigate; end is exclusive.",
    category="calendar",
    tags=("read", "navigation"),
)
def select_calendar_slot(start: str, end: str) -> Dict[str, Any]:
    return serialize_navigation(select_slot(_parse_date(start), _parse_date(end)))


@register_api(
    "set_backend_token",
    description="Attach the bearer token issued by the portal's sign-in to backend requests; empty clears it.",
    category="session",
    tags=("write", "auth"),
)
def set_backend_token(token: Optional[str] = None) -> Dict[str, bool]:
    if token:
        api_state.context.gateway.set_token(token)
    else:
        api_state.context.gateway.clear_token()
    return {"authenticated": bool(token)}


@register_api(
    "sweep_overdue_events",
    description="Cancel planned events that passed their date by more than the grace period.",
    category="lifecycle",
    tags=("write", "maintenance"),
)
async def sweep_overdue_events(today: Optional[str] = None) -> Dict[str, Any]:
    report = await api_state.overdue.run(_parse_date(today) if today else None)
    return report.to_record()
