from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain import CalendarItem, Event, Navigation
from ..services import SaveOutcome
from ..services.calendar import display_class


class EventPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    description: str
    start_date: date
    end_date: Optional[date] = Field(default=None)
    status: str
    responsible_full_name: str = Field(default="")
    location_text: Optional[str] = Field(default=None)
    created_by_user_id: Optional[int] = Field(default=None)
    extra: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, event: Event) -> "EventPayload":
        return cls(
            id=event.id,
            title=event.title,
            description=event.description,
            start_date=event.start_date,
            end_date=event.end_date,
            status=event.status.value,
            responsible_full_name=event.responsible_full_name,
            location_text=event.location_text,
            created_by_user_id=event.created_by_user_id,
            extra=event.extra,
        )


class CalendarItemPayload(BaseModel):
    kind: str
    title: str
    start: date
    end: date
    all_day: bool
    display_class: str
    event_id: Optional[int] = Field(default=None)
    status: Optional[str] = Field(default=None)

    @classmethod
    def from_domain(cls, item: CalendarItem) -> "CalendarItemPayload":
        event = item.source if isinstance(item.source, Event) else None
        return cls(
            kind=item.kind.value,
            title=item.title,
            start=item.start,
            end=item.end,
            all_day=item.all_day,
            display_class=display_class(item),
            event_id=event.id if event else None,
            status=event.status.value if event else None,
        )


class NavigationPayload(BaseModel):
    target: str
    params: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, navigation: Navigation) -> "NavigationPayload":
        return cls(target=navigation.target.value, params=dict(navigation.params))


class SaveOutcomePayload(BaseModel):
    event: EventPayload
    navigation: NavigationPayload

    @classmethod
    def from_domain(cls, outcome: SaveOutcome) -> "SaveOutcomePayload":
        return cls(
            event=EventPayload.from_domain(outcome.event),
            navigation=NavigationPayload.from_domain(outcome.navigation),
        )


class CalendarPayload(BaseModel):
    start: date
    end: date
    loading: bool
    error: Optional[str] = Field(default=None)
    items: List[CalendarItemPayload] = Field(default_factory=list)
