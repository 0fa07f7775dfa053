from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional, Union

from .enums import CalendarItemKind, EventStatus, NavigationTarget


def parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) > 10:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        return date.fromisoformat(text)
    raise ValueError(f"Unsupported date value: {value!r}")


def _optional_date(value: Any) -> Optional[date]:
    if value in (None, ""):
        return None
    return parse_date(value)


_KNOWN_KEYS = frozenset(
    {
        "eventId",
        "title",
        "description",
        "startDate",
        "endDate",
        "status",
        "responsibleFullName",
        "responsiblePosition",
        "responsiblePhone",
        "responsibleEmail",
        "locationText",
        "addressText",
        "createdByUserId",
    }
)


@dataclass(slots=True)
class Event:
    id: int
    title: str
    start_date: date
    end_date: Optional[date] = None
    status: EventStatus = EventStatus.PLANNED
    description: str = ""
    responsible_full_name: str = ""
    responsible_position: Optional[str] = None
    responsible_phone: Optional[str] = None
    responsible_email: Optional[str] = None
    location_text: Optional[str] = None
    address_text: Optional[str] = None
    created_by_user_id: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_single_day(self) -> bool:
        return self.end_date is None or self.end_date == self.start_date

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Event":
        return cls(
            id=int(record["eventId"]),
            title=str(record.get("title") or ""),
            start_date=parse_date(record["startDate"]),
            end_date=_optional_date(record.get("endDate")),
            status=EventStatus(record.get("status") or EventStatus.PLANNED),
            description=record.get("description") or "",
            responsible_full_name=record.get("responsibleFullName") or "",
            responsible_position=record.get("responsiblePosition"),
            responsible_phone=record.get("responsiblePhone"),
            responsible_email=record.get("responsibleEmail"),
            location_text=record.get("locationText"),
            address_text=record.get("addressText"),
            created_by_user_id=record.get("createdByUserId"),
            extra={key: value for key, value in record.items() if key not in _KNOWN_KEYS},
        )

    def to_record(self) -> Dict[str, Any]:
        record = dict(self.extra)
        record.update(
            {
                "eventId": self.id,
                "title": self.title,
                "description": self.description,
                "startDate": self.start_date.isoformat(),
                "endDate": self.end_date.isoformat() if self.end_date else None,
                "status": self.status.value,
                "responsibleFullName": self.responsible_full_name,
                "responsiblePosition": self.responsible_position,
                "responsiblePhone": self.responsible_phone,
                "responsibleEmail": self.responsible_email,
                "locationText": self.location_text,
                "addressText": self.address_text,
                "createdByUserId": self.created_by_user_id,
            }
        )
        return record


@dataclass(frozen=True, slots=True)
class FixedDate:
    """A recurring commemorative date, independent of any year."""

    month: int
    day: int
    title: str

    def in_year(self, year: int) -> Optional[date]:
        try:
            return date(year, self.month, self.day)
        except ValueError:
            return None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "FixedDate":
        return cls(month=int(record["month"]), day=int(record["day"]), title=str(record["title"]))

    def to_record(self) -> Dict[str, Any]:
        return {"month": self.month, "day": self.day, "title": self.title}


@dataclass(frozen=True, slots=True)
class DateRange:
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Range end {self.end} is before start {self.start}")

    @property
    def years(self) -> tuple[int, ...]:
        if self.start.year == self.end.year:
            return (self.start.year,)
        return tuple(range(self.start.year, self.end.year + 1))

    def extended(self, days: int) -> "DateRange":
        return DateRange(self.start, self.end + timedelta(days=days))


@dataclass(frozen=True, slots=True)
class CalendarItem:
    kind: CalendarItemKind
    title: str
    start: date
    end: date
    all_day: bool
    source: Union[Event, FixedDate]

    @property
    def is_fixed(self) -> bool:
        return self.kind is CalendarItemKind.FIXED_ANNOTATION


@dataclass(frozen=True, slots=True)
class Navigation:
    """Where the surrounding application should go after an action."""

    target: NavigationTarget
    params: Dict[str, Any] = field(default_factory=dict)

    def to_record(self) -> Dict[str, Any]:
        return {"target": self.target.value, "params": dict(self.params)}


@dataclass(frozen=True, slots=True)
class EventPage:
    events: list[Event]
    total_items: int
