from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Keep log files out of the user's profile while tests run.
os.environ.setdefault("CURATOR_LOG_DIR", tempfile.mkdtemp(prefix="curator-portal-logs-"))

from curator_portal.calendar import DEFAULT_FIXED_DATES  # noqa: E402
from curator_portal.config import AppSettings, BackendSettings, CalendarSettings, LifecycleSettings  # noqa: E402
from curator_portal.data import BackendRequestError  # noqa: E402
from curator_portal.domain import Event, EventPage, EventStatus  # noqa: E402
from curator_portal.services import ServiceContext  # noqa: E402

DESCRIPTION = (
    "Встреча студентов первого курса с ветеранами труда, экскурсия по музею университета "
    "и обсуждение истории региона в формате круглого стола."
)


class FakeEventRepository:
    """In-memory stand-in for the REST event repository that records every call."""

    def __init__(self, records: Optional[List[Dict[str, Any]]] = None) -> None:
        self.records: Dict[int, Dict[str, Any]] = {}
        self.calls: List[tuple] = []
        self.fail_on: set[str] = set()
        self._next_id = 1
        for record in records or []:
            self.add(record)

    def add(self, record: Dict[str, Any]) -> Dict[str, Any]:
        stored = {"status": EventStatus.PLANNED.value, **record}
        stored.setdefault("eventId", self._next_id)
        self.records[int(stored["eventId"])] = stored
        self._next_id = max(self._next_id, int(stored["eventId"])) + 1
        return stored

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail_on:
            raise BackendRequestError(f"{name} is unavailable", status_code=500)

    async def list_events(self, **filters: Any) -> EventPage:
        self.calls.append(("list_events", filters))
        self._maybe_fail("list_events")
        start = filters.get("start_date")
        end = filters.get("end_date")
        status = filters.get("status")
        selected = []
        for record in sorted(self.records.values(), key=lambda item: item["startDate"]):
            event = Event.from_record(record)
            if start is not None and event.start_date < start:
                continue
            if end is not None and event.start_date > end:
                continue
            if status is not None and event.status is not status:
                continue
            selected.append(event)
        return EventPage(events=selected, total_items=len(selected))

    async def get_event(self, event_id: int) -> Event:
        self.calls.append(("get_event", event_id))
        self._maybe_fail("get_event")
        if event_id not in self.records:
            raise BackendRequestError("Мероприятие не найдено", status_code=404)
        return Event.from_record(self.records[event_id])

    async def create_event(self, fields: Dict[str, Any]) -> Event:
        self.calls.append(("create_event", dict(fields)))
        self._maybe_fail("create_event")
        stored = self.add({**fields, "eventId": self._next_id, "status": EventStatus.PLANNED.value})
        return Event.from_record(stored)

    async def update_event(self, event_id: int, fields: Dict[str, Any]) -> Event:
        self.calls.append(("update_event", event_id, dict(fields)))
        self._maybe_fail("update_event")
        status = self.records[event_id]["status"]
        self.records[event_id] = {**self.records[event_id], **fields, "eventId": event_id, "status": status}
        return Event.from_record(self.records[event_id])

    async def update_event_status(self, event_id: int, status: EventStatus) -> Event:
        self.calls.append(("update_event_status", event_id, status))
        self._maybe_fail("update_event_status")
        self.records[event_id]["status"] = status.value
        return Event.from_record(self.records[event_id])

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]


def make_record(**overrides: Any) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "eventId": 1,
        "title": "День открытых дверей",
        "description": DESCRIPTION,
        "startDate": "2024-05-01",
        "endDate": None,
        "status": EventStatus.PLANNED.value,
        "responsibleFullName": "Иванова Мария Петровна",
        "createdByUserId": 7,
        "ParticipantCategories": [{"categoryId": 2, "name": "Студенты"}],
    }
    record.update(overrides)
    return record


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def settings(tmp_path: Path) -> AppSettings:
    return AppSettings(
        backend=BackendSettings(base_url="http://backend.test/api", token="token-123", timeout_seconds=5.0),
        calendar=CalendarSettings(max_results=1000, fixed_dates_file=None),
        lifecycle=LifecycleSettings(min_description_length=100, overdue_grace_days=3),
        log_level="DEBUG",
    )


@pytest.fixture
def repository() -> FakeEventRepository:
    return FakeEventRepository()


@pytest.fixture
def context(settings: AppSettings, repository: FakeEventRepository) -> ServiceContext:
    ctx = ServiceContext(settings=settings, fixed_dates=DEFAULT_FIXED_DATES)
    ctx.events = repository
    return ctx
