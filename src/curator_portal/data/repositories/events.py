from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from ...domain import Event, EventPage, EventStatus
from ..backend import BackendGateway, BackendRequestError, StatusReadBackError

logger = logging.getLogger(__name__)


def _events_from_records(records: Iterable[Dict[str, Any]]) -> List[Event]:
    events: list[Event] = []
    for record in records:
        if not isinstance(record, dict):
            logger.warning("Skipping event record that is not an object: %r", record)
            continue
        try:
            events.append(Event.from_record(record))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed event record %r: %s", record.get("eventId"), exc)
    return events


def _echoed_status(record: Any, requested: EventStatus) -> EventStatus:
    if isinstance(record, dict):
        try:
            return EventStatus(record.get("status"))
        except ValueError:
            pass
    return requested


@dataclass(slots=True)
class EventRepository:
    gateway: BackendGateway
    resource: str = "/events"

    async def list_events(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[EventStatus] = None,
        limit: int = 1000,
        sort_by: str = "startDate",
        sort_order: str = "ASC",
    ) -> EventPage:
        params: dict[str, Any] = {"limit": limit, "sortBy": sort_by, "sortOrder": sort_order}
        if start_date is not None:
            params["startDate"] = start_date.isoformat()
        if end_date is not None:
            params["endDate"] = end_date.isoformat()
        if status is not None:
            params["status"] = status.value
        payload = await self.gateway.request("GET", self.resource, params=params) or {}
        if not isinstance(payload, dict):
            raise BackendRequestError("Backend returned an unexpected event list payload")
        records = payload.get("events") or []
        if not isinstance(records, list):
            raise BackendRequestError("Backend returned an event list that is not an array")
        events = _events_from_records(records)
        total = payload.get("totalItems")
        return EventPage(events=events, total_items=int(total) if total is not None else len(events))

    async def get_event(self, event_id: int) -> Event:
        payload = await self.gateway.request("GET", f"{self.resource}/{event_id}")
        return self._single(payload, event_id)

    async def create_event(self, fields: Dict[str, Any]) -> Event:
        payload = await self.gateway.request("POST", self.resource, json=fields)
        return self._single(payload, None)

    async def update_event(self, event_id: int, fields: Dict[str, Any]) -> Event:
        payload = await self.gateway.request("PUT", f"{self.resource}/{event_id}", json=fields)
        return self._single(payload, event_id)

    async def update_event_status(self, event_id: int, status: EventStatus) -> Event:
        payload = await self.gateway.request(
            "PATCH",
            f"{self.resource}/{event_id}/status",
            json={"status": status.value},
        )
        record = payload.get("event") if isinstance(payload, dict) else None
        if isinstance(record, dict) and "startDate" in record:
            return Event.from_record(record)
        applied = _echoed_status(record, status)
        # The status endpoint echoes only id and status; read back the full projection.
        try:
            return await self.get_event(event_id)
        except BackendRequestError as exc:
            logger.warning("Event %s moved to %r but could not be read back: %s", event_id, applied.value, exc)
            raise StatusReadBackError(
                f"Status of event {event_id} changed to {applied.value!r} but the event could not be reloaded: {exc}",
                event_id=event_id,
                status=applied,
                status_code=exc.status_code,
            ) from exc

    def _single(self, payload: Any, event_id: Optional[int]) -> Event:
        if not isinstance(payload, dict):
            raise BackendRequestError(f"Backend returned no event payload for {event_id or 'new event'}")
        try:
            return Event.from_record(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise BackendRequestError(f"Backend returned a malformed event: {exc}") from exc
