from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, List, Optional

from ..data import BackendRequestError
from ..domain import Event, EventForm, EventStatus
from .exceptions import LifecycleError, LifecycleValidationError
from .lifecycle import EventLifecycleController

logger = logging.getLogger(__name__)

AUTO_CANCEL_REASON = "Мероприятие не было отмечено как проведённое в течение {days} дн. после даты проведения."


@dataclass(slots=True)
class SweepReport:
    checked: int = 0
    cancelled: List[int] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)

    def to_record(self) -> dict:
        return {
            "checked": self.checked,
            "cancelled": list(self.cancelled),
            "skipped": list(self.skipped),
            "failed": list(self.failed),
        }


@dataclass(slots=True)
class OverdueSweeper:
    """Cancels planned events that were never marked as conducted."""

    lifecycle: EventLifecycleController
    clock: Callable[[], date] = date.today

    @property
    def grace_days(self) -> int:
        return self.lifecycle.context.settings.lifecycle.overdue_grace_days

    def is_overdue(self, event: Event, today: date) -> bool:
        if event.status is not EventStatus.PLANNED:
            return False
        last_day = event.end_date or event.start_date
        return last_day < today - timedelta(days=self.grace_days)

    async def find_overdue(self, today: Optional[date] = None) -> list[Event]:
        today = today or self.clock()
        cutoff = today - timedelta(days=self.grace_days)
        page = await self.lifecycle.context.events.list_events(
            end_date=cutoff,
            status=EventStatus.PLANNED,
            limit=self.lifecycle.context.settings.calendar.max_results,
        )
        if page.total_items > len(page.events):
            logger.warning(
                "Overdue lookup up to %s truncated: %d of %d planned events; the rest wait for the next sweep",
                cutoff,
                len(page.events),
                page.total_items,
            )
        return [event for event in page.events if self.is_overdue(event, today)]

    async def run(self, today: Optional[date] = None) -> SweepReport:
        today = today or self.clock()
        overdue = await self.find_overdue(today)
        report = SweepReport(checked=len(overdue))
        reason = AUTO_CANCEL_REASON.format(days=self.grace_days)
        for event in overdue:
            try:
                await self.lifecycle.cancel(EventForm.from_event(event), reason, current_status=event.status)
            except LifecycleValidationError as exc:
                logger.warning("Overdue event %s skipped: %s", event.id, exc)
                report.skipped.append(event.id)
            except (LifecycleError, BackendRequestError) as exc:
                logger.error("Overdue event %s could not be cancelled: %s", event.id, exc)
                report.failed.append(event.id)
            else:
                report.cancelled.append(event.id)
        logger.info(
            "Overdue sweep finished: %d checked, %d cancelled, %d skipped, %d failed",
            report.checked,
            len(report.cancelled),
            len(report.skipped),
            len(report.failed),
        )
        return report
