from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, Iterable, Optional, Sequence

from ..data import BackendNotConfiguredError, BackendRequestError
from ..domain import (
    CalendarItem,
    CalendarItemKind,
    CalendarView,
    DateRange,
    Event,
    EventStatus,
    FixedDate,
    Navigation,
    NavigationTarget,
)
from .context import ServiceContext

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)

_STATUS_CLASSES = {
    EventStatus.PLANNED: "planned",
    EventStatus.CONDUCTED: "conducted",
    EventStatus.CANCELLED: "cancelled",
}


def years_for_range(visible: DateRange, today: date) -> tuple[int, ...]:
    years = set(visible.years)
    # Looking at a future year also shows the previous one, so paging back needs no refetch.
    if visible.start.year > today.year:
        years.add(visible.start.year - 1)
    return tuple(sorted(years))


def fixed_annotations(table: Iterable[FixedDate], years: Iterable[int]) -> tuple[CalendarItem, ...]:
    entries = tuple(table)
    items: list[CalendarItem] = []
    for year in years:
        for entry in entries:
            day = entry.in_year(year)
            if day is None:
                continue
            items.append(
                CalendarItem(
                    kind=CalendarItemKind.FIXED_ANNOTATION,
                    title=entry.title,
                    start=day,
                    end=day,
                    all_day=True,
                    source=entry,
                )
            )
    return tuple(items)


def event_item(event: Event) -> CalendarItem:
    start = event.start_date
    # Stored end dates are inclusive; calendar end boundaries are exclusive.
    if event.end_date is not None and event.end_date > start:
        end = event.end_date + ONE_DAY
    else:
        end = start
    return CalendarItem(
        kind=CalendarItemKind.EVENT_INSTANCE,
        title=event.title,
        start=start,
        end=end,
        all_day=event.is_single_day,
        source=event,
    )


def week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def range_for_viewport(view: CalendarView, start: date, end: date) -> DateRange:
    """Translate the dates a viewport shows into the range to load.

    A month grid pads to whole Monday-first weeks and ends one day past the
    last week; other views load their boundaries as given.
    """

    if view is CalendarView.MONTH:
        last_week_end = week_start(end) + timedelta(days=6)
        return DateRange(week_start(start), last_week_end + ONE_DAY)
    return DateRange(start, end)


def month_range(anchor: date) -> DateRange:
    first = anchor.replace(day=1)
    next_month = (first + timedelta(days=32)).replace(day=1)
    return range_for_viewport(CalendarView.MONTH, first, next_month - ONE_DAY)


def default_range(today: date) -> DateRange:
    first = today.replace(day=1)
    next_month = (first + timedelta(days=32)).replace(day=1)
    return DateRange(first, next_month - ONE_DAY)


def display_class(item: CalendarItem) -> str:
    if item.kind is CalendarItemKind.FIXED_ANNOTATION:
        return "fixed"
    if isinstance(item.source, Event):
        return _STATUS_CLASSES.get(item.source.status, "default")
    return "default"


def select_item(item: CalendarItem) -> Navigation:
    if item.kind is CalendarItemKind.FIXED_ANNOTATION:
        return Navigation(
            NavigationTarget.EVENT_CREATE,
            {"title": item.title, "startDate": item.start.isoformat()},
        )
    return Navigation(NavigationTarget.EVENT_DETAIL, {"eventId": item.source.id})


def select_slot(start: date, end: date) -> Navigation:
    """Start a new event from an empty selection; ``end`` is the calendar's exclusive boundary."""

    if end < start:
        raise ValueError(f"Selection end {end} is before start {start}")
    params = {"startDate": start.isoformat()}
    last_day = end - ONE_DAY
    if last_day > start:
        params["endDate"] = last_day.isoformat()
    return Navigation(NavigationTarget.EVENT_CREATE, params)


@dataclass(slots=True)
class CalendarService:
    """Keeps the displayed calendar collection in sync with the visible range."""

    context: ServiceContext
    clock: Callable[[], date] = date.today
    _items: tuple[CalendarItem, ...] = field(default=(), init=False)
    _generation: int = field(default=0, init=False)
    _loading: bool = field(default=False, init=False)
    _error: Optional[str] = field(default=None, init=False)
    _visible_range: Optional[DateRange] = field(default=None, init=False)

    @property
    def items(self) -> tuple[CalendarItem, ...]:
        return self._items

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def visible_range(self) -> Optional[DateRange]:
        return self._visible_range

    @property
    def fixed_dates(self) -> Sequence[FixedDate]:
        return self.context.fixed_dates or ()

    async def load_visible(self, visible: DateRange) -> tuple[CalendarItem, ...]:
        """Fetch events for ``visible`` and replace the displayed collection.

        Responses that resolve after a newer call has started are returned to
        their caller but never applied.
        """

        self._generation += 1
        generation = self._generation
        self._loading = True
        self._visible_range = visible

        annotations = fixed_annotations(self.fixed_dates, years_for_range(visible, self.clock()))
        # The backend filters on an inclusive end, so ask for one day past the last visible one.
        requested = visible.extended(1)
        try:
            page = await self.context.events.list_events(
                start_date=requested.start,
                end_date=requested.end,
                limit=self.context.settings.calendar.max_results,
                sort_by="startDate",
                sort_order="ASC",
            )
        except (BackendRequestError, BackendNotConfiguredError) as exc:
            if generation != self._generation:
                logger.debug("Ignoring failed stale calendar load for %s..%s", visible.start, visible.end)
                return annotations
            logger.warning("Calendar load for %s..%s failed: %s", visible.start, visible.end, exc)
            self._items = annotations
            self._error = f"Events could not be loaded: {exc}"
            return annotations
        finally:
            if generation == self._generation:
                self._loading = False

        items = tuple(event_item(event) for event in page.events) + annotations
        if generation != self._generation:
            logger.debug("Discarding stale calendar response for %s..%s", visible.start, visible.end)
            return items
        if page.total_items > len(page.events):
            logger.warning(
                "Calendar range %s..%s truncated: %d of %d events",
                visible.start,
                visible.end,
                len(page.events),
                page.total_items,
            )
        self._items = items
        self._error = None
        return items

    async def change_viewport(self, view: CalendarView, start: date, end: date) -> tuple[CalendarItem, ...]:
        return await self.load_visible(range_for_viewport(view, start, end))

    async def refresh(self) -> tuple[CalendarItem, ...]:
        visible = self._visible_range or default_range(self.clock())
        return await self.load_visible(visible)
