from __future__ import annotations

import asyncio
from datetime import date

import pytest

from conftest import FakeEventRepository, make_record
from curator_portal.domain import (
    CalendarItemKind,
    CalendarView,
    DateRange,
    Event,
    EventStatus,
    FixedDate,
    NavigationTarget,
)
from curator_portal.services import CalendarService
from curator_portal.services.calendar import (
    display_class,
    event_item,
    fixed_annotations,
    month_range,
    range_for_viewport,
    select_item,
    select_slot,
    years_for_range,
)


def fixed_clock(day: date):
    return lambda: day


@pytest.fixture
def service(context):
    return CalendarService(context, clock=fixed_clock(date(2024, 6, 1)))


def event(**overrides) -> Event:
    return Event.from_record(make_record(**overrides))


def test_single_day_event_is_all_day_and_ends_on_start():
    for end in (None, "2024-05-01"):
        item = event_item(event(endDate=end))
        assert item.all_day is True
        assert item.end == item.start == date(2024, 5, 1)
        assert item.kind is CalendarItemKind.EVENT_INSTANCE


def test_multi_day_event_end_is_exclusive():
    item = event_item(event(startDate="2024-05-01", endDate="2024-05-03"))
    assert item.all_day is False
    assert item.end == date(2024, 5, 4)


def test_years_include_both_sides_of_a_year_boundary():
    visible = DateRange(date(2024, 12, 25), date(2025, 1, 5))
    assert years_for_range(visible, date(2024, 12, 20)) == (2024, 2025)


def test_future_year_also_shows_previous_year():
    visible = DateRange(date(2030, 3, 1), date(2030, 3, 31))
    assert years_for_range(visible, date(2026, 10, 18)) == (2029, 2030)


def test_current_year_does_not_pull_in_previous_year():
    visible = DateRange(date(2026, 3, 1), date(2026, 3, 31))
    assert years_for_range(visible, date(2026, 10, 18)) == (2026,)


def test_fixed_annotations_skip_impossible_dates():
    table = [FixedDate(2, 29, "Високосный день"), FixedDate(5, 9, "День Победы")]
    items = fixed_annotations(table, [2023, 2024])
    assert [(item.start, item.title) for item in items] == [
        (date(2023, 5, 9), "День Победы"),
        (date(2024, 2, 29), "Високосный день"),
        (date(2024, 5, 9), "День Победы"),
    ]
    assert all(item.all_day and item.end == item.start for item in items)


@pytest.mark.anyio
async def test_year_boundary_range_gets_annotations_for_both_years(service, context):
    items = await service.load_visible(DateRange(date(2024, 12, 1), date(2025, 2, 1)))

    fixed = [item for item in items if item.kind is CalendarItemKind.FIXED_ANNOTATION]
    assert len(fixed) == 2 * len(context.fixed_dates)
    starts = {(item.start, item.title) for item in fixed}
    assert (date(2024, 12, 12), "День Конституции РФ") in starts
    assert (date(2025, 1, 27), "День снятия блокады Ленинграда") in starts
    for entry in context.fixed_dates:
        assert sum(1 for item in fixed if item.source == entry and item.start.year == 2024) == 1


@pytest.mark.anyio
async def test_load_requests_range_with_inclusive_end_and_high_limit(service, repository):
    await service.load_visible(DateRange(date(2024, 5, 1), date(2024, 5, 31)))

    name, filters = repository.calls[0]
    assert name == "list_events"
    assert filters == {
        "start_date": date(2024, 5, 1),
        "end_date": date(2024, 6, 1),
        "limit": 1000,
        "sort_by": "startDate",
        "sort_order": "ASC",
    }


@pytest.mark.anyio
async def test_events_come_first_in_repository_order(service, repository):
    repository.add(make_record(eventId=2, title="Поздний", startDate="2024-05-20"))
    repository.add(make_record(eventId=1, title="Ранний", startDate="2024-05-02", endDate="2024-05-04"))

    items = await service.load_visible(DateRange(date(2024, 5, 1), date(2024, 5, 31)))

    instances = [item for item in items if item.kind is CalendarItemKind.EVENT_INSTANCE]
    assert [item.title for item in instances] == ["Ранний", "Поздний"]
    assert items[: len(instances)] == tuple(instances)


@pytest.mark.anyio
async def test_load_is_idempotent_and_replaces_collection(service, repository):
    repository.add(make_record(startDate="2024-05-10"))
    may = DateRange(date(2024, 5, 1), date(2024, 5, 31))

    first = await service.load_visible(may)
    second = await service.load_visible(may)
    assert first == second
    assert service.items == second

    await service.load_visible(DateRange(date(2024, 7, 1), date(2024, 7, 31)))
    assert not any(item.kind is CalendarItemKind.EVENT_INSTANCE for item in service.items)


@pytest.mark.anyio
async def test_failed_load_degrades_to_annotations_and_recovers(service, repository):
    repository.add(make_record(startDate="2024-05-10"))
    may = DateRange(date(2024, 5, 1), date(2024, 5, 31))
    repository.fail_on.add("list_events")

    items = await service.load_visible(may)

    assert items and all(item.is_fixed for item in items)
    assert service.error is not None
    assert service.loading is False

    repository.fail_on.clear()
    await service.refresh()
    assert service.error is None
    assert any(not item.is_fixed for item in service.items)


@pytest.mark.anyio
async def test_late_response_for_abandoned_range_is_discarded(context):
    gate = asyncio.Event()
    may = DateRange(date(2024, 5, 1), date(2024, 5, 31))
    june = DateRange(date(2024, 6, 1), date(2024, 6, 30))

    class GatedRepository(FakeEventRepository):
        async def list_events(self, **filters):
            if filters["start_date"] == may.start:
                await gate.wait()
            return await super().list_events(**filters)

    repository = GatedRepository([make_record(eventId=1, startDate="2024-05-10")])
    context.events = repository
    service = CalendarService(context, clock=fixed_clock(date(2024, 6, 1)))

    slow = asyncio.create_task(service.load_visible(may))
    await asyncio.sleep(0)
    june_items = await service.load_visible(june)
    gate.set()
    may_items = await slow

    assert any(not item.is_fixed for item in may_items)
    assert service.items == june_items
    assert service.visible_range == june
    assert service.loading is False


def test_month_view_pads_to_whole_weeks_plus_one_day():
    visible = range_for_viewport(CalendarView.MONTH, date(2024, 5, 1), date(2024, 5, 31))
    assert visible == DateRange(date(2024, 4, 29), date(2024, 6, 3))
    assert month_range(date(2024, 5, 15)) == visible


@pytest.mark.parametrize("view", [CalendarView.WEEK, CalendarView.DAY, CalendarView.AGENDA])
def test_other_views_use_boundaries_as_given(view):
    assert range_for_viewport(view, date(2024, 5, 6), date(2024, 5, 12)) == DateRange(date(2024, 5, 6), date(2024, 5, 12))


def test_selecting_fixed_annotation_prefills_new_event():
    item = fixed_annotations([FixedDate(4, 12, "День космонавтики")], [2025])[0]
    navigation = select_item(item)
    assert navigation.target is NavigationTarget.EVENT_CREATE
    assert navigation.params == {"title": "День космонавтики", "startDate": "2025-04-12"}


def test_selecting_event_opens_its_detail_view():
    navigation = select_item(event_item(event(eventId=42)))
    assert navigation.target is NavigationTarget.EVENT_DETAIL
    assert navigation.params == {"eventId": 42}


def test_display_class_follows_kind_and_status():
    assert display_class(fixed_annotations([FixedDate(6, 12, "День России")], [2024])[0]) == "fixed"
    assert display_class(event_item(event())) == "planned"
    assert display_class(event_item(event(status=EventStatus.CONDUCTED.value))) == "conducted"
    assert display_class(event_item(event(status=EventStatus.CANCELLED.value))) == "cancelled"


def test_clicking_an_empty_day_starts_a_single_day_event():
    for end in (date(2024, 5, 14), date(2024, 5, 15)):
        navigation = select_slot(date(2024, 5, 14), end)
        assert navigation.target is NavigationTarget.EVENT_CREATE
        assert navigation.params == {"startDate": "2024-05-14"}


def test_dragging_across_days_prefills_inclusive_end():
    navigation = select_slot(date(2024, 5, 14), date(2024, 5, 17))
    assert navigation.params == {"startDate": "2024-05-14", "endDate": "2024-05-16"}


def test_reversed_slot_selection_is_rejected():
    with pytest.raises(ValueError):
        select_slot(date(2024, 5, 14), date(2024, 5, 13))


@pytest.mark.anyio
async def test_change_viewport_loads_the_derived_range(service, repository):
    await service.change_viewport(CalendarView.MONTH, date(2024, 5, 1), date(2024, 5, 31))

    assert service.visible_range == DateRange(date(2024, 4, 29), date(2024, 6, 3))
    assert repository.calls[0][1]["end_date"] == date(2024, 6, 4)


@pytest.mark.anyio
async def test_unexpected_failure_still_clears_loading(context):
    class BrokenRepository(FakeEventRepository):
        async def list_events(self, **filters):
            raise RuntimeError("decoder exploded")

    context.events = BrokenRepository()
    service = CalendarService(context, clock=fixed_clock(date(2024, 6, 1)))

    with pytest.raises(RuntimeError):
        await service.load_visible(DateRange(date(2024, 5, 1), date(2024, 5, 31)))

    assert service.loading is False
