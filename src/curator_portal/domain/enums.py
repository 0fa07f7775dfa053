from __future__ import annotations

from enum import Enum


class EventStatus(str, Enum):
    PLANNED = "Запланировано"
    CONDUCTED = "Проведено"
    CANCELLED = "Не проводилось (Отмена)"


class CalendarItemKind(str, Enum):
    EVENT_INSTANCE = "event_instance"
    FIXED_ANNOTATION = "fixed_annotation"


class CalendarView(str, Enum):
    MONTH = "month"
    WEEK = "week"
    DAY = "day"
    AGENDA = "agenda"


class LifecycleAction(str, Enum):
    SAVE = "save"
    MARK_CONDUCTED = "mark_conducted"
    CANCEL = "cancel"
    REVERT_TO_PLANNED = "revert_to_planned"


class NavigationTarget(str, Enum):
    EVENT_DETAIL = "event_detail"
    EVENT_LIST = "event_list"
    EVENT_CREATE = "event_create"
    REPORT_CREATE = "report_create"
