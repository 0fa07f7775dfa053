from __future__ import annotations

from dataclasses import dataclass, field

from ..services import CalendarService, EventLifecycleController, OverdueSweeper, ServiceContext


@dataclass(slots=True)
class ApiState:
    context: ServiceContext = field(default_factory=ServiceContext)
    lifecycle: EventLifecycleController = field(init=False)
    calendar: CalendarService = field(init=False)
    overdue: OverdueSweeper = field(init=False)

    def __post_init__(self) -> None:
        self.lifecycle = EventLifecycleController(self.context)
        self.calendar = CalendarService(self.context)
        self.overdue = OverdueSweeper(self.lifecycle)

    def rebind(self, context: ServiceContext) -> None:
        """Swap the shared context, e.g. after settings or the transport change."""

        self.context = context
        self.__post_init__()


api_state = ApiState()
