from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

import httpx

from ..calendar import load_fixed_dates
from ..config import AppSettings, get_settings
from ..data import BackendGateway
from ..data.repositories import EventRepository
from ..domain import FixedDate


@dataclass(slots=True)
class ServiceContext:
    """Aggregate root for services to share settings, the backend gateway, and static tables."""

    settings: AppSettings = field(default_factory=get_settings)
    transport: Optional[httpx.AsyncBaseTransport] = None
    fixed_dates: Optional[Sequence[FixedDate]] = None
    gateway: BackendGateway = field(init=False)
    events: EventRepository = field(init=False)

    def __post_init__(self) -> None:
        self.gateway = BackendGateway(self.settings.backend, transport=self.transport)
        self.events = EventRepository(gateway=self.gateway)
        if self.fixed_dates is None:
            self.fixed_dates = load_fixed_dates(self.settings.calendar.fixed_dates_file)

    async def aclose(self) -> None:
        await self.gateway.aclose()
