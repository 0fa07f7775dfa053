from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class BackendSettings:
    base_url: Optional[str]
    token: Optional[str]
    timeout_seconds: float

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url)

    @property
    def missing_env_vars(self) -> list[str]:
        missing = []
        if not self.base_url:
            missing.append("CURATOR_API_URL")
        return missing


@dataclass(frozen=True)
class CalendarSettings:
    max_results: int
    fixed_dates_file: Optional[Path]


@dataclass(frozen=True)
class LifecycleSettings:
    min_description_length: int
    overdue_grace_days: int


@dataclass(frozen=True)
class AppSettings:
    backend: BackendSettings
    calendar: CalendarSettings
    lifecycle: LifecycleSettings
    log_level: str


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    backend = BackendSettings(
        base_url=os.getenv("CURATOR_API_URL", "http://localhost:5000/api"),
        token=os.getenv("CURATOR_API_TOKEN"),
        timeout_seconds=_float_from_env("CURATOR_API_TIMEOUT_SECONDS", 15.0),
    )

    fixed_dates = os.getenv("CURATOR_FIXED_DATES_FILE")
    calendar = CalendarSettings(
        max_results=_int_from_env("CURATOR_CALENDAR_MAX_RESULTS", 1000),
        fixed_dates_file=Path(fixed_dates) if fixed_dates else None,
    )

    lifecycle = LifecycleSettings(
        min_description_length=_int_from_env("CURATOR_MIN_DESCRIPTION_LENGTH", 100),
        overdue_grace_days=_int_from_env("CURATOR_OVERDUE_GRACE_DAYS", 3),
    )

    return AppSettings(
        backend=backend,
        calendar=calendar,
        lifecycle=lifecycle,
        log_level=os.getenv("CURATOR_LOG_LEVEL", "INFO").upper(),
    )
