"""Configuration models and helpers."""

from __future__ import annotations

from .settings import AppSettings, BackendSettings, CalendarSettings, LifecycleSettings, get_settings

__all__ = ["AppSettings", "BackendSettings", "CalendarSettings", "LifecycleSettings", "get_settings"]
