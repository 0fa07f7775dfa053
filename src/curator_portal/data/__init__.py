"""Data access layer."""

from __future__ import annotations

from .backend import BackendGateway, BackendNotConfiguredError, BackendRequestError, StatusReadBackError

__all__ = [
    "BackendGateway",
    "BackendNotConfiguredError",
    "BackendRequestError",
    "StatusReadBackError",
]
