"""Recurring calendar annotations."""

from __future__ import annotations

from .fixed_dates import DEFAULT_FIXED_DATES, load_fixed_dates, parse_fixed_dates

__all__ = ["DEFAULT_FIXED_DATES", "load_fixed_dates", "parse_fixed_dates"]
