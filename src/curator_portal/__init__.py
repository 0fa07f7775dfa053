"""Curator portal event lifecycle and calendar core."""

from __future__ import annotations

from .cli import main as main

__version__ = "0.1.0"

__all__ = ["main", "__version__"]
