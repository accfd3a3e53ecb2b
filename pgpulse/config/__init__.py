"""Configuration exports."""

from __future__ import annotations

from .probe import ProbeConfig
from .settings import DatabaseSettings

__all__ = [
    "DatabaseSettings",
    "ProbeConfig",
]
