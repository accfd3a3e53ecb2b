"""Core module exports."""

from __future__ import annotations

from .enums import FailureKind, FailureReason, HealthCheckStatus
from .exceptions import (
    AsyncpgWrapperError,
    ConfigurationError,
    MissingDatabaseUrlError,
    PgPulseError,
    PoolNotInitializedError,
    ProbeAbortedError,
)

__all__ = [
    "AsyncpgWrapperError",
    "ConfigurationError",
    "FailureKind",
    "FailureReason",
    "HealthCheckStatus",
    "MissingDatabaseUrlError",
    "PgPulseError",
    "PoolNotInitializedError",
    "ProbeAbortedError",
]
