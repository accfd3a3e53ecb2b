"""pgpulse: pooled PostgreSQL handles with a retrying connectivity probe."""

from __future__ import annotations

from .config import DatabaseSettings, ProbeConfig
from .core import FailureKind, MissingDatabaseUrlError, PoolNotInitializedError
from .database import Database
from .infrastructure.postgres import AsyncConnectionPool, HealthCheckResult, PoolConfig
from .probe import ConnectivityProber, LivenessTarget, atest_database_connection

__all__ = [
    "AsyncConnectionPool",
    "ConnectivityProber",
    "Database",
    "DatabaseSettings",
    "FailureKind",
    "HealthCheckResult",
    "LivenessTarget",
    "MissingDatabaseUrlError",
    "PoolConfig",
    "PoolNotInitializedError",
    "ProbeConfig",
    "atest_database_connection",
]
