from __future__ import annotations


class PgPulseError(Exception):
    """Base class for all pgpulse errors."""


class ConfigurationError(PgPulseError):
    """Raised when the process configuration is unusable."""


class MissingDatabaseUrlError(ConfigurationError):
    """Raised when no connection string was provided."""

    def __init__(self, msg: str = "DATABASE_URL must be set. Did you forget to provision a database?") -> None:
        super().__init__(msg)


class ProbeAbortedError(PgPulseError):
    """Raised inside the prober when a shutdown was requested mid-retry."""


class AsyncpgWrapperError(PgPulseError):
    """Base class for errors raised by the asyncpg wrappers."""


class PoolNotInitializedError(AsyncpgWrapperError):
    """Raised when the pool is used before `ainitialize()`."""
