from __future__ import annotations

from datetime import UTC, datetime
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ...core.enums import HealthCheckStatus


class HealthCheckResult(BaseModel):
    """Result of a health check against a single pool."""

    model_config = ConfigDict(frozen=True)

    status: HealthCheckStatus
    pool_size: int
    pool_max_size: int
    pool_idle_size: int = 0
    latency_s: float | None = None
    message: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def pool_utilization_pct(self) -> float:
        """Pool utilization as percentage."""
        if self.pool_max_size == 0:
            return 0.0
        return (self.pool_size / self.pool_max_size) * 100

    def is_healthy(self) -> bool:
        return self.status == HealthCheckStatus.HEALTHY

    @classmethod
    def initializing(cls, pool_max_size: int) -> Self:
        return cls(
            status=HealthCheckStatus.INITIALIZING,
            pool_size=0,
            pool_max_size=pool_max_size,
            message="Pool not initialized",
        )

    @classmethod
    def unhealthy(cls, pool_max_size: int, error: str) -> Self:
        return cls(
            status=HealthCheckStatus.UNHEALTHY,
            pool_size=0,
            pool_max_size=pool_max_size,
            message=error,
        )

    @classmethod
    def healthy(cls, pool_size: int, pool_max_size: int, latency_s: float, pool_idle_size: int) -> Self:
        """Create result for successful health check.

        Parameters
        ----------
        pool_size
            Current number of connections in the pool.
        pool_max_size
            Maximum pool size.
        latency_s
            Round trip of the health query in seconds.
        pool_idle_size
            Number of idle connections in the pool.
        """
        return cls(
            status=HealthCheckStatus.HEALTHY,
            pool_size=pool_size,
            pool_max_size=pool_max_size,
            latency_s=latency_s,
            message="Pool is healthy",
            pool_idle_size=pool_idle_size,
        )
