from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ..core.enums import FailureKind
from ..resilience.config import RetryConfig


def _default_retry() -> RetryConfig:
    return RetryConfig(max_attempts=3, delay_seconds=2.0)


class ProbeConfig(BaseModel):
    """Settings for the database connectivity probe.

    The defaults give three attempts two seconds apart. Every failure that is
    not known to be permanent is retried; bad credentials or a missing
    database fail on the first attempt.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    retry: RetryConfig = Field(default_factory=_default_retry)
    attempt_timeout_seconds: float | None = Field(
        default=15.0, gt=0.0, description="Timeout around each liveness query (None = rely on pool timeouts)"
    )
    retry_on: frozenset[FailureKind] = Field(
        default=frozenset({FailureKind.TRANSIENT, FailureKind.UNKNOWN}),
        description="Failure kinds that lead to another attempt",
    )
    query: str = Field(default="SELECT 1", min_length=1, description="Liveness query")

    @property
    def max_attempts(self) -> int:
        return self.retry.max_attempts

    @property
    def retry_delay_seconds(self) -> float:
        return self.retry.delay_seconds
