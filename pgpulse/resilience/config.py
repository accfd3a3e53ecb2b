from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RetryConfig(BaseModel):
    """Attempt ceiling and fixed delay for a bounded retry loop."""

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1, description="Maximum attempts, the first call included")
    delay_seconds: float = Field(default=2.0, ge=0, description="Fixed wait between two attempts")
    reraise: bool = Field(default=True, description="Reraise the last exception instead of tenacity.RetryError")
