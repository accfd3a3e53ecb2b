"""Process configuration read from the environment.

Only `DATABASE_URL` is required. Everything else has a default matching a
small pool behind a connection proxy.
"""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.exceptions import MissingDatabaseUrlError
from ..infrastructure.postgres.config import PoolConfig, SslMode
from ..resilience.config import RetryConfig
from .probe import ProbeConfig


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DATABASE_",
        extra="ignore",
        frozen=True,
    )

    url: SecretStr | None = Field(default=None, description="PostgreSQL connection string (DATABASE_URL)")
    pool_max_size: int = Field(default=8, ge=1, le=200)
    idle_timeout: float = Field(default=20.0, gt=0.0)
    connect_timeout: float = Field(default=15.0, gt=0.0, le=300.0)
    ssl: SslMode = Field(default="require")
    prepared_statements: bool = Field(default=False)
    application_name: str = Field(default="pgpulse")

    probe_max_attempts: int = Field(default=3, ge=1)
    probe_retry_delay: float = Field(default=2.0, ge=0.0)
    probe_attempt_timeout: float | None = Field(default=15.0, gt=0.0)

    def require_url(self) -> SecretStr:
        """Return the connection string or fail fast.

        Raises
        ------
        MissingDatabaseUrlError
            If DATABASE_URL is unset or blank.
        """
        if self.url is None or not self.url.get_secret_value().strip():
            raise MissingDatabaseUrlError
        return self.url

    def to_pool_config(self) -> PoolConfig:
        return PoolConfig(
            dsn=self.require_url(),
            max_size=self.pool_max_size,
            idle_timeout=self.idle_timeout,
            connect_timeout=self.connect_timeout,
            ssl=self.ssl,
            prepared_statements=self.prepared_statements,
            application_name=self.application_name,
        )

    def to_probe_config(self) -> ProbeConfig:
        return ProbeConfig(
            retry=RetryConfig(
                max_attempts=self.probe_max_attempts,
                delay_seconds=self.probe_retry_delay,
            ),
            attempt_timeout_seconds=self.probe_attempt_timeout,
        )
