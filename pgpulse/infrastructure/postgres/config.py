"""Configuration model for the PostgreSQL connection pool.

`PoolConfig` is the single immutable value object both handles are built
from: the asyncpg pool (`to_pool_params`) and the SQLAlchemy engine
(`to_engine_params`).
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator
from sqlalchemy.engine import URL, make_url

type SslMode = Literal["disable", "allow", "prefer", "require", "verify-ca", "verify-full"]

_SSL_QUERY_KEYS = ("sslmode", "ssl")


class PoolConfig(BaseModel):
    """Complete configuration for a PostgreSQL connection pool.

    Examples
    --------
    >>> config = PoolConfig(dsn=SecretStr("postgresql://app@db.internal/app"))
    >>> config.max_size
    8
    >>> PoolConfig(dsn=SecretStr(""))
    Traceback (most recent call last):
    ...
    pydantic_core._pydantic_core.ValidationError: ...
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    dsn: SecretStr = Field(description="PostgreSQL connection string")
    max_size: int = Field(default=8, ge=1, le=200, description="Upper bound on physical connections")
    min_size: int = Field(default=0, ge=0, le=200, description="Connections opened eagerly at pool creation")
    idle_timeout: float = Field(default=20.0, gt=0.0, description="Close connections idle longer than this (seconds)")
    connect_timeout: float = Field(default=15.0, gt=0.0, le=300.0, description="Connection establishment timeout")
    ssl: SslMode = Field(default="require", description="Transport security mode")
    prepared_statements: bool = Field(
        default=False, description="Server-side prepared statement caching (off for pooled/proxied setups)"
    )
    command_timeout: float | None = Field(default=None, gt=0.0, description="Default per-command timeout")
    application_name: str = Field(default="pgpulse")

    @field_validator("dsn")
    @classmethod
    def _require_dsn(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            msg = "Connection string must not be empty. Did you forget to provision a database?"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def _check_sizes(self) -> PoolConfig:
        if self.min_size > self.max_size:
            msg = f"min_size ({self.min_size}) must not exceed max_size ({self.max_size})"
            raise ValueError(msg)
        return self

    @property
    def statement_cache_size(self) -> int:
        # asyncpg's default cache size, or disabled.
        return 100 if self.prepared_statements else 0

    def to_pool_params(self) -> dict[str, Any]:
        """Convert config to asyncpg.create_pool() parameters.

        Returns
        -------
        dict[str, Any]
            Parameters for asyncpg.create_pool().
        """
        return {
            "dsn": self.dsn.get_secret_value(),
            "min_size": self.min_size,
            "max_size": self.max_size,
            "max_inactive_connection_lifetime": self.idle_timeout,
            "timeout": self.connect_timeout,
            "command_timeout": self.command_timeout,
            "ssl": self.ssl,
            "statement_cache_size": self.statement_cache_size,
            "server_settings": {"application_name": self.application_name},
        }

    def to_log_params(self) -> dict[str, Any]:
        """Pool parameters safe to log (no credentials)."""
        return {
            "host": self.sqlalchemy_url.host,
            "database": self.sqlalchemy_url.database,
            "min_size": self.min_size,
            "max_size": self.max_size,
            "idle_timeout": self.idle_timeout,
            "connect_timeout": self.connect_timeout,
            "ssl": self.ssl,
            "prepared_statements": self.prepared_statements,
        }

    @property
    def sqlalchemy_url(self) -> URL:
        """The DSN rewritten for SQLAlchemy's asyncpg dialect.

        `postgres://` and `postgresql://` both map to `postgresql+asyncpg://`.
        SSL query keys are dropped since the mode travels in `connect_args`.
        """
        url = make_url(self.dsn.get_secret_value())
        url = url.set(drivername="postgresql+asyncpg").difference_update_query(_SSL_QUERY_KEYS)
        if not self.prepared_statements:
            url = url.update_query_dict({"prepared_statement_cache_size": "0"})
        return url

    def to_engine_params(self) -> dict[str, Any]:
        """Convert config to sqlalchemy.ext.asyncio.create_async_engine() parameters."""
        connect_args: dict[str, Any] = {
            "ssl": self.ssl,
            "timeout": self.connect_timeout,
            "statement_cache_size": self.statement_cache_size,
            "server_settings": {"application_name": self.application_name},
        }
        if self.command_timeout is not None:
            connect_args["command_timeout"] = self.command_timeout

        return {
            "url": self.sqlalchemy_url,
            "pool_size": self.max_size,
            "max_overflow": 0,
            "pool_recycle": self.idle_timeout,
            "pool_pre_ping": True,
            "connect_args": connect_args,
        }
