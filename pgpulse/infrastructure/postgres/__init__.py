"""PostgreSQL infrastructure with asyncpg and SQLAlchemy.

This module provides:

- `PoolConfig`: Immutable pool configuration shared by both handles
- `AsyncConnectionPool`: asyncpg pool wrapper (the pool handle)
- `create_orm_engine` / `create_session_factory`: SQLAlchemy handle

Usage
-----
::

    config = PoolConfig(dsn=SecretStr(os.environ["DATABASE_URL"]))
    async with AsyncConnectionPool(config) as pool:
        await pool.afetchval("SELECT 1")
"""

from .config import PoolConfig, SslMode
from .health import HealthCheckResult
from .orm import create_orm_engine, create_session_factory
from .pool import AsyncConnectionPool, IsolationLevel

__all__ = [
    "AsyncConnectionPool",
    "HealthCheckResult",
    "IsolationLevel",
    "PoolConfig",
    "SslMode",
    "create_orm_engine",
    "create_session_factory",
]
