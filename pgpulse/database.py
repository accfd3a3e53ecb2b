"""Process-wide database handles.

`Database` is built once at startup and passed to whatever needs database
access. It owns the asyncpg pool and the SQLAlchemy engine for the lifetime
of the process; nothing here is stored at module level.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, Self

from .config.settings import DatabaseSettings
from .infrastructure.postgres.orm import create_orm_engine, create_session_factory
from .infrastructure.postgres.pool import AsyncConnectionPool
from .logger import get_logger
from .probe import ConnectivityProber

if TYPE_CHECKING:
    import asyncio
    from collections.abc import AsyncIterator
    from types import TracebackType

    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

    from .config.probe import ProbeConfig
    from .infrastructure.postgres.config import PoolConfig

logger = get_logger(__name__)


class Database:
    """Pool handle, ORM handle and connectivity probe for one database.

    Examples
    --------
    >>> async with Database.from_settings() as db:
    ...     if not await db.atest_connection():
    ...         raise SystemExit(1)
    ...     await db.pool.afetch("SELECT * FROM users")
    ...     async with db.asession() as session:
    ...         ...
    """

    __slots__ = ("_config", "_engine", "_pool", "_sessionmaker")

    def __init__(self, config: PoolConfig) -> None:
        self._config = config
        self._pool = AsyncConnectionPool(config)
        self._engine = create_orm_engine(config)
        self._sessionmaker = create_session_factory(self._engine)

    @classmethod
    def from_settings(cls, settings: DatabaseSettings | None = None) -> Self:
        """Build from environment settings.

        Raises
        ------
        MissingDatabaseUrlError
            If DATABASE_URL is not set. Raised before any network I/O.
        """
        settings = settings if settings is not None else DatabaseSettings()
        return cls(settings.to_pool_config())

    async def __aenter__(self) -> Self:
        await self.ainitialize()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    @property
    def config(self) -> PoolConfig:
        return self._config

    @property
    def pool(self) -> AsyncConnectionPool:
        return self._pool

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def sessionmaker(self) -> async_sessionmaker[AsyncSession]:
        return self._sessionmaker

    async def ainitialize(self) -> None:
        # Lazy pool: no connection is opened until the first query.
        await self._pool.ainitialize(validate=False)

    async def aclose(self) -> None:
        await self._pool.aclose()
        await self._engine.dispose()
        logger.info("Database handles closed")

    @asynccontextmanager
    async def asession(self) -> AsyncIterator[AsyncSession]:
        async with self._sessionmaker() as session:
            yield session

    async def afetchval(self, query: str, *args: object, timeout: float | None = None) -> Any:
        return await self._pool.afetchval(query, *args, timeout=timeout)

    async def atest_connection(
        self,
        probe_config: ProbeConfig | None = None,
        *,
        shutdown: asyncio.Event | None = None,
    ) -> bool:
        """Probe the pool with bounded retry. Never raises for database errors."""
        return await ConnectivityProber(self._pool, probe_config, shutdown=shutdown).aprobe()
