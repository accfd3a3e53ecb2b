"""Async connection pool for PostgreSQL using asyncpg.

The pool is lazy by default: with ``min_size=0`` creating it does no network
I/O, so a process can build its pool at startup and decide separately when to
probe the database.
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, Literal, Self

import asyncpg
from asyncpg import Pool, Record

from ...core.exceptions import PoolNotInitializedError
from ...logger import get_logger
from .health import HealthCheckResult

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable, Sequence
    from types import TracebackType

    from asyncpg.pool import PoolConnectionProxy

    from .config import PoolConfig

logger = get_logger(__name__)

type IsolationLevel = Literal["read_uncommitted", "read_committed", "repeatable_read", "serializable"]


class LoggingConnection(asyncpg.Connection):  # type: ignore[misc]
    """asyncpg connection that reports when the pool lets it go.

    Only closes initiated by the pool (shutdown or idle expiry) pass through
    `close` or `terminate`. A disconnect started by the server is noticed by asyncpg's protocol
    (``connection_lost``) and reaches neither method, so it is not logged
    here. The pool replaces such a connection on its next acquire.
    """

    async def close(self, *, timeout: float | None = None) -> None:
        pid = self.get_server_pid()
        await super().close(timeout=timeout)
        logger.info("Database connection closed - will reconnect", pid=pid)

    def terminate(self) -> None:
        pid = self.get_server_pid()
        super().terminate()
        logger.info("Database connection terminated - will reconnect", pid=pid)


async def _on_connect(conn: asyncpg.Connection) -> None:
    logger.info("Database connection established", pid=conn.get_server_pid())


class AsyncConnectionPool:
    """Async connection pool for a single PostgreSQL database.

    Examples
    --------
    >>> async with AsyncConnectionPool(config) as pool:
    ...     rows = await pool.afetch("SELECT * FROM users")
    ...     await pool.aexecute("INSERT INTO users (name) VALUES ($1)", "Alice")
    """

    __slots__ = ("_config", "_init_lock", "_pool")

    def __init__(self, config: PoolConfig) -> None:
        self._config = config
        self._pool: Pool[Record] | None = None
        self._init_lock = asyncio.Lock()

    async def __aenter__(self) -> Self:
        await self.ainitialize()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None and exc_val is not None:
            logger.error(
                "AsyncConnectionPool context manager exiting with exception",
                exc_type=exc_type.__name__,
                exc_val=str(exc_val),
            )
        await self.aclose()

    @property
    def config(self) -> PoolConfig:
        return self._config

    @property
    def is_initialized(self) -> bool:
        return self._pool is not None

    @property
    def pool(self) -> Pool[Record]:
        """Access the underlying asyncpg pool.

        Raises
        ------
        PoolNotInitializedError
            If pool has not been initialized via `ainitialize()`.
        """
        if self._pool is None:
            msg = "Pool not initialized. Call ainitialize() first."
            raise PoolNotInitializedError(msg)
        return self._pool

    async def ainitialize(self, *, validate: bool = True) -> None:
        """Create the asyncpg pool.

        This is idempotent - calling multiple times is safe. An asyncio lock
        serializes concurrent callers so only one pool is ever created.

        Parameters
        ----------
        validate
            Run ``SELECT 1`` once after creating the pool. Pass False to keep
            startup free of network I/O and leave reachability to the prober.
        """
        async with self._init_lock:
            if self._pool is not None:
                return

            self._pool = await asyncpg.create_pool(
                **self._config.to_pool_params(),
                init=_on_connect,
                connection_class=LoggingConnection,
            )

            if validate:
                async with self._pool.acquire() as conn:
                    await conn.execute("SELECT 1")

            logger.info("AsyncConnectionPool initialized", validated=validate, **self._config.to_log_params())

    async def aclose(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("AsyncConnectionPool closed")

    async def ahealth_check(self) -> HealthCheckResult:
        """Check pool health by executing a simple query.

        Returns
        -------
        HealthCheckResult
            Health status with latency and pool statistics.
        """
        if self._pool is None:
            return HealthCheckResult.initializing(pool_max_size=self._config.max_size)

        try:
            started = time.perf_counter()
            async with self._pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            latency_s = time.perf_counter() - started
        except Exception as e:
            return HealthCheckResult.unhealthy(pool_max_size=self._config.max_size, error=str(e))

        return HealthCheckResult.healthy(
            pool_size=self._pool.get_size(),
            pool_max_size=self._pool.get_max_size(),
            latency_s=latency_s,
            pool_idle_size=self._pool.get_idle_size(),
        )

    @asynccontextmanager
    async def aacquire(self) -> AsyncIterator[PoolConnectionProxy[Record]]:
        """Acquire a connection from the pool.

        Yields
        ------
        PoolConnectionProxy[Record]
            A connection proxy that is returned to the pool on exit.
        """
        async with self.pool.acquire() as conn:
            yield conn

    @asynccontextmanager
    async def atransaction(
        self,
        isolation: IsolationLevel = "read_committed",
        *,
        readonly: bool = False,
        deferrable: bool = False,
    ) -> AsyncIterator[PoolConnectionProxy[Record]]:
        """Acquire a connection and start a transaction.

        Parameters
        ----------
        isolation
            Transaction isolation level.
        readonly
            If True, the transaction is read-only.
        deferrable
            If True and readonly=True, allows deferrable transactions.
        """
        async with (
            self.aacquire() as conn,
            conn.transaction(
                isolation=isolation,
                readonly=readonly,
                deferrable=deferrable,
            ),
        ):
            yield conn

    async def aexecute(self, query: str, *args: object, timeout: float | None = None) -> str:
        async with self.aacquire() as conn:
            return await conn.execute(query, *args, timeout=timeout)

    async def aexecutemany(self, query: str, args: Iterable[Sequence[object]], timeout: float | None = None) -> None:
        async with self.aacquire() as conn:
            await conn.executemany(query, args, timeout=timeout)

    async def afetch(self, query: str, *args: object, timeout: float | None = None) -> list[Record]:
        async with self.aacquire() as conn:
            return await conn.fetch(query, *args, timeout=timeout)

    async def afetchrow(self, query: str, *args: object, timeout: float | None = None) -> Record | None:
        async with self.aacquire() as conn:
            return await conn.fetchrow(query, *args, timeout=timeout)

    async def afetchval(self, query: str, *args: object, timeout: float | None = None) -> Any:
        """Execute a query and return the first value of the first row."""
        async with self.aacquire() as conn:
            return await conn.fetchval(query, *args, timeout=timeout)

    @property
    def pool_size(self) -> int:
        """Current number of connections in the pool."""
        if self._pool is None:
            return 0
        return self._pool.get_size()

    @property
    def pool_min_size(self) -> int:
        return self._config.min_size

    @property
    def pool_max_size(self) -> int:
        return self._config.max_size

    @property
    def pool_idle_size(self) -> int:
        if self._pool is None:
            return 0
        return self._pool.get_idle_size()
