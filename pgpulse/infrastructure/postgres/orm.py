"""SQLAlchemy handle sharing the pool configuration of the asyncpg pool."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from ...logger import get_logger

if TYPE_CHECKING:
    from .config import PoolConfig

logger = get_logger(__name__)


def create_orm_engine(config: PoolConfig) -> AsyncEngine:
    """Build an async engine for the asyncpg dialect.

    No connection is opened here; SQLAlchemy connects on first use.
    """
    engine = create_async_engine(**config.to_engine_params())
    logger.debug("ORM engine created", **config.to_log_params())
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)
