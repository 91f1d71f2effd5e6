"""SQLAlchemy async engine pool and session management.

Provides a factory for creating async engines, an async context manager for
scoped sessions, and lifecycle helpers for schema creation.  The engine and
session factory are created once at startup and passed explicitly to the
repository; nothing here is module-global.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from .models import Base

logger = logging.getLogger(__name__)


def create_engine(
    url: str,
    *,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
    echo: bool = False,
    use_null_pool: bool = False,
) -> AsyncEngine:
    """Create and return a new SQLAlchemy :class:`AsyncEngine`.

    Args:
        url: Database connection URL, e.g. ``postgresql+asyncpg://...`` or
            ``sqlite+aiosqlite:///catalog.db``.
        pool_size: Number of persistent connections to keep in the pool.
        max_overflow: Maximum additional connections beyond *pool_size*.
        pool_timeout: Seconds to wait for a connection from the pool before
            raising a timeout error.
        pool_recycle: Seconds after which a connection is recycled to avoid
            stale TCP connections.
        echo: If ``True``, log all emitted SQL statements.
        use_null_pool: If ``True``, disable connection pooling entirely.
            Useful in short-lived processes (tests, one-off scripts).

    Returns:
        A configured :class:`AsyncEngine` instance.
    """
    pool_kwargs: dict = {}
    if use_null_pool or url.startswith("sqlite"):
        pool_kwargs["poolclass"] = NullPool
    else:
        pool_kwargs.update(
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
            pool_recycle=pool_recycle,
        )

    engine = create_async_engine(
        url,
        echo=echo,
        **pool_kwargs,
    )
    logger.info("Created async engine for %s (pool_size=%s)", url.split("@")[-1], pool_size)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to *engine*; objects stay usable after commit."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_all(engine: AsyncEngine) -> None:
    """Create all tables defined in the ORM metadata."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created / verified.")


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Yield an async session scoped to the caller's block.

    Usage::

        async with session_scope(factory) as session:
            result = await session.execute(select(ProductRecord))
            ...

    The session is committed on successful exit and rolled back on
    exception (cancellation included). It is always closed afterwards.
    """
    session = session_factory()
    try:
        yield session
        await session.commit()
    except BaseException:
        await session.rollback()
        raise
    finally:
        await session.close()
