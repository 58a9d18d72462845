"""Persistence: async engine and session factory for the reporting-unit database.

The schema is owned by the waste system; this service only reads it. Engine
and session factory are created lazily on first use (get_db) so import does
not trigger Settings validation.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from wastesearch.core.config import get_settings

logger = logging.getLogger(__name__)

# Set by _ensure_engine() on first use; avoids get_settings() at import time.
engine: AsyncEngine | None = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


def _ensure_engine() -> AsyncEngine:
    """Create engine and AsyncSessionLocal on first use; return the engine."""
    global engine, AsyncSessionLocal
    if engine is not None:
        return engine
    settings = get_settings()
    pool_size = settings.db_pool_size if settings.db_pool_size is not None else 10
    max_overflow = (
        settings.db_max_overflow if settings.db_max_overflow is not None else 20
    )
    command_timeout = (
        settings.db_command_timeout
        if settings.db_command_timeout is not None
        else 30
    )
    connect_args: dict[str, Any] = {}
    if "asyncpg" in settings.database_url:
        connect_args["command_timeout"] = command_timeout
        if settings.db_disable_jit:
            connect_args["server_settings"] = {"jit": "off"}
    engine = create_async_engine(
        settings.database_url,
        echo=settings.database_echo,
        pool_pre_ping=True,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_recycle=3600,
        connect_args=connect_args,
    )
    AsyncSessionLocal = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    logger.info("Database engine created (pool_size=%s, max_overflow=%s)", pool_size, max_overflow)
    return engine


async def get_db() -> AsyncIterator[AsyncSession]:
    """Database session dependency (read-only; never commits).

    Yields a session and closes it on exit.
    """
    _ensure_engine()
    assert AsyncSessionLocal is not None
    async with AsyncSessionLocal() as session:
        yield session


async def dispose_engine() -> None:
    """Dispose the engine (if created). Called at shutdown."""
    global engine, AsyncSessionLocal
    if engine is not None:
        await engine.dispose()
        engine = None
        AsyncSessionLocal = None
        logger.info("Database engine disposed")
