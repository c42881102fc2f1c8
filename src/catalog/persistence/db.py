"""Async database engine and session factory.

SQLAlchemy 2.0 asyncio: SQLite (aiosqlite) in development, PostgreSQL
(asyncpg) in production. The engine is created from settings and owned
by whoever created it; nothing here is a module-level singleton.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from catalog.config import Settings
from catalog.persistence.tables import Base


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Create the async engine for ``settings.database_url``."""
    if settings.database_url.startswith("sqlite"):
        if ":memory:" in settings.database_url:
            # :memory: databases exist per connection; keep exactly one
            return create_async_engine(settings.database_url, poolclass=StaticPool)
        return create_async_engine(settings.database_url)
    return create_async_engine(
        settings.database_url,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_recycle=1800,  # Recycle connections after 30 minutes
        pool_pre_ping=True,
        echo=False,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def session_context(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Provide a session that is rolled back on error and always closed.

    Usage:
        async with session_context(factory) as session:
            repository = SqlCharacterRepository(session)
            ...
    """
    session = factory()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def init_db(engine: AsyncEngine) -> None:
    """Create tables if they do not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def health_check(engine: AsyncEngine) -> bool:
    """Check database connectivity."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
