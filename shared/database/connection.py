"""
Database Connection

Async SQLAlchemy setup. PostgreSQL (psycopg) in production, SQLite
(aiosqlite) for local development and tests.
"""

from collections.abc import AsyncGenerator
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from shared.config import Settings, settings

logger = structlog.get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


def build_engine(config: Settings) -> AsyncEngine:
    """
    Create the async engine for a configuration.

    Pool sizing only applies to server databases.
    """
    options: dict[str, Any] = {"echo": config.database_echo, "pool_pre_ping": True}
    if not config.is_sqlite:
        options["pool_size"] = config.database_pool_size
        options["max_overflow"] = config.database_max_overflow
    return create_async_engine(config.database_url, **options)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to an engine."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# Create async engine
engine = build_engine(settings)

# Create async session factory
AsyncSessionLocal = build_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting database session.

    Commits are issued by the unit of work; anything left uncommitted is
    rolled back when the request ends.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Initialize database - create all tables."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized")


async def close_db(bind: AsyncEngine | None = None) -> None:
    """Close database connections."""
    await (bind or engine).dispose()
    logger.info("Database connections closed")
