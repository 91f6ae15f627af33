"""
Database session management.

This module provides utilities for creating and managing database sessions
using async SQLAlchemy. PostgreSQL (asyncpg) is the production target;
SQLite (aiosqlite) is accepted for local runs and tests.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from budgetx.core.config import settings
from budgetx.core.logging import logger


def _engine_options() -> dict:
    """Pool options only apply to server databases."""
    if settings.database.is_sqlite:
        return {"connect_args": {"timeout": 30}}
    return {
        "pool_size": settings.database.pool_size,
        "max_overflow": settings.database.max_overflow,
        "pool_pre_ping": True,
        "pool_recycle": settings.database.pool_recycle,
    }


# Create async engine
engine = create_async_engine(
    settings.database.url,
    echo=settings.debug,
    **_engine_options(),
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Get a database session.

    This function is used as a dependency in FastAPI endpoints to provide
    a database session. It ensures the session is properly closed after use.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            logger.error(f"Database session error: {e}")
            await session.rollback()
            raise
        finally:
            await session.close()


def get_session_factory() -> async_sessionmaker:
    """
    Session factory for work that must commit independently of the request
    session (notification dispatch).
    """
    return AsyncSessionLocal
