"""
TaskBoard Backend — Database Session Management
=================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   Creates an async engine with connection pooling, provides a session
       dependency that auto-commits on success and auto-rolls-back on error.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created at module import; sessions are created per-request.

Connection Pooling:
    pool_size / max_overflow / pool_pre_ping come from settings.
    SQLite URLs (tests, local hacking) skip pool arguments because the
    SQLite dialects pick their own pool class.
"""

import asyncio
import logging
from typing import Any, AsyncGenerator, Dict

import asyncpg
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import settings

logger = logging.getLogger(__name__)

# Errors check_connection() can raise when the database is unreachable.
# asyncpg errors from the initial connect reach us unwrapped.
CONNECT_ERRORS = (
    SQLAlchemyError,
    OSError,
    asyncio.TimeoutError,
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
)


def build_engine(database_url: str) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    PostgreSQL (asyncpg) gets pool sizing and a connect timeout;
    SQLite (aiosqlite) only gets the timeout its driver understands.
    """
    kwargs: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}

    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"timeout": settings.db_connect_timeout}
    else:
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
            connect_args={"timeout": settings.db_connect_timeout},
        )

    return create_async_engine(database_url, **kwargs)


engine = build_engine(settings.database_url)

# expire_on_commit=False: attributes stay readable after commit
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object used by Alembic and by
    create_tables() at startup.
    """
    pass


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back the transaction and re-raises
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/tasks")
        async def list_tasks(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def check_connection(target: AsyncEngine = engine) -> None:
    """
    Open a connection and run SELECT 1.

    Raises whatever the driver raises; the caller decides whether that is fatal.
    """
    async with target.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def create_tables(target: AsyncEngine = engine) -> None:
    """Create all tables registered on Base.metadata that don't exist yet."""
    # Models must be imported so they register on Base.metadata
    from app.models import task, user  # noqa: F401

    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
