"""Database connection and session management.

Provides async database engine and session factory for PostgreSQL, and the
translation of transient store failures into retryable domain errors.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

import logfire
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from referral.adapter.events import BufferedEventPublisher
from referral.config import Settings
from referral.domain.error import RetryableError

# serialization_failure, deadlock_detected, lock_not_available, query_canceled
RETRYABLE_SQLSTATES = {"40001", "40P01", "55P03", "57014"}


def create_engine(settings: Settings) -> AsyncEngine:
    """Create async database engine.

    Args:
        settings: Application settings with database URL

    Returns:
        Configured async engine
    """
    return create_async_engine(
        settings.database_url,
        echo=settings.debug,  # Log SQL queries in debug mode
        pool_pre_ping=True,  # Verify connections before using
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create async session factory.

    Args:
        engine: Database engine

    Returns:
        Session factory for creating database sessions
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,  # Don't expire objects after commit
        autoflush=False,  # Manual flushing for better control
        autocommit=False,  # Explicit transaction management
    )


def is_retryable(error: BaseException) -> bool:
    """Whether a store error is transient and safe to retry."""
    if isinstance(error, (OperationalError, PoolTimeoutError, asyncio.TimeoutError)):
        return True
    if isinstance(error, DBAPIError):
        if error.connection_invalidated:
            return True
        sqlstate = getattr(error.orig, "sqlstate", None) or getattr(
            error.orig, "pgcode", None
        )
        return sqlstate in RETRYABLE_SQLSTATES
    return False


@asynccontextmanager
async def translate_store_errors(operation: str) -> AsyncIterator[None]:
    """Raise RetryableError for transient store failures.

    Args:
        operation: Name of the repository operation (for logs)

    Raises:
        RetryableError: On timeouts, lost connections or serialization failures
    """
    try:
        yield
    except Exception as e:
        if not is_retryable(e):
            raise
        logfire.warn(
            "Transient store error",
            operation=operation,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise RetryableError(f"Store unavailable during {operation}") from e


@asynccontextmanager
async def transaction(
    session_factory: async_sessionmaker[AsyncSession],
    events: BufferedEventPublisher,
) -> AsyncIterator[AsyncSession]:
    """Open a session that commits on exit, then releases its events.

    Args:
        session_factory: Session factory
        events: Events published while the session was open

    Buffered events are delivered only after the commit succeeds and are
    dropped when the session rolls back.
    """
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
            logfire.debug("Session committed")
        except Exception as e:
            logfire.warn("Session rollback", error=str(e))
            events.discard()
            await session.rollback()
            raise
    await events.flush()
