"""Shared plumbing for PostgreSQL repositories."""

from typing import Any

from sqlalchemy.engine import Result
from sqlalchemy.ext.asyncio import AsyncSession

from referral.persistence.database import translate_store_errors


class PostgresRepository:
    """Base for repositories backed by the request's AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def _execute(self, stmt: Any, operation: str) -> Result:
        """Execute a statement, translating transient failures."""
        async with translate_store_errors(operation):
            return await self.session.execute(stmt)

    async def _first(self, stmt: Any, operation: str) -> dict[str, Any] | None:
        """Execute and return the first row as a dict, if any."""
        result = await self._execute(stmt, operation)
        row = result.mappings().first()
        return dict(row) if row else None
