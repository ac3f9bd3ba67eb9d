"""PostgreSQL implementation of AppliedOperation repository."""

from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert

from referral.domain.model.quota import AppliedOperation
from referral.domain.repository.applied_operation import AppliedOperationRepository
from referral.domain.value import InviteId, QuotaOperation
from referral.persistence.mappers import (
    applied_operation_to_dict,
    row_to_applied_operation,
)
from referral.persistence.repository.base import PostgresRepository
from referral.persistence.tables import applied_operations_table


class PostgresAppliedOperationRepository(PostgresRepository, AppliedOperationRepository):
    """PostgreSQL implementation of AppliedOperationRepository.

    ``claim`` is ``INSERT ... ON CONFLICT DO NOTHING RETURNING``; a concurrent
    claim for the same key waits on the unique index and then sees no row.
    """

    async def claim(self, operation: AppliedOperation) -> bool:
        stmt = (
            insert(applied_operations_table)
            .values(**applied_operation_to_dict(operation))
            .on_conflict_do_nothing(
                index_elements=[
                    applied_operations_table.c.invite_id,
                    applied_operations_table.c.operation,
                ]
            )
            .returning(applied_operations_table.c.invite_id)
        )
        result = await self._execute(stmt, "claim_operation")
        claimed = result.first() is not None
        await self.session.flush()
        return claimed

    async def find(
        self, invite_id: InviteId, operation: QuotaOperation
    ) -> Optional[AppliedOperation]:
        stmt = (
            select(applied_operations_table)
            .where(applied_operations_table.c.invite_id == invite_id)
            .where(applied_operations_table.c.operation == operation.value)
        )
        row = await self._first(stmt, "find_operation")
        return row_to_applied_operation(row) if row else None

    async def release(self, invite_id: InviteId, operation: QuotaOperation) -> None:
        stmt = (
            delete(applied_operations_table)
            .where(applied_operations_table.c.invite_id == invite_id)
            .where(applied_operations_table.c.operation == operation.value)
        )
        await self._execute(stmt, "release_operation")
        await self.session.flush()
