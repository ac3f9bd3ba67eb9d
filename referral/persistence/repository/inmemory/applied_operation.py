"""In-memory applied operation repository for testing."""

from typing import Optional

from referral.domain.model.quota import AppliedOperation
from referral.domain.repository.applied_operation import AppliedOperationRepository
from referral.domain.value import InviteId, QuotaOperation

from .database import InMemoryDatabase, checkpoint


class InMemoryAppliedOperationRepository(AppliedOperationRepository):
    """In-memory implementation of AppliedOperationRepository for testing."""

    def __init__(self, db: InMemoryDatabase | None = None) -> None:
        self._db = db or InMemoryDatabase()

    async def claim(self, operation: AppliedOperation) -> bool:
        await checkpoint()
        key = (operation.invite_id, operation.operation)
        if key in self._db.operations:
            return False
        self._db.operations[key] = operation
        return True

    async def find(
        self, invite_id: InviteId, operation: QuotaOperation
    ) -> Optional[AppliedOperation]:
        await checkpoint()
        return self._db.operations.get((invite_id, operation))

    async def release(self, invite_id: InviteId, operation: QuotaOperation) -> None:
        await checkpoint()
        self._db.operations.pop((invite_id, operation), None)
