"""Applied operation repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from referral.domain.model.quota import AppliedOperation
from referral.domain.value import InviteId, QuotaOperation


class AppliedOperationRepository(ABC):
    """Idempotency record for quota effects keyed by ``(invite_id, operation)``."""

    @abstractmethod
    async def claim(self, operation: AppliedOperation) -> bool:
        """Record an operation unless it has already been recorded.

        Args:
            operation: The operation about to be applied

        Returns:
            True if this caller claimed the operation, False if it was
            already applied
        """
        pass

    @abstractmethod
    async def find(
        self, invite_id: InviteId, operation: QuotaOperation
    ) -> Optional[AppliedOperation]:
        """Find an applied operation.

        Args:
            invite_id: The invite the operation is keyed by
            operation: The operation kind

        Returns:
            The record if found, None otherwise
        """
        pass

    @abstractmethod
    async def release(self, invite_id: InviteId, operation: QuotaOperation) -> None:
        """Remove a claim whose mutation did not apply."""
        pass
