"""Get quota use case."""

from pydantic import BaseModel

from referral.domain.model import QuotaSnapshot
from referral.domain.service import QuotaAccountant
from referral.domain.value import UserId


class QuotaResponse(BaseModel):
    """Quota counters as returned to clients."""

    uid: str
    remaining: int
    granted: int
    redeemed: int
    outstanding: int
    bonus_unlocked: bool
    sync_bonus_used: bool
    unlimited: bool
    can_send: bool

    @classmethod
    def from_domain(cls, snapshot: QuotaSnapshot) -> "QuotaResponse":
        return cls(
            uid=snapshot.uid,
            remaining=snapshot.remaining,
            granted=snapshot.granted,
            redeemed=snapshot.redeemed,
            outstanding=snapshot.outstanding,
            bonus_unlocked=snapshot.bonus_unlocked,
            sync_bonus_used=snapshot.sync_bonus_used,
            unlimited=snapshot.unlimited,
            can_send=snapshot.can_send,
        )


class GetQuotaRequest(BaseModel):
    """Get quota request."""

    uid: str


class GetQuotaUseCase:
    """Use case for reading a user's invite quota."""

    def __init__(self, quota_accountant: QuotaAccountant) -> None:
        """Initialize get quota use case.

        Args:
            quota_accountant: Quota accountant domain service
        """
        self.quota_accountant = quota_accountant

    async def execute(self, request: GetQuotaRequest) -> QuotaResponse:
        """Return the user's quota.

        Raises:
            NotFoundError: If user not found
        """
        snapshot = await self.quota_accountant.snapshot(UserId(request.uid))
        return QuotaResponse.from_domain(snapshot)
