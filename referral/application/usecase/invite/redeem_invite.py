"""Redeem invite use case."""

import logfire
from pydantic import BaseModel, Field

from referral.application.usecase.base import BaseUseCase
from referral.application.usecase.quota.get_quota import QuotaResponse
from referral.domain.service import RedemptionCoordinator
from referral.domain.value import UserId


class RedeemInviteRequest(BaseModel):
    """Redeem invite request."""

    code: str
    redeemer_uid: str = Field(min_length=1)
    redeemer_email: str = ""


class RedeemInviteResponse(BaseModel):
    """Redeem invite response."""

    success: bool
    invite_id: str
    sender_uid: str
    new_quota: QuotaResponse  # Redeemer's own pool after the re-grant
    replay: bool = False


class RedeemInviteUseCase(BaseUseCase):
    """Use case for redeeming an invite code."""

    def __init__(self, redemption_coordinator: RedemptionCoordinator) -> None:
        self.redemption_coordinator = redemption_coordinator

    async def execute(self, request: RedeemInviteRequest) -> RedeemInviteResponse:
        """Execute redeem flow.

        Raises:
            InvalidCodeError: If the code is unknown or malformed
            AlreadyRedeemedError: If someone else redeemed the code
            SelfRedemptionError: If the redeemer sent the invite
        """
        with logfire.span("redeem_invite.execute", redeemer_uid=request.redeemer_uid):
            result = await self.redemption_coordinator.redeem(
                request.code,
                UserId(request.redeemer_uid),
                request.redeemer_email,
            )
            return RedeemInviteResponse(
                success=result.success,
                invite_id=str(result.invite_id),
                sender_uid=result.sender_uid,
                new_quota=QuotaResponse.from_domain(result.new_quota),
                replay=result.replay,
            )
