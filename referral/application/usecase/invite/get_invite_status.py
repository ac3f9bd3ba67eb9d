"""Get invite status use case."""

from pydantic import BaseModel

from referral.domain.service import RedemptionCoordinator
from referral.domain.value import RedemptionState


class GetInviteStatusRequest(BaseModel):
    """Get invite status request."""

    code: str


class GetInviteStatusResponse(BaseModel):
    """Get invite status response.

    Lets the landing page show who sent the invite before the recipient
    signs up.
    """

    valid: bool
    state: RedemptionState
    inviter_id: str | None = None
    inviter_name: str | None = None
    reason: str | None = None


class GetInviteStatusUseCase:
    """Use case for checking an invite code without redeeming it."""

    def __init__(self, redemption_coordinator: RedemptionCoordinator) -> None:
        self.redemption_coordinator = redemption_coordinator

    async def execute(self, request: GetInviteStatusRequest) -> GetInviteStatusResponse:
        status = await self.redemption_coordinator.status(request.code)
        return GetInviteStatusResponse(
            valid=status.valid,
            state=status.state,
            inviter_id=status.inviter_id,
            inviter_name=status.inviter_name,
            reason=status.reason,
        )
