"""Generate invite use case."""

from datetime import datetime

import logfire
from pydantic import BaseModel, Field

from referral.application.usecase.base import BaseUseCase
from referral.application.usecase.quota.get_quota import QuotaResponse
from referral.config import Settings
from referral.domain.model import Invite
from referral.domain.service import QuotaAccountant, RedemptionCoordinator
from referral.domain.value import InviteStatus, UserId


class InviteItem(BaseModel):
    """Invite item in response."""

    invite_id: str
    code: str
    link: str  # Full invite URL with code
    sender_uid: str
    recipient_email: str | None = None
    status: InviteStatus
    sent_at: datetime
    redeemed_at: datetime | None = None
    redeemed_by_uid: str | None = None

    @classmethod
    def from_domain(cls, invite: Invite, link: str) -> "InviteItem":
        return cls(
            invite_id=str(invite.id),
            code=invite.token.root,
            link=link,
            sender_uid=invite.sender_uid,
            recipient_email=invite.recipient_email,
            status=invite.status,
            sent_at=invite.sent_at,
            redeemed_at=invite.redeemed_at,
            redeemed_by_uid=invite.redeemed_by_uid,
        )


class GenerateInviteRequest(BaseModel):
    """Request to generate an invite."""

    sender_uid: str = Field(min_length=1)
    sender_email: str = ""
    recipient_email: str | None = None


class GenerateInviteResponse(BaseModel):
    """Response after generating an invite."""

    code: str
    link: str
    invite_id: str
    quota: QuotaResponse


class GenerateInviteUseCase(BaseUseCase):
    """Use case for generating a shareable invite code.

    Senders are provisioned on first contact, so a new member's first send
    works without a separate sign-up call.
    """

    def __init__(
        self,
        redemption_coordinator: RedemptionCoordinator,
        quota_accountant: QuotaAccountant,
        settings: Settings,
    ) -> None:
        """Initialize generate invite use case.

        Args:
            redemption_coordinator: Redemption coordinator domain service
            quota_accountant: Quota accountant domain service
            settings: Application settings
        """
        self.redemption_coordinator = redemption_coordinator
        self.quota_accountant = quota_accountant
        self.settings = settings

    async def execute(self, request: GenerateInviteRequest) -> GenerateInviteResponse:
        """Execute generate invite flow.

        Args:
            request: Sender identity and optional recipient hint

        Returns:
            The new code, its shareable link and the sender's quota

        Raises:
            QuotaExhaustedError: If the sender has no invites left
            RetryableError: If the store is temporarily unavailable
        """
        with logfire.span("generate_invite.execute", sender_uid=request.sender_uid):
            sender_uid = UserId(request.sender_uid)
            await self.quota_accountant.ensure_account(sender_uid, request.sender_email)

            generated = await self.redemption_coordinator.generate(
                sender_uid,
                request.sender_email,
                recipient_email=request.recipient_email,
            )
            code = generated.invite.token.root
            return GenerateInviteResponse(
                code=code,
                link=self.settings.invite_link(code),
                invite_id=str(generated.invite.id),
                quota=QuotaResponse.from_domain(generated.quota),
            )
