"""Get my invites use case."""

from pydantic import BaseModel, Field

from referral.application.usecase.invite.generate_invite import InviteItem
from referral.application.usecase.quota.get_quota import QuotaResponse
from referral.config import Settings
from referral.domain.service import InviteLedger, QuotaAccountant
from referral.domain.value import InviteStatus, UserId


class GetMyInvitesRequest(BaseModel):
    """Get my invites request."""

    uid: str
    status: InviteStatus | None = None
    limit: int = Field(default=50, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class GetMyInvitesResponse(BaseModel):
    """Get my invites response."""

    invites: list[InviteItem]
    total: int
    quota: QuotaResponse


class GetMyInvitesUseCase:
    """Use case for listing the invites a user has sent."""

    def __init__(
        self,
        invite_ledger: InviteLedger,
        quota_accountant: QuotaAccountant,
        settings: Settings,
    ) -> None:
        """Initialize get my invites use case.

        Args:
            invite_ledger: Invite ledger domain service
            quota_accountant: Quota accountant domain service
            settings: Application settings
        """
        self.invite_ledger = invite_ledger
        self.quota_accountant = quota_accountant
        self.settings = settings

    async def execute(self, request: GetMyInvitesRequest) -> GetMyInvitesResponse:
        """Execute get my invites flow.

        Args:
            request: User and paging options

        Returns:
            Sent invites, newest first, with the user's current quota

        Raises:
            NotFoundError: If user not found
        """
        user_id = UserId(request.uid)

        # Quota first so unknown users get a 404 rather than an empty list
        snapshot = await self.quota_accountant.snapshot(user_id)

        invites = await self.invite_ledger.list_by_sender(
            user_id,
            status=request.status,
            limit=request.limit,
            offset=request.offset,
        )

        items = [
            InviteItem.from_domain(invite, self.settings.invite_link(invite.token.root))
            for invite in invites
        ]
        return GetMyInvitesResponse(
            invites=items,
            total=len(items),
            quota=QuotaResponse.from_domain(snapshot),
        )
