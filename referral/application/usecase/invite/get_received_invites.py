"""Get received invites use case."""

from pydantic import BaseModel

from referral.application.usecase.invite.generate_invite import InviteItem
from referral.config import Settings
from referral.domain.service import InviteLedger
from referral.domain.value import UserId


class GetReceivedInvitesRequest(BaseModel):
    """Get received invites request."""

    uid: str


class GetReceivedInvitesResponse(BaseModel):
    """Get received invites response."""

    invites: list[InviteItem]
    total: int


class GetReceivedInvitesUseCase:
    """Use case for listing the invites a user has redeemed."""

    def __init__(self, invite_ledger: InviteLedger, settings: Settings) -> None:
        self.invite_ledger = invite_ledger
        self.settings = settings

    async def execute(
        self, request: GetReceivedInvitesRequest
    ) -> GetReceivedInvitesResponse:
        invites = await self.invite_ledger.list_by_recipient(UserId(request.uid))
        items = [
            InviteItem.from_domain(invite, self.settings.invite_link(invite.token.root))
            for invite in invites
        ]
        return GetReceivedInvitesResponse(invites=items, total=len(items))
