"""Get referrals use case."""

from datetime import datetime

from pydantic import BaseModel

from referral.domain.service import ReferralGraphService
from referral.domain.value import UserId


class ReferralEdgeItem(BaseModel):
    """A sender to recipient link."""

    edge_id: str
    from_uid: str
    to_uid: str
    invite_id: str
    created_at: datetime


class GetReferralsRequest(BaseModel):
    """Get referrals request."""

    uid: str


class GetReferralsResponse(BaseModel):
    """Get referrals response."""

    uid: str
    invited_by: str | None = None
    invited: list[ReferralEdgeItem]
    connection_count: int


class GetReferralsUseCase:
    """Use case for a user's place in the referral graph."""

    def __init__(self, referral_graph: ReferralGraphService) -> None:
        self.referral_graph = referral_graph

    async def execute(self, request: GetReferralsRequest) -> GetReferralsResponse:
        """Return who invited the user and whom they invited."""
        user_id = UserId(request.uid)
        edges = await self.referral_graph.edges_for(user_id)

        invited_by = next(
            (edge.from_uid for edge in edges if edge.to_uid == user_id), None
        )
        invited = [
            ReferralEdgeItem(
                edge_id=str(edge.id),
                from_uid=edge.from_uid,
                to_uid=edge.to_uid,
                invite_id=str(edge.invite_id),
                created_at=edge.created_at,
            )
            for edge in edges
            if edge.from_uid == user_id
        ]
        return GetReferralsResponse(
            uid=request.uid,
            invited_by=invited_by,
            invited=invited,
            connection_count=await self.referral_graph.connection_count(user_id),
        )
