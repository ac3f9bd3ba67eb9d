"""Referral edge entity."""

from datetime import datetime

from pydantic import Field

from referral.domain.model.common import DomainModel, utcnow
from referral.domain.value import EdgeId, InviteId, UserId


class InviteEdge(DomainModel):
    """Directed sender -> recipient referral edge.

    Created exactly once per successful redemption and never mutated.
    """

    id: EdgeId
    from_uid: UserId
    to_uid: UserId
    invite_id: InviteId
    created_at: datetime = Field(default_factory=utcnow)
