"""Invite entity.

One invite is recorded per sent invitation. It is the audit trail of the
referral program and is never deleted.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from referral.domain.model.common import DomainModel, utcnow
from referral.domain.value import InviteCode, InviteId, InviteStatus, UserId


class Invite(DomainModel):
    """Invite entity.

    Business rules:
    - Created with status ``sent`` when a user sends an invitation
    - Transitions to ``redeemed`` exactly once, recording who redeemed it
    - Invites never expire
    """

    id: InviteId
    sender_uid: UserId
    sender_email: str = ""
    recipient_email: Optional[str] = None  # Optional hint, not enforced
    token: InviteCode
    status: InviteStatus = InviteStatus.SENT
    sent_at: datetime = Field(default_factory=utcnow)
    redeemed_at: Optional[datetime] = None
    redeemed_by_uid: Optional[UserId] = None
    redeemed_by_email: Optional[str] = None

    @property
    def is_redeemed(self) -> bool:
        return self.status == InviteStatus.REDEEMED
