"""Invite token entity.

Redemption fast-path index, one per invite code. ``used`` is the single
authoritative flag guarding at-most-once redemption.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from referral.domain.model.common import DomainModel, utcnow
from referral.domain.value import InviteCode, InviteId, UserId


class InviteToken(DomainModel):
    """Invite token entity."""

    token: InviteCode
    invite_id: InviteId
    sender_uid: UserId
    used: bool = False
    used_at: Optional[datetime] = None
    used_by_uid: Optional[UserId] = None
    used_by_email: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
