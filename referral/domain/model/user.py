"""User invite account.

Users are owned by the identity system. The referral engine only reads the
account and mutates its invite counters and bonus guards.
"""

from datetime import datetime

from pydantic import Field

from referral.domain.model.common import DomainModel, utcnow
from referral.domain.value import UserId


class User(DomainModel):
    """User invite account.

    Business rules:
    - Counters never go negative and invites_granted >= invites_redeemed
    - An admin send adds to ``invites_granted`` instead of taking from
      ``invites_remaining``
    - Admins are unlimited via the ``admin`` flag; ``invites_remaining`` keeps
      its last finite value and is never used as a sentinel
    - Each bonus guard flips from False to True at most once
    """

    id: UserId
    email: str = ""
    admin: bool = False
    invites_remaining: int = Field(default=0, ge=0)
    invites_granted: int = Field(default=0, ge=0)
    invites_redeemed: int = Field(default=0, ge=0)
    bonus_unlocked: bool = False
    sync_bonus_used: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def unlimited(self) -> bool:
        """Whether the user may send without consuming quota."""
        return self.admin

    def can_send(self) -> bool:
        """Whether the user may send one more invite."""
        return self.admin or self.invites_remaining > 0
