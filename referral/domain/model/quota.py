"""Quota read model and idempotency record."""

from datetime import datetime

from pydantic import Field

from referral.domain.model.common import DomainModel, utcnow
from referral.domain.model.user import User
from referral.domain.value import InviteId, QuotaOperation, UserId


class QuotaSnapshot(DomainModel):
    """Derived view of a user's invite counters.

    Always recomputable from the user record and the invite ledger.
    """

    uid: UserId
    remaining: int
    granted: int
    redeemed: int
    outstanding: int = 0  # Sent invites not yet redeemed
    bonus_unlocked: bool = False
    sync_bonus_used: bool = False
    unlimited: bool = False
    can_send: bool = False

    @classmethod
    def from_user(cls, user: User, outstanding: int = 0) -> "QuotaSnapshot":
        """Build a snapshot from a user record."""
        return cls(
            uid=user.id,
            remaining=user.invites_remaining,
            granted=user.invites_granted,
            redeemed=user.invites_redeemed,
            outstanding=outstanding,
            bonus_unlocked=user.bonus_unlocked,
            sync_bonus_used=user.sync_bonus_used,
            unlimited=user.unlimited,
            can_send=user.can_send(),
        )


class AppliedOperation(DomainModel):
    """Durable marker that a quota effect for an invite has been applied."""

    invite_id: InviteId
    operation: QuotaOperation
    uid: UserId
    amount: int = 0  # Quantity applied; a debit of 0 is an admin send
    applied_at: datetime = Field(default_factory=utcnow)
