"""Domain events and the publisher port.

Events describe state changes other parts of the product react to (badges,
toasts, analytics). The engine only emits them.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from referral.domain.model.common import DomainModel, utcnow
from referral.domain.model.quota import QuotaSnapshot
from referral.domain.value import InviteId, UserId


class DomainEvent(DomainModel):
    """Base domain event."""

    occurred_at: datetime = Field(default_factory=utcnow)


class InviteSent(DomainEvent):
    """A user sent an invitation."""

    name: Literal["invite_sent"] = "invite_sent"
    invite_id: InviteId
    sender_uid: UserId


class InviteRedeemed(DomainEvent):
    """An invitation was redeemed by a new member."""

    name: Literal["invite_redeemed"] = "invite_redeemed"
    invite_id: InviteId
    sender_uid: UserId
    redeemer_uid: UserId


class QuotaChanged(DomainEvent):
    """A user's quota counters changed."""

    name: Literal["quota_changed"] = "quota_changed"
    reason: str
    snapshot: QuotaSnapshot
    invite_id: Optional[InviteId] = None


class BonusUnlocked(DomainEvent):
    """A one-shot bonus was granted."""

    name: Literal["bonus_unlocked"] = "bonus_unlocked"
    uid: UserId
    kind: Literal["engagement", "address_book_sync"]
    amount: int


class EventPublisher(ABC):
    """Port for emitting domain events."""

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """Publish a domain event.

        Args:
            event: The event to publish
        """
        pass
