"""Invite repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from referral.domain.model.invite import Invite
from referral.domain.value import InviteCode, InviteId, InviteStatus, UserId


class InviteRepository(ABC):
    """Repository for Invite entity.

    Invites are append-only apart from the single ``sent -> redeemed``
    transition, which is a conditional update.
    """

    @abstractmethod
    async def find_by_id(self, invite_id: InviteId) -> Optional[Invite]:
        """Find an invite by ID.

        Args:
            invite_id: The invite's unique identifier

        Returns:
            The invite if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_token(self, token: InviteCode) -> Optional[Invite]:
        """Find an invite by its code.

        Args:
            token: The invite code

        Returns:
            The invite if found, None otherwise
        """
        pass

    @abstractmethod
    async def insert(self, invite: Invite) -> Invite:
        """Insert a newly sent invite.

        Args:
            invite: The invite to insert

        Returns:
            The inserted invite
        """
        pass

    @abstractmethod
    async def mark_redeemed(
        self,
        invite_id: InviteId,
        by_uid: UserId,
        by_email: str,
        at: datetime,
    ) -> Optional[Invite]:
        """Transition an invite from ``sent`` to ``redeemed``.

        Only applies while the invite is still ``sent``.

        Args:
            invite_id: The invite's unique identifier
            by_uid: Redeeming user
            by_email: Redeeming user's email
            at: Redemption time

        Returns:
            The updated invite, or None if it was not in ``sent`` status
        """
        pass

    @abstractmethod
    async def find_by_sender(
        self,
        sender_uid: UserId,
        status: InviteStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Invite]:
        """Find invites sent by a user, newest first.

        Args:
            sender_uid: The sender's ID
            status: Optional status filter
            limit: Maximum number of results
            offset: Number of results to skip

        Returns:
            List of invites
        """
        pass

    @abstractmethod
    async def find_by_redeemer(self, redeemer_uid: UserId) -> list[Invite]:
        """Find invites redeemed by a user, newest first."""
        pass

    @abstractmethod
    async def count_by_sender(
        self, sender_uid: UserId, status: InviteStatus | None = None
    ) -> int:
        """Count invites sent by a user.

        Args:
            sender_uid: The sender's ID
            status: Optional status filter

        Returns:
            Number of invites
        """
        pass
