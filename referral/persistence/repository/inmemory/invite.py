"""In-memory invite repository for testing."""

from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError

from referral.domain.model.invite import Invite
from referral.domain.repository.invite import InviteRepository
from referral.domain.value import InviteCode, InviteId, InviteStatus, UserId

from .database import InMemoryDatabase, checkpoint


class InMemoryInviteRepository(InviteRepository):
    """In-memory implementation of InviteRepository for testing."""

    def __init__(self, db: InMemoryDatabase | None = None) -> None:
        self._db = db or InMemoryDatabase()

    async def find_by_id(self, invite_id: InviteId) -> Optional[Invite]:
        """Find an invite by ID."""
        await checkpoint()
        return self._db.invites.get(invite_id)

    async def find_by_token(self, token: InviteCode) -> Optional[Invite]:
        """Find an invite by its token."""
        await checkpoint()
        for invite in self._db.invites.values():
            if invite.token == token:
                return invite
        return None

    async def insert(self, invite: Invite) -> Invite:
        """Insert a sent invite.

        Raises:
            IntegrityError: If the ID or token is already recorded, or the
                token does not exist
        """
        await checkpoint()
        if invite.id in self._db.invites or any(
            existing.token == invite.token for existing in self._db.invites.values()
        ):
            raise IntegrityError("Duplicate invite", None, Exception())
        if invite.token not in self._db.tokens:
            raise IntegrityError("Invite token does not exist", None, Exception())
        self._db.invites[invite.id] = invite
        return invite

    async def mark_redeemed(
        self,
        invite_id: InviteId,
        by_uid: UserId,
        by_email: str,
        at: datetime,
    ) -> Optional[Invite]:
        await checkpoint()
        invite = self._db.invites.get(invite_id)
        if invite is None or invite.status != InviteStatus.SENT:
            return None
        updated = invite.model_copy(
            update={
                "status": InviteStatus.REDEEMED,
                "redeemed_at": at,
                "redeemed_by_uid": by_uid,
                "redeemed_by_email": by_email,
            }
        )
        self._db.invites[invite_id] = updated
        return updated

    def _matching(
        self, sender_uid: UserId, status: Optional[InviteStatus]
    ) -> list[Invite]:
        return [
            invite
            for invite in self._db.invites.values()
            if invite.sender_uid == sender_uid
            and (status is None or invite.status == status)
        ]

    async def find_by_sender(
        self,
        sender_uid: UserId,
        status: Optional[InviteStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Invite]:
        """Find invites by sender with pagination."""
        await checkpoint()
        matches = self._matching(sender_uid, status)

        # Sort by sent_at descending
        matches.sort(key=lambda inv: inv.sent_at, reverse=True)

        # Apply pagination
        return matches[offset : offset + limit]

    async def find_by_redeemer(self, redeemer_uid: UserId) -> list[Invite]:
        await checkpoint()
        matches = [
            invite
            for invite in self._db.invites.values()
            if invite.redeemed_by_uid == redeemer_uid
        ]
        matches.sort(key=lambda inv: inv.redeemed_at or inv.sent_at, reverse=True)
        return matches

    async def count_by_sender(
        self, sender_uid: UserId, status: Optional[InviteStatus] = None
    ) -> int:
        """Count invites by sender."""
        await checkpoint()
        return len(self._matching(sender_uid, status))
