"""In-memory invite token repository for testing."""

from datetime import datetime
from typing import Optional

from referral.domain.error import TokenAlreadyExistsError
from referral.domain.model.invite_token import InviteToken
from referral.domain.repository.invite_token import InviteTokenRepository
from referral.domain.value import InviteCode, InviteStatus, UserId

from .database import InMemoryDatabase, checkpoint


class InMemoryInviteTokenRepository(InviteTokenRepository):
    """In-memory implementation of InviteTokenRepository for testing."""

    def __init__(self, db: InMemoryDatabase | None = None) -> None:
        self._db = db or InMemoryDatabase()

    async def find_by_code(self, code: InviteCode) -> Optional[InviteToken]:
        await checkpoint()
        return self._db.tokens.get(code)

    async def insert(self, token: InviteToken) -> InviteToken:
        await checkpoint()
        if token.token in self._db.tokens:
            raise TokenAlreadyExistsError(token.token.redacted)
        self._db.tokens[token.token] = token
        return token

    async def mark_used(
        self, code: InviteCode, by_uid: UserId, by_email: str, at: datetime
    ) -> Optional[InviteToken]:
        """Compare-and-swap with no suspension between check and set."""
        await checkpoint()
        token = self._db.tokens.get(code)
        if token is None or token.used:
            return None
        updated = token.model_copy(
            update={
                "used": True,
                "used_at": at,
                "used_by_uid": by_uid,
                "used_by_email": by_email,
            }
        )
        self._db.tokens[code] = updated
        return updated

    async def delete_unused(self, code: InviteCode) -> bool:
        await checkpoint()
        token = self._db.tokens.get(code)
        if token is None or token.used:
            return False
        del self._db.tokens[code]
        return True

    async def find_used_with_pending_invite(self, limit: int) -> list[InviteToken]:
        await checkpoint()
        pending = []
        for token in self._db.tokens.values():
            invite = self._db.invites.get(token.invite_id)
            if token.used and invite is not None and invite.status == InviteStatus.SENT:
                pending.append(token)
        pending.sort(key=lambda t: t.used_at or t.created_at)
        return pending[:limit]
