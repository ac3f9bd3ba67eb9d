"""In-memory user repository for testing."""

from typing import Callable, Optional

from referral.domain.model.common import utcnow
from referral.domain.model.user import User
from referral.domain.repository.user import UserRepository
from referral.domain.value import UserId

from .database import InMemoryDatabase, checkpoint


class InMemoryUserRepository(UserRepository):
    """In-memory implementation of UserRepository for testing."""

    def __init__(self, db: InMemoryDatabase | None = None) -> None:
        self._db = db or InMemoryDatabase()

    async def _update(
        self,
        user_id: UserId,
        condition: Callable[[User], bool],
        changes: Callable[[User], dict],
    ) -> Optional[User]:
        await checkpoint()
        user = self._db.users.get(user_id)
        if user is None or not condition(user):
            return None
        updated = user.model_copy(update={**changes(user), "updated_at": utcnow()})
        self._db.users[user_id] = updated
        return updated

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID."""
        await checkpoint()
        return self._db.users.get(user_id)

    async def find_all(self) -> list[User]:
        await checkpoint()
        return sorted(self._db.users.values(), key=lambda u: (u.created_at, u.id))

    async def insert_if_absent(self, user: User) -> bool:
        await checkpoint()
        if user.id in self._db.users:
            return False
        self._db.users[user.id] = user
        return True

    async def decrement_remaining(self, user_id: UserId) -> Optional[User]:
        return await self._update(
            user_id,
            lambda u: not u.admin and u.invites_remaining > 0,
            lambda u: {"invites_remaining": u.invites_remaining - 1},
        )

    async def increment_remaining(
        self, user_id: UserId, amount: int
    ) -> Optional[User]:
        return await self._update(
            user_id,
            lambda u: True,
            lambda u: {"invites_remaining": u.invites_remaining + amount},
        )

    async def record_unlimited_send(self, user_id: UserId) -> Optional[User]:
        return await self._update(
            user_id,
            lambda u: u.admin,
            lambda u: {"invites_granted": u.invites_granted + 1},
        )

    async def revert_unlimited_send(self, user_id: UserId) -> Optional[User]:
        return await self._update(
            user_id,
            lambda u: u.invites_granted > u.invites_remaining + u.invites_redeemed,
            lambda u: {"invites_granted": u.invites_granted - 1},
        )

    async def increment_redeemed(self, user_id: UserId) -> Optional[User]:
        return await self._update(
            user_id,
            lambda u: True,
            lambda u: {"invites_redeemed": u.invites_redeemed + 1},
        )

    async def grant(self, user_id: UserId, amount: int) -> Optional[User]:
        return await self._update(
            user_id,
            lambda u: True,
            lambda u: {
                "invites_remaining": u.invites_remaining + amount,
                "invites_granted": u.invites_granted + amount,
            },
        )

    async def grant_bonus(self, user_id: UserId, amount: int) -> Optional[User]:
        return await self._update(
            user_id,
            lambda u: not u.bonus_unlocked,
            lambda u: {
                "bonus_unlocked": True,
                "invites_remaining": u.invites_remaining + amount,
                "invites_granted": u.invites_granted + amount,
            },
        )

    async def grant_sync_bonus(self, user_id: UserId, amount: int) -> Optional[User]:
        return await self._update(
            user_id,
            lambda u: not u.sync_bonus_used,
            lambda u: {
                "sync_bonus_used": True,
                "invites_remaining": u.invites_remaining + amount,
                "invites_granted": u.invites_granted + amount,
            },
        )

    async def promote_admin(self, user_id: UserId) -> Optional[User]:
        return await self._update(user_id, lambda u: not u.admin, lambda u: {"admin": True})

    async def revoke_admin(self, user_id: UserId, remaining: int) -> Optional[User]:
        return await self._update(
            user_id,
            lambda u: u.admin,
            lambda u: {
                "admin": False,
                "invites_remaining": remaining,
                "invites_granted": u.invites_granted - u.invites_remaining + remaining,
            },
        )
