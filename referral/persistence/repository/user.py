"""PostgreSQL implementation of User repository."""

from typing import Any, Optional

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert

from referral.domain.model import User
from referral.domain.repository import UserRepository
from referral.domain.value import UserId
from referral.persistence.mappers import row_to_user, user_to_dict
from referral.persistence.repository.base import PostgresRepository
from referral.persistence.tables import users_table


class PostgresUserRepository(PostgresRepository, UserRepository):
    """PostgreSQL implementation of UserRepository.

    Counter changes are single ``UPDATE ... WHERE ... RETURNING`` statements.
    """

    async def _update(self, stmt: Any, operation: str) -> Optional[User]:
        row = await self._first(
            stmt.values(updated_at=func.now()).returning(users_table), operation
        )
        await self.session.flush()
        return row_to_user(row) if row else None

    def _by_id(self, user_id: UserId):
        return update(users_table).where(users_table.c.id == user_id)

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID.

        Args:
            user_id: User ID to look up

        Returns:
            User if found, None otherwise
        """
        stmt = select(users_table).where(users_table.c.id == user_id)
        row = await self._first(stmt, "find_user")
        return row_to_user(row) if row else None

    async def find_all(self) -> list[User]:
        stmt = select(users_table).order_by(users_table.c.created_at, users_table.c.id)
        result = await self._execute(stmt, "find_all_users")
        return [row_to_user(dict(row)) for row in result.mappings().all()]

    async def insert_if_absent(self, user: User) -> bool:
        """Insert a user unless the ID exists (``ON CONFLICT DO NOTHING``)."""
        stmt = (
            insert(users_table)
            .values(**user_to_dict(user))
            .on_conflict_do_nothing(index_elements=[users_table.c.id])
            .returning(users_table.c.id)
        )
        result = await self._execute(stmt, "insert_user")
        inserted = result.first() is not None
        await self.session.flush()
        return inserted

    async def decrement_remaining(self, user_id: UserId) -> Optional[User]:
        stmt = (
            self._by_id(user_id)
            .where(users_table.c.admin.is_(False))
            .where(users_table.c.invites_remaining > 0)
            .values(invites_remaining=users_table.c.invites_remaining - 1)
        )
        return await self._update(stmt, "decrement_remaining")

    async def increment_remaining(
        self, user_id: UserId, amount: int
    ) -> Optional[User]:
        stmt = self._by_id(user_id).values(
            invites_remaining=users_table.c.invites_remaining + amount
        )
        return await self._update(stmt, "increment_remaining")

    async def record_unlimited_send(self, user_id: UserId) -> Optional[User]:
        stmt = (
            self._by_id(user_id)
            .where(users_table.c.admin.is_(True))
            .values(invites_granted=users_table.c.invites_granted + 1)
        )
        return await self._update(stmt, "record_unlimited_send")

    async def revert_unlimited_send(self, user_id: UserId) -> Optional[User]:
        stmt = (
            self._by_id(user_id)
            .where(
                users_table.c.invites_granted
                > users_table.c.invites_remaining + users_table.c.invites_redeemed
            )
            .values(invites_granted=users_table.c.invites_granted - 1)
        )
        return await self._update(stmt, "revert_unlimited_send")

    async def increment_redeemed(self, user_id: UserId) -> Optional[User]:
        stmt = self._by_id(user_id).values(
            invites_redeemed=users_table.c.invites_redeemed + 1
        )
        return await self._update(stmt, "increment_redeemed")

    async def grant(self, user_id: UserId, amount: int) -> Optional[User]:
        stmt = self._by_id(user_id).values(
            invites_remaining=users_table.c.invites_remaining + amount,
            invites_granted=users_table.c.invites_granted + amount,
        )
        return await self._update(stmt, "grant")

    async def grant_bonus(self, user_id: UserId, amount: int) -> Optional[User]:
        stmt = (
            self._by_id(user_id)
            .where(users_table.c.bonus_unlocked.is_(False))
            .values(
                bonus_unlocked=True,
                invites_remaining=users_table.c.invites_remaining + amount,
                invites_granted=users_table.c.invites_granted + amount,
            )
        )
        return await self._update(stmt, "grant_bonus")

    async def grant_sync_bonus(self, user_id: UserId, amount: int) -> Optional[User]:
        stmt = (
            self._by_id(user_id)
            .where(users_table.c.sync_bonus_used.is_(False))
            .values(
                sync_bonus_used=True,
                invites_remaining=users_table.c.invites_remaining + amount,
                invites_granted=users_table.c.invites_granted + amount,
            )
        )
        return await self._update(stmt, "grant_sync_bonus")

    async def promote_admin(self, user_id: UserId) -> Optional[User]:
        stmt = (
            self._by_id(user_id)
            .where(users_table.c.admin.is_(False))
            .values(admin=True)
        )
        return await self._update(stmt, "promote_admin")

    async def revoke_admin(self, user_id: UserId, remaining: int) -> Optional[User]:
        """Clear admin and rebase counters in one statement."""
        stmt = (
            self._by_id(user_id)
            .where(users_table.c.admin.is_(True))
            .values(
                admin=False,
                invites_remaining=remaining,
                invites_granted=users_table.c.invites_granted
                - users_table.c.invites_remaining
                + remaining,
            )
        )
        return await self._update(stmt, "revoke_admin")
