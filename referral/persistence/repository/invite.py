"""PostgreSQL implementation of Invite repository."""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, insert, select, update

from referral.domain.model.invite import Invite
from referral.domain.repository.invite import InviteRepository
from referral.domain.value import InviteCode, InviteId, InviteStatus, UserId
from referral.persistence.database import translate_store_errors
from referral.persistence.mappers import invite_to_dict, row_to_invite
from referral.persistence.repository.base import PostgresRepository
from referral.persistence.tables import invites_table


class PostgresInviteRepository(PostgresRepository, InviteRepository):
    """PostgreSQL implementation of InviteRepository."""

    async def find_by_id(self, invite_id: InviteId) -> Optional[Invite]:
        """Find an invite by ID."""
        stmt = select(invites_table).where(invites_table.c.id == invite_id)
        row = await self._first(stmt, "find_invite")
        return row_to_invite(row) if row else None

    async def find_by_token(self, token: InviteCode) -> Optional[Invite]:
        """Find an invite by token.

        Args:
            token: The invite code (value object, compared by its root)

        Returns:
            The invite if found, None otherwise
        """
        stmt = select(invites_table).where(invites_table.c.token == token.root)
        row = await self._first(stmt, "find_invite_by_token")
        return row_to_invite(row) if row else None

    async def insert(self, invite: Invite) -> Invite:
        """Insert a sent invite inside a savepoint.

        A failed insert rolls back only the savepoint, so the caller can
        still compensate within the request transaction.
        """
        async with translate_store_errors("insert_invite"):
            async with self.session.begin_nested():
                await self.session.execute(
                    insert(invites_table).values(**invite_to_dict(invite))
                )
        return invite

    async def mark_redeemed(
        self,
        invite_id: InviteId,
        by_uid: UserId,
        by_email: str,
        at: datetime,
    ) -> Optional[Invite]:
        """Conditional ``sent -> redeemed`` transition."""
        stmt = (
            update(invites_table)
            .where(invites_table.c.id == invite_id)
            .where(invites_table.c.status == InviteStatus.SENT.value)
            .values(
                status=InviteStatus.REDEEMED.value,
                redeemed_at=at,
                redeemed_by_uid=by_uid,
                redeemed_by_email=by_email,
            )
            .returning(invites_table)
        )
        row = await self._first(stmt, "mark_invite_redeemed")
        await self.session.flush()
        return row_to_invite(row) if row else None

    async def find_by_sender(
        self,
        sender_uid: UserId,
        status: InviteStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Invite]:
        """Find invites by sender with pagination, newest first."""
        stmt = select(invites_table).where(invites_table.c.sender_uid == sender_uid)
        if status is not None:
            stmt = stmt.where(invites_table.c.status == status.value)
        stmt = (
            stmt.order_by(invites_table.c.sent_at.desc(), invites_table.c.id)
            .limit(limit)
            .offset(offset)
        )
        result = await self._execute(stmt, "find_invites_by_sender")
        return [row_to_invite(dict(row)) for row in result.mappings().all()]

    async def find_by_redeemer(self, redeemer_uid: UserId) -> list[Invite]:
        stmt = (
            select(invites_table)
            .where(invites_table.c.redeemed_by_uid == redeemer_uid)
            .order_by(invites_table.c.redeemed_at.desc())
        )
        result = await self._execute(stmt, "find_invites_by_redeemer")
        return [row_to_invite(dict(row)) for row in result.mappings().all()]

    async def count_by_sender(
        self, sender_uid: UserId, status: InviteStatus | None = None
    ) -> int:
        """Count invites by sender."""
        stmt = (
            select(func.count())
            .select_from(invites_table)
            .where(invites_table.c.sender_uid == sender_uid)
        )
        if status is not None:
            stmt = stmt.where(invites_table.c.status == status.value)
        result = await self._execute(stmt, "count_invites_by_sender")
        return result.scalar_one()
