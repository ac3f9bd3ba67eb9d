"""PostgreSQL implementation of InviteToken repository."""

from datetime import datetime
from typing import Optional

from sqlalchemy import and_, delete, insert, select, update
from sqlalchemy.exc import IntegrityError

from referral.domain.error import TokenAlreadyExistsError
from referral.domain.model.invite_token import InviteToken
from referral.domain.repository.invite_token import InviteTokenRepository
from referral.domain.value import InviteCode, InviteStatus, UserId
from referral.persistence.database import translate_store_errors
from referral.persistence.mappers import invite_token_to_dict, row_to_invite_token
from referral.persistence.repository.base import PostgresRepository
from referral.persistence.tables import invite_tokens_table, invites_table


class PostgresInviteTokenRepository(PostgresRepository, InviteTokenRepository):
    """PostgreSQL implementation of InviteTokenRepository."""

    async def find_by_code(self, code: InviteCode) -> Optional[InviteToken]:
        stmt = select(invite_tokens_table).where(
            invite_tokens_table.c.token == code.root
        )
        row = await self._first(stmt, "find_token")
        return row_to_invite_token(row) if row else None

    async def insert(self, token: InviteToken) -> InviteToken:
        """Insert a token inside a savepoint.

        Raises:
            TokenAlreadyExistsError: On primary key collision
        """
        try:
            async with translate_store_errors("insert_token"):
                async with self.session.begin_nested():
                    await self.session.execute(
                        insert(invite_tokens_table).values(
                            **invite_token_to_dict(token)
                        )
                    )
        except IntegrityError as e:
            raise TokenAlreadyExistsError(token.token.redacted) from e
        return token

    async def mark_used(
        self, code: InviteCode, by_uid: UserId, by_email: str, at: datetime
    ) -> Optional[InviteToken]:
        """Compare-and-swap ``used`` from false to true.

        ``UPDATE invite_tokens SET used = true ... WHERE token = :t AND
        used = false RETURNING *``. Concurrent callers serialize on the row
        lock; only the first sees a returned row.
        """
        stmt = (
            update(invite_tokens_table)
            .where(invite_tokens_table.c.token == code.root)
            .where(invite_tokens_table.c.used.is_(False))
            .values(used=True, used_at=at, used_by_uid=by_uid, used_by_email=by_email)
            .returning(invite_tokens_table)
        )
        row = await self._first(stmt, "mark_token_used")
        await self.session.flush()
        return row_to_invite_token(row) if row else None

    async def delete_unused(self, code: InviteCode) -> bool:
        stmt = (
            delete(invite_tokens_table)
            .where(invite_tokens_table.c.token == code.root)
            .where(invite_tokens_table.c.used.is_(False))
            .returning(invite_tokens_table.c.token)
        )
        result = await self._execute(stmt, "delete_unused_token")
        deleted = result.first() is not None
        await self.session.flush()
        return deleted

    async def find_used_with_pending_invite(self, limit: int) -> list[InviteToken]:
        """Used tokens joined to invites still in ``sent`` status."""
        stmt = (
            select(invite_tokens_table)
            .select_from(
                invite_tokens_table.join(
                    invites_table,
                    and_(
                        invites_table.c.id == invite_tokens_table.c.invite_id,
                        invites_table.c.token == invite_tokens_table.c.token,
                    ),
                )
            )
            .where(invite_tokens_table.c.used.is_(True))
            .where(invites_table.c.status == InviteStatus.SENT.value)
            .order_by(invite_tokens_table.c.used_at)
            .limit(limit)
        )
        result = await self._execute(stmt, "find_unsettled_tokens")
        return [row_to_invite_token(dict(row)) for row in result.mappings().all()]
