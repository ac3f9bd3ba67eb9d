"""PostgreSQL implementation of InviteEdge repository."""

from typing import Optional

from sqlalchemy import func, or_, select, union
from sqlalchemy.dialects.postgresql import insert

from referral.domain.model.invite_edge import InviteEdge
from referral.domain.repository.invite_edge import InviteEdgeRepository
from referral.domain.value import InviteId, UserId
from referral.persistence.mappers import invite_edge_to_dict, row_to_invite_edge
from referral.persistence.repository.base import PostgresRepository
from referral.persistence.tables import invite_edges_table


class PostgresInviteEdgeRepository(PostgresRepository, InviteEdgeRepository):
    """PostgreSQL implementation of InviteEdgeRepository."""

    async def insert_if_absent(self, edge: InviteEdge) -> InviteEdge:
        """Insert unless the invite already has an edge, then read it back."""
        stmt = (
            insert(invite_edges_table)
            .values(**invite_edge_to_dict(edge))
            .on_conflict_do_nothing(index_elements=[invite_edges_table.c.invite_id])
        )
        await self._execute(stmt, "insert_edge")
        await self.session.flush()
        stored = await self.find_by_invite(edge.invite_id)
        return stored or edge

    async def find_by_invite(self, invite_id: InviteId) -> Optional[InviteEdge]:
        stmt = select(invite_edges_table).where(
            invite_edges_table.c.invite_id == invite_id
        )
        row = await self._first(stmt, "find_edge_by_invite")
        return row_to_invite_edge(row) if row else None

    async def find_by_user(self, user_id: UserId) -> list[InviteEdge]:
        stmt = (
            select(invite_edges_table)
            .where(
                or_(
                    invite_edges_table.c.from_uid == user_id,
                    invite_edges_table.c.to_uid == user_id,
                )
            )
            .order_by(invite_edges_table.c.created_at)
        )
        result = await self._execute(stmt, "find_edges_by_user")
        return [row_to_invite_edge(dict(row)) for row in result.mappings().all()]

    async def count_connections(self, user_id: UserId) -> int:
        """Count distinct neighbours in either direction."""
        neighbours = union(
            select(invite_edges_table.c.to_uid.label("uid")).where(
                invite_edges_table.c.from_uid == user_id
            ),
            select(invite_edges_table.c.from_uid.label("uid")).where(
                invite_edges_table.c.to_uid == user_id
            ),
        ).subquery()
        stmt = select(func.count()).select_from(neighbours)
        result = await self._execute(stmt, "count_connections")
        return result.scalar_one()

    async def find_all(self) -> list[InviteEdge]:
        stmt = select(invite_edges_table).order_by(invite_edges_table.c.created_at)
        result = await self._execute(stmt, "find_all_edges")
        return [row_to_invite_edge(dict(row)) for row in result.mappings().all()]
