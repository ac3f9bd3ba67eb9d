"""In-memory invite edge repository for testing."""

from typing import Optional

from referral.domain.model.invite_edge import InviteEdge
from referral.domain.repository.invite_edge import InviteEdgeRepository
from referral.domain.value import InviteId, UserId

from .database import InMemoryDatabase, checkpoint


class InMemoryInviteEdgeRepository(InviteEdgeRepository):
    """In-memory implementation of InviteEdgeRepository for testing."""

    def __init__(self, db: InMemoryDatabase | None = None) -> None:
        self._db = db or InMemoryDatabase()

    async def insert_if_absent(self, edge: InviteEdge) -> InviteEdge:
        await checkpoint()
        return self._db.edges.setdefault(edge.invite_id, edge)

    async def find_by_invite(self, invite_id: InviteId) -> Optional[InviteEdge]:
        await checkpoint()
        return self._db.edges.get(invite_id)

    async def find_by_user(self, user_id: UserId) -> list[InviteEdge]:
        await checkpoint()
        edges = [
            edge
            for edge in self._db.edges.values()
            if edge.from_uid == user_id or edge.to_uid == user_id
        ]
        return sorted(edges, key=lambda e: e.created_at)

    async def count_connections(self, user_id: UserId) -> int:
        await checkpoint()
        neighbours = set()
        for edge in self._db.edges.values():
            if edge.from_uid == user_id:
                neighbours.add(edge.to_uid)
            elif edge.to_uid == user_id:
                neighbours.add(edge.from_uid)
        return len(neighbours)

    async def find_all(self) -> list[InviteEdge]:
        await checkpoint()
        return sorted(self._db.edges.values(), key=lambda e: e.created_at)
