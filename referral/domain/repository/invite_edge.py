"""Invite edge repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from referral.domain.model.invite_edge import InviteEdge
from referral.domain.value import InviteId, UserId


class InviteEdgeRepository(ABC):
    """Repository for referral edges. Edges are insert-only."""

    @abstractmethod
    async def insert_if_absent(self, edge: InviteEdge) -> InviteEdge:
        """Insert an edge unless one already exists for its invite.

        Args:
            edge: The edge to insert

        Returns:
            The stored edge for the invite (the existing one on conflict)
        """
        pass

    @abstractmethod
    async def find_by_invite(self, invite_id: InviteId) -> Optional[InviteEdge]:
        """Find the edge created by redeeming an invite."""
        pass

    @abstractmethod
    async def find_by_user(self, user_id: UserId) -> list[InviteEdge]:
        """Find edges where the user is either sender or recipient."""
        pass

    @abstractmethod
    async def count_connections(self, user_id: UserId) -> int:
        """Count distinct users connected to ``user_id`` by an edge."""
        pass

    @abstractmethod
    async def find_all(self) -> list[InviteEdge]:
        """Return every edge, oldest first."""
        pass
