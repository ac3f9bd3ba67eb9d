"""Invite ledger domain service."""

from datetime import datetime
from uuid import uuid4

import logfire

from referral.domain.error import InconsistentRedemptionError, NotFoundError
from referral.domain.model.common import utcnow
from referral.domain.model.invite import Invite
from referral.domain.model.invite_edge import InviteEdge
from referral.domain.repository import InviteEdgeRepository, InviteRepository
from referral.domain.value import EdgeId, InviteCode, InviteId, InviteStatus, UserId

from .base import Service


class InviteLedger(Service):
    """Durable record of sent invites and the referral edges they create."""

    def __init__(
        self,
        invite_repository: InviteRepository,
        edge_repository: InviteEdgeRepository,
    ) -> None:
        """Initialize invite ledger.

        Args:
            invite_repository: Invite repository
            edge_repository: Invite edge repository
        """
        self.invite_repository = invite_repository
        self.edge_repository = edge_repository

    async def record_sent(self, invite: Invite) -> Invite:
        """Record a newly sent invite.

        Args:
            invite: Invite in ``sent`` status

        Returns:
            Saved invite
        """
        with logfire.span(
            "invite_ledger.record_sent",
            invite_id=str(invite.id),
            sender_uid=invite.sender_uid,
        ):
            saved = await self.invite_repository.insert(invite)
            logfire.info(
                "Invite recorded",
                invite_id=str(saved.id),
                sender_uid=saved.sender_uid,
                code=saved.token.redacted,
            )
            return saved

    async def record_redeemed(
        self,
        invite_id: InviteId,
        by_uid: UserId,
        by_email: str,
        at: datetime | None = None,
    ) -> Invite:
        """Transition an invite to ``redeemed``.

        Replaying the transition for the same redeemer is a no-op.

        Args:
            invite_id: Invite to transition
            by_uid: Redeeming user
            by_email: Redeeming user's email
            at: Redemption time (defaults to now)

        Returns:
            The redeemed invite

        Raises:
            InconsistentRedemptionError: If the invite is missing or was
                redeemed by someone else
        """
        with logfire.span(
            "invite_ledger.record_redeemed",
            invite_id=str(invite_id),
            by_uid=by_uid,
        ):
            updated = await self.invite_repository.mark_redeemed(
                invite_id, by_uid, by_email, at or utcnow()
            )
            if updated is not None:
                logfire.info(
                    "Invite redeemed", invite_id=str(invite_id), by_uid=by_uid
                )
                return updated

            existing = await self.invite_repository.find_by_id(invite_id)
            if existing is None:
                logfire.error("Redeemed invite missing", invite_id=str(invite_id))
                raise InconsistentRedemptionError(str(invite_id), "invite missing")
            if existing.redeemed_by_uid != by_uid:
                logfire.error(
                    "Invite redeemed by a different user",
                    invite_id=str(invite_id),
                    expected_uid=by_uid,
                    recorded_uid=existing.redeemed_by_uid,
                )
                raise InconsistentRedemptionError(
                    str(invite_id), "redeemed by a different user"
                )
            return existing

    async def create_edge(
        self, from_uid: UserId, to_uid: UserId, invite_id: InviteId
    ) -> InviteEdge:
        """Create the referral edge for a redeemed invite (idempotent).

        Raises:
            InconsistentRedemptionError: If the invite already has an edge
                between different users
        """
        with logfire.span(
            "invite_ledger.create_edge",
            from_uid=from_uid,
            to_uid=to_uid,
            invite_id=str(invite_id),
        ):
            edge = await self.edge_repository.insert_if_absent(
                InviteEdge(
                    id=EdgeId(uuid4()),
                    from_uid=from_uid,
                    to_uid=to_uid,
                    invite_id=invite_id,
                )
            )
            if edge.from_uid != from_uid or edge.to_uid != to_uid:
                logfire.error(
                    "Edge mismatch for invite",
                    invite_id=str(invite_id),
                    stored_from=edge.from_uid,
                    stored_to=edge.to_uid,
                )
                raise InconsistentRedemptionError(
                    str(invite_id), "edge links different users"
                )
            return edge

    async def get(self, invite_id: InviteId) -> Invite:
        """Get invite by ID.

        Raises:
            NotFoundError: If invite not found
        """
        invite = await self.invite_repository.find_by_id(invite_id)
        if invite is None:
            raise NotFoundError("Invite", str(invite_id))
        return invite

    async def find_by_token(self, code: InviteCode) -> Invite | None:
        return await self.invite_repository.find_by_token(code)

    async def list_by_sender(
        self,
        sender_uid: UserId,
        status: InviteStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Invite]:
        """List invites sent by a user.

        Args:
            sender_uid: Sender ID
            status: Optional status filter
            limit: Maximum number of results
            offset: Number of results to skip

        Returns:
            List of invites, newest first
        """
        with logfire.span(
            "invite_ledger.list_by_sender",
            sender_uid=sender_uid,
            status=status.value if status else None,
            limit=limit,
            offset=offset,
        ):
            invites = await self.invite_repository.find_by_sender(
                sender_uid, status, limit, offset
            )
            logfire.info("Invites listed", sender_uid=sender_uid, count=len(invites))
            return invites

    async def list_by_recipient(self, redeemer_uid: UserId) -> list[Invite]:
        """List invites redeemed by a user."""
        return await self.invite_repository.find_by_redeemer(redeemer_uid)

    async def count_outstanding(self, sender_uid: UserId) -> int:
        """Count a user's sent invites that have not been redeemed."""
        return await self.invite_repository.count_by_sender(
            sender_uid, InviteStatus.SENT
        )

    async def count_connections(self, user_id: UserId) -> int:
        """Count distinct users connected to a user in the referral graph."""
        return await self.edge_repository.count_connections(user_id)

    async def edges_for_user(self, user_id: UserId) -> list[InviteEdge]:
        """Edges where the user is sender or recipient."""
        return await self.edge_repository.find_by_user(user_id)

    async def list_edges(self) -> list[InviteEdge]:
        return await self.edge_repository.find_all()
