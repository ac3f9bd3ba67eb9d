"""Referral graph domain service."""

from collections import defaultdict
from dataclasses import dataclass

import logfire

from referral.domain.model.invite_edge import InviteEdge
from referral.domain.repository import UserRepository
from referral.domain.value import UserId

from .base import Service
from .invite_ledger import InviteLedger


@dataclass
class ReferralTreeNode:
    """Node in the referral tree.

    Represents a user and the members who joined through their invites.
    """

    user_id: UserId
    referral_count: int
    children: list["ReferralTreeNode"]


class ReferralGraphService(Service):
    """Read side of the sender -> recipient referral graph."""

    def __init__(
        self, user_repository: UserRepository, invite_ledger: InviteLedger
    ) -> None:
        """Initialize referral graph service.

        Args:
            user_repository: User repository
            invite_ledger: Invite ledger (edge source)
        """
        self.user_repository = user_repository
        self.invite_ledger = invite_ledger

    async def edges_for(self, user_id: UserId) -> list[InviteEdge]:
        """Edges where the user invited someone or was invited."""
        return await self.invite_ledger.edges_for_user(user_id)

    async def connection_count(self, user_id: UserId) -> int:
        return await self.invite_ledger.count_connections(user_id)

    async def build_tree(self) -> list[ReferralTreeNode]:
        """Build the complete referral forest.

        Roots are users nobody invited. Children at every level are sorted by
        their own referral count (descending), user ID as tiebreaker.

        Returns:
            Root nodes of the forest
        """
        with logfire.span("referral_graph.build_tree"):
            users = await self.user_repository.find_all()
            edges = await self.invite_ledger.list_edges()
            logfire.info(
                "Fetched referral graph", users=len(users), edges=len(edges)
            )

            adjacency: dict[UserId, list[UserId]] = defaultdict(list)
            for edge in edges:
                adjacency[edge.from_uid].append(edge.to_uid)

            # Edges may reference users the identity system has not synced yet
            known = [user.id for user in users]
            seen = set(known)
            for edge in edges:
                for uid in (edge.from_uid, edge.to_uid):
                    if uid not in seen:
                        seen.add(uid)
                        known.append(uid)

            invited = {edge.to_uid for edge in edges}
            roots = [uid for uid in known if uid not in invited]

            def sort_key(node: ReferralTreeNode) -> tuple[int, str]:
                return (-node.referral_count, node.user_id)

            def build_subtree(user_id: UserId, path: frozenset) -> ReferralTreeNode:
                # Guard against cycles from inconsistent data
                child_ids = [c for c in adjacency.get(user_id, []) if c not in path]
                children = [
                    build_subtree(child_id, path | {child_id}) for child_id in child_ids
                ]
                children.sort(key=sort_key)
                return ReferralTreeNode(
                    user_id=user_id,
                    referral_count=len(adjacency.get(user_id, [])),
                    children=children,
                )

            tree_roots = [build_subtree(root, frozenset({root})) for root in roots]
            tree_roots.sort(key=sort_key)

            logfire.info("Built referral tree", root_count=len(tree_roots))
            return tree_roots
