"""Get referral tree use case."""

from pydantic import BaseModel

from referral.domain.service import ReferralGraphService, ReferralTreeNode


class ReferralTreeNodeResponse(BaseModel):
    """Referral tree node for API response.

    Represents a user and the members they brought in. Recursive structure
    mirroring the domain model.
    """

    user_id: str
    referral_count: int
    children: list["ReferralTreeNodeResponse"]

    @classmethod
    def from_domain(cls, node: ReferralTreeNode) -> "ReferralTreeNodeResponse":
        """Convert a domain tree node, children included."""
        return cls(
            user_id=node.user_id,
            referral_count=node.referral_count,
            children=[cls.from_domain(child) for child in node.children],
        )


class GetReferralTreeResponse(BaseModel):
    """Get referral tree response."""

    roots: list[ReferralTreeNodeResponse]
    total_users: int


class GetReferralTreeUseCase:
    """Use case for getting the complete referral forest.

    Root users (nobody invited them) are at the top level. Children are
    sorted by their own referral count at each level.
    """

    def __init__(self, referral_graph: ReferralGraphService) -> None:
        """Initialize get referral tree use case.

        Args:
            referral_graph: Referral graph domain service
        """
        self.referral_graph = referral_graph

    async def execute(self) -> GetReferralTreeResponse:
        """Build the tree and count every node in it."""
        tree_roots = await self.referral_graph.build_tree()

        def count_nodes(node: ReferralTreeNode) -> int:
            return 1 + sum(count_nodes(child) for child in node.children)

        total_users = sum(count_nodes(root) for root in tree_roots)

        return GetReferralTreeResponse(
            roots=[ReferralTreeNodeResponse.from_domain(root) for root in tree_roots],
            total_users=total_users,
        )
