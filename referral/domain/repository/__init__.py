"""Repository interfaces for the referral domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the infrastructure layer.
"""

from referral.domain.repository.applied_operation import AppliedOperationRepository
from referral.domain.repository.invite import InviteRepository
from referral.domain.repository.invite_edge import InviteEdgeRepository
from referral.domain.repository.invite_token import InviteTokenRepository
from referral.domain.repository.user import UserRepository

__all__ = [
    "UserRepository",
    "InviteRepository",
    "InviteTokenRepository",
    "InviteEdgeRepository",
    "AppliedOperationRepository",
]
