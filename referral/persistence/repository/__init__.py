"""PostgreSQL repository implementations."""

from referral.persistence.repository.applied_operation import (
    PostgresAppliedOperationRepository,
)
from referral.persistence.repository.invite import PostgresInviteRepository
from referral.persistence.repository.invite_edge import PostgresInviteEdgeRepository
from referral.persistence.repository.invite_token import PostgresInviteTokenRepository
from referral.persistence.repository.user import PostgresUserRepository

__all__ = [
    "PostgresUserRepository",
    "PostgresInviteRepository",
    "PostgresInviteTokenRepository",
    "PostgresInviteEdgeRepository",
    "PostgresAppliedOperationRepository",
]
