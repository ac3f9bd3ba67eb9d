"""In-memory repository implementations for testing."""

from .applied_operation import InMemoryAppliedOperationRepository
from .database import InMemoryDatabase
from .invite import InMemoryInviteRepository
from .invite_edge import InMemoryInviteEdgeRepository
from .invite_token import InMemoryInviteTokenRepository
from .user import InMemoryUserRepository

__all__ = [
    "InMemoryAppliedOperationRepository",
    "InMemoryDatabase",
    "InMemoryInviteEdgeRepository",
    "InMemoryInviteRepository",
    "InMemoryInviteTokenRepository",
    "InMemoryUserRepository",
]
