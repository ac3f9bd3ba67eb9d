"""Shared in-memory store backing the in-memory repositories."""

import asyncio
from dataclasses import dataclass, field

from referral.domain.model import (
    AppliedOperation,
    Invite,
    InviteEdge,
    InviteToken,
    User,
)
from referral.domain.value import InviteCode, InviteId, QuotaOperation, UserId


@dataclass
class InMemoryDatabase:
    """Tables as dicts, shared by every in-memory repository of a container.

    Repositories yield to the event loop once before each operation so
    concurrent callers interleave, then run each check-and-set without
    suspending, which makes it atomic under asyncio.
    """

    users: dict[UserId, User] = field(default_factory=dict)
    invites: dict[InviteId, Invite] = field(default_factory=dict)
    tokens: dict[InviteCode, InviteToken] = field(default_factory=dict)
    edges: dict[InviteId, InviteEdge] = field(default_factory=dict)
    operations: dict[tuple[InviteId, QuotaOperation], AppliedOperation] = field(
        default_factory=dict
    )


async def checkpoint() -> None:
    """Let other tasks run before the next atomic step."""
    await asyncio.sleep(0)
