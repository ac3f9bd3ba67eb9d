"""Test configuration and shared helpers."""

import logfire

from referral.domain.model import QuotaSnapshot, User
from referral.domain.repository import UserRepository
from referral.domain.value import UserId


def pytest_configure(config):
    """Keep logfire local and quiet during tests."""
    logfire.configure(send_to_logfire=False, console=False)


async def seed_user(
    user_repository: UserRepository,
    uid: str,
    remaining: int = 10,
    email: str | None = None,
    admin: bool = False,
    redeemed: int = 0,
) -> User:
    """Insert a user whose counters already satisfy conservation.

    Args:
        user_repository: Repository to insert into
        uid: User ID
        remaining: Invites left to send
        email: Email, defaults to ``<uid>@example.com``
        admin: Whether the user is unlimited
        redeemed: Invites already redeemed by others

    Returns:
        The inserted user
    """
    user = User(
        id=UserId(uid),
        email=email if email is not None else f"{uid}@example.com",
        admin=admin,
        invites_remaining=remaining,
        invites_granted=remaining + redeemed,
        invites_redeemed=redeemed,
    )
    await user_repository.insert_if_absent(user)
    return user


def assert_conserved(snapshot: QuotaSnapshot) -> None:
    """Granted invites are all accounted for, admins included."""
    assert snapshot.granted == (
        snapshot.remaining + snapshot.redeemed + snapshot.outstanding
    ), snapshot
