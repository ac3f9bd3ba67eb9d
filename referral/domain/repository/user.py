"""User repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from referral.domain.model.user import User
from referral.domain.value import UserId


class UserRepository(ABC):
    """Repository for user invite accounts.

    Every counter mutation is a single conditional update in the store that
    returns the updated user, or None when the condition did not hold.
    Implementations must never read-modify-write in application memory.
    """

    @abstractmethod
    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID.

        Args:
            user_id: The user's unique identifier

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_all(self) -> list[User]:
        """Return every user, ordered by creation time."""
        pass

    @abstractmethod
    async def insert_if_absent(self, user: User) -> bool:
        """Insert a user unless one with the same ID already exists.

        Args:
            user: The user to insert

        Returns:
            True if the user was inserted, False if it already existed
        """
        pass

    @abstractmethod
    async def decrement_remaining(self, user_id: UserId) -> Optional[User]:
        """Take one invite from a non-admin user with invites left.

        Args:
            user_id: The user's unique identifier

        Returns:
            The updated user, or None if the user is missing, admin or exhausted
        """
        pass

    @abstractmethod
    async def increment_remaining(
        self, user_id: UserId, amount: int
    ) -> Optional[User]:
        """Give invites back without touching ``invites_granted``.

        Used to compensate a debit whose send failed.
        """
        pass

    @abstractmethod
    async def record_unlimited_send(self, user_id: UserId) -> Optional[User]:
        """Count an admin's send in ``invites_granted``.

        Admins are never debited, so each send is granted on the spot and
        ``invites_granted`` stays ahead of ``invites_redeemed``.

        Returns:
            The updated user, or None if missing or not an admin
        """
        pass

    @abstractmethod
    async def revert_unlimited_send(self, user_id: UserId) -> Optional[User]:
        """Take back the grant of an admin send that failed.

        Returns:
            The updated user, or None if missing or nothing is outstanding
        """
        pass

    @abstractmethod
    async def increment_redeemed(self, user_id: UserId) -> Optional[User]:
        """Atomically increment ``invites_redeemed`` by 1."""
        pass

    @abstractmethod
    async def grant(self, user_id: UserId, amount: int) -> Optional[User]:
        """Add ``amount`` to both ``invites_remaining`` and ``invites_granted``.

        Args:
            user_id: The user's unique identifier
            amount: Number of invites to grant

        Returns:
            The updated user, or None if the user does not exist
        """
        pass

    @abstractmethod
    async def grant_bonus(self, user_id: UserId, amount: int) -> Optional[User]:
        """Grant the engagement bonus once, guarded by ``bonus_unlocked``.

        Returns:
            The updated user, or None if the bonus was already unlocked
        """
        pass

    @abstractmethod
    async def grant_sync_bonus(self, user_id: UserId, amount: int) -> Optional[User]:
        """Grant the address-book sync bonus once, guarded by ``sync_bonus_used``.

        Returns:
            The updated user, or None if the bonus was already used
        """
        pass

    @abstractmethod
    async def promote_admin(self, user_id: UserId) -> Optional[User]:
        """Set ``admin`` on a user that is not yet an admin.

        Returns:
            The updated user, or None if missing or already an admin
        """
        pass

    @abstractmethod
    async def revoke_admin(self, user_id: UserId, remaining: int) -> Optional[User]:
        """Clear ``admin`` and rebase the counters to a finite pool.

        ``invites_remaining`` becomes ``remaining`` and ``invites_granted``
        moves by the same difference, so the redeemed and outstanding share
        of the grant is untouched. Both are computed from the row inside
        one step, never from values read earlier.

        Args:
            user_id: The user's unique identifier
            remaining: Invites the user keeps after revocation

        Returns:
            The updated user, or None if missing or not an admin
        """
        pass
