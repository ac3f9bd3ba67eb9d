"""Invite token repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from referral.domain.model.invite_token import InviteToken
from referral.domain.value import InviteCode, UserId


class InviteTokenRepository(ABC):
    """Repository for InviteToken entity.

    ``mark_used`` is the compare-and-swap that guarantees at-most-once
    redemption and must be a single conditional write.
    """

    @abstractmethod
    async def find_by_code(self, code: InviteCode) -> Optional[InviteToken]:
        """Find a token by its code.

        Args:
            code: The invite code

        Returns:
            The token if found, None otherwise
        """
        pass

    @abstractmethod
    async def insert(self, token: InviteToken) -> InviteToken:
        """Insert a new token.

        Args:
            token: The token to insert

        Returns:
            The inserted token

        Raises:
            TokenAlreadyExistsError: If the code is already taken
        """
        pass

    @abstractmethod
    async def mark_used(
        self, code: InviteCode, by_uid: UserId, by_email: str, at: datetime
    ) -> Optional[InviteToken]:
        """Mark a token used, only if it is currently unused.

        Args:
            code: The invite code
            by_uid: Redeeming user
            by_email: Redeeming user's email
            at: Redemption time

        Returns:
            The updated token, or None if the token is missing or already used
        """
        pass

    @abstractmethod
    async def delete_unused(self, code: InviteCode) -> bool:
        """Delete a token that has not been used.

        Returns:
            True if a token was deleted
        """
        pass

    @abstractmethod
    async def find_used_with_pending_invite(self, limit: int) -> list[InviteToken]:
        """Find used tokens whose invite is still in ``sent`` status.

        These are redemptions whose effects were interrupted.

        Args:
            limit: Maximum number of results

        Returns:
            Tokens ordered by ``used_at``
        """
        pass
