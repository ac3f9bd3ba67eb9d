"""Token store domain service."""

import secrets
from datetime import datetime

import logfire
from pydantic import ValidationError

from referral.domain.error import AlreadyRedeemedError, InvalidCodeError
from referral.domain.model.common import utcnow
from referral.domain.model.invite_token import InviteToken
from referral.domain.repository import InviteTokenRepository
from referral.domain.value import (
    CODE_ALPHABET,
    MIN_CODE_LENGTH,
    InviteCode,
    InviteId,
    UserId,
)

from .base import Service


def parse_code(raw: str) -> InviteCode:
    """Normalize and validate a user-supplied code.

    Raises:
        InvalidCodeError: If the code is malformed
    """
    try:
        return InviteCode(raw)
    except ValidationError:
        raise InvalidCodeError(str(raw)[:4] + "...", reason="malformed")


class TokenStore(Service):
    """Single source of truth for whether an invite code has been used."""

    def __init__(
        self, token_repository: InviteTokenRepository, code_length: int = 10
    ) -> None:
        """Initialize token store.

        Args:
            token_repository: Invite token repository
            code_length: Length of generated codes
        """
        if code_length < MIN_CODE_LENGTH:
            raise ValueError(f"code_length must be at least {MIN_CODE_LENGTH}")
        self.token_repository = token_repository
        self.code_length = code_length

    def generate_code(self) -> InviteCode:
        """Generate a cryptographically random code.

        Uses the unambiguous uppercase alphabet so codes survive being read
        aloud or typed by hand.
        """
        return InviteCode(
            "".join(secrets.choice(CODE_ALPHABET) for _ in range(self.code_length))
        )

    async def find(self, code: InviteCode | str) -> InviteToken | None:
        """Find a token by code.

        Args:
            code: Invite code (raw strings are normalized)

        Returns:
            Token if found, None otherwise

        Raises:
            InvalidCodeError: If a raw code is malformed
        """
        if not isinstance(code, InviteCode):
            code = parse_code(code)
        return await self.token_repository.find_by_code(code)

    async def get(self, code: InviteCode | str) -> InviteToken:
        """Get a token by code.

        Raises:
            InvalidCodeError: If the code is malformed or unknown
        """
        with logfire.span("token_store.get"):
            token = await self.find(code)
            if token is None:
                redacted = code.redacted if isinstance(code, InviteCode) else code[:4]
                logfire.info("Invite code not found", code=redacted)
                raise InvalidCodeError(redacted, reason="not_found")
            return token

    async def create(
        self, code: InviteCode, invite_id: InviteId, sender_uid: UserId
    ) -> InviteToken:
        """Create a new unused token.

        Raises:
            TokenAlreadyExistsError: If the code collides with an existing token
        """
        with logfire.span(
            "token_store.create", code=code.redacted, invite_id=str(invite_id)
        ):
            token = InviteToken(token=code, invite_id=invite_id, sender_uid=sender_uid)
            return await self.token_repository.insert(token)

    async def mark_used(
        self,
        code: InviteCode,
        by_uid: UserId,
        by_email: str,
        at: datetime | None = None,
    ) -> InviteToken:
        """Compare-and-swap the token from unused to used.

        Args:
            code: Invite code
            by_uid: Redeeming user
            by_email: Redeeming user's email
            at: Redemption time (defaults to now)

        Returns:
            The token, now used by ``by_uid``

        Raises:
            AlreadyRedeemedError: If the token was already used (race lost)
        """
        with logfire.span(
            "token_store.mark_used", code=code.redacted, by_uid=str(by_uid)
        ):
            token = await self.token_repository.mark_used(
                code, by_uid, by_email, at or utcnow()
            )
            if token is None:
                logfire.info("Token compare-and-swap lost", code=code.redacted)
                raise AlreadyRedeemedError(code.redacted)
            return token

    async def discard(self, code: InviteCode) -> bool:
        """Remove an unused token whose send failed."""
        with logfire.span("token_store.discard", code=code.redacted):
            deleted = await self.token_repository.delete_unused(code)
            if not deleted:
                logfire.warn("Token not discarded", code=code.redacted)
            return deleted

    async def find_pending_settlement(self, limit: int = 100) -> list[InviteToken]:
        """Used tokens whose redemption effects have not all been recorded."""
        with logfire.span("token_store.find_pending_settlement", limit=limit):
            tokens = await self.token_repository.find_used_with_pending_invite(limit)
            if tokens:
                logfire.warn("Unsettled redemptions found", count=len(tokens))
            return tokens
