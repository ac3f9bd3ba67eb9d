"""Redemption coordinator domain service.

Issues invites and redeems codes. At-most-once redemption rests on the token
compare-and-swap; every effect after it is keyed by the invite ID so an
interrupted redemption can be completed by a replay or by ``reconcile``.
"""

from uuid import uuid4

import logfire

from referral.config import InvitationSettings
from referral.domain.error import (
    AlreadyRedeemedError,
    DomainError,
    InconsistentRedemptionError,
    InvalidCodeError,
    NotFoundError,
    QuotaExhaustedError,
    RetryableError,
    SelfRedemptionError,
    TokenAlreadyExistsError,
)
from referral.domain.event import EventPublisher, InviteRedeemed, InviteSent
from referral.domain.model.common import DomainModel
from referral.domain.model.invite import Invite
from referral.domain.model.invite_token import InviteToken
from referral.domain.model.quota import QuotaSnapshot
from referral.domain.value import InviteId, RedemptionState, UserId

from .base import Service
from .bonus_evaluator import BonusUnlockEvaluator
from .invite_ledger import InviteLedger
from .quota_accountant import QuotaAccountant
from .token_store import TokenStore, parse_code

DEFAULT_INVITER_NAME = "A friend"


class RedemptionResult(DomainModel):
    """Outcome of a successful (or replayed) redemption."""

    success: bool = True
    invite_id: InviteId
    sender_uid: UserId
    redeemer_uid: UserId
    new_quota: QuotaSnapshot
    replay: bool = False


class GeneratedInvite(DomainModel):
    """A freshly issued invite."""

    invite: Invite
    quota: QuotaSnapshot


class CodeStatus(DomainModel):
    """Read-only view of a code's redemption state."""

    valid: bool
    state: RedemptionState
    inviter_id: UserId | None = None
    inviter_name: str | None = None
    reason: str | None = None


def inviter_display_name(email: str | None) -> str:
    """Name shown to a recipient before they accept."""
    if email and "@" in email:
        local = email.split("@", 1)[0].strip()
        if local:
            return local
    return DEFAULT_INVITER_NAME


class RedemptionCoordinator(Service):
    """State machine for invite codes: ``UNKNOWN -> VALID -> REDEEMED``."""

    def __init__(
        self,
        token_store: TokenStore,
        invite_ledger: InviteLedger,
        quota_accountant: QuotaAccountant,
        bonus_evaluator: BonusUnlockEvaluator,
        event_publisher: EventPublisher,
        settings: InvitationSettings,
    ) -> None:
        """Initialize redemption coordinator.

        Args:
            token_store: Token store
            invite_ledger: Invite ledger
            quota_accountant: Quota accountant
            bonus_evaluator: Bonus unlock evaluator
            event_publisher: Domain event publisher
            settings: Invitation policy
        """
        self.token_store = token_store
        self.invite_ledger = invite_ledger
        self.quota_accountant = quota_accountant
        self.bonus_evaluator = bonus_evaluator
        self.event_publisher = event_publisher
        self.settings = settings

    async def generate(
        self,
        sender_uid: UserId,
        sender_email: str,
        recipient_email: str | None = None,
    ) -> GeneratedInvite:
        """Issue a new invite code.

        Steps:
        1. Check the sender can send
        2. Debit the sender's quota, keyed by a new invite ID
        3. Create the token, retrying on code collisions
        4. Record the invite in the ledger

        Any failure after the debit discards the token and refunds the debit
        before the error propagates.

        Raises:
            QuotaExhaustedError: If the sender has no invites left
            RetryableError: If no unique code could be generated
        """
        with logfire.span("redemption_coordinator.generate", sender_uid=sender_uid):
            if not await self.quota_accountant.can_send(sender_uid):
                logfire.info("Send refused, quota exhausted", sender_uid=sender_uid)
                raise QuotaExhaustedError(sender_uid)

            invite_id = InviteId(uuid4())
            await self.quota_accountant.debit_on_send(sender_uid, invite_id)

            token: InviteToken | None = None
            try:
                token = await self._issue_token(invite_id, sender_uid)
                invite = await self.invite_ledger.record_sent(
                    Invite(
                        id=invite_id,
                        sender_uid=sender_uid,
                        sender_email=sender_email,
                        recipient_email=recipient_email,
                        token=token.token,
                    )
                )
            except Exception as e:
                logfire.warn(
                    "Send failed, compensating",
                    invite_id=str(invite_id),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                if token is not None:
                    await self.token_store.discard(token.token)
                await self.quota_accountant.refund_on_failed_send(sender_uid, invite_id)
                raise

            await self.event_publisher.publish(
                InviteSent(invite_id=invite_id, sender_uid=sender_uid)
            )
            quota = await self.quota_accountant.snapshot(sender_uid)
            logfire.info(
                "Invite generated",
                invite_id=str(invite_id),
                sender_uid=sender_uid,
                code=invite.token.redacted,
                remaining=quota.remaining,
            )
            return GeneratedInvite(invite=invite, quota=quota)

    async def _issue_token(self, invite_id: InviteId, sender_uid: UserId) -> InviteToken:
        attempts = self.settings.code_max_attempts
        for attempt in range(1, attempts + 1):
            code = self.token_store.generate_code()
            try:
                return await self.token_store.create(code, invite_id, sender_uid)
            except TokenAlreadyExistsError:
                logfire.warn("Invite code collision", attempt=attempt)
        raise RetryableError(f"Could not generate a unique code in {attempts} attempts")

    async def redeem(
        self, code: str, redeemer_uid: UserId, redeemer_email: str
    ) -> RedemptionResult:
        """Redeem an invite code at most once.

        Steps:
        1. Look up the token (unknown or malformed -> InvalidCodeError)
        2. Used already: same redeemer is a replay, anyone else is refused
        3. Refuse self-redemption
        4. Compare-and-swap the token to used
        5. Record the redemption, create the edge, credit the sender and
           grant the redeemer a fresh pool
        6. Evaluate the sender's engagement bonus

        Raises:
            InvalidCodeError: If the code is unknown or malformed
            AlreadyRedeemedError: If another user redeemed the code
            SelfRedemptionError: If the redeemer sent the invite
            InconsistentRedemptionError: If effects could not be completed
        """
        with logfire.span(
            "redemption_coordinator.redeem", redeemer_uid=redeemer_uid
        ):
            token = await self.token_store.get(code)

            if token.used:
                if token.used_by_uid == redeemer_uid:
                    logfire.info("Redemption replay", code=token.token.redacted)
                    return await self._settle(token, replay=True)
                logfire.info("Code already redeemed", code=token.token.redacted)
                raise AlreadyRedeemedError(token.token.redacted)

            if token.sender_uid == redeemer_uid:
                logfire.warn("Self redemption refused", uid=redeemer_uid)
                raise SelfRedemptionError(redeemer_uid)

            try:
                token = await self.token_store.mark_used(
                    token.token, redeemer_uid, redeemer_email
                )
            except AlreadyRedeemedError:
                current = await self.token_store.get(token.token)
                if current.used_by_uid == redeemer_uid:
                    return await self._settle(current, replay=True)
                raise

            return await self._settle(token, replay=False)

    async def _settle(self, token: InviteToken, replay: bool) -> RedemptionResult:
        """Apply every redemption effect; each step is a no-op if already done."""
        if token.used_by_uid is None:
            raise InconsistentRedemptionError(
                str(token.invite_id), "token used without a redeemer"
            )
        redeemer_uid = token.used_by_uid
        redeemer_email = token.used_by_email or ""
        try:
            await self.invite_ledger.record_redeemed(
                token.invite_id, redeemer_uid, redeemer_email, token.used_at
            )
            await self.invite_ledger.create_edge(
                token.sender_uid, redeemer_uid, token.invite_id
            )
            await self.quota_accountant.credit_on_redeem_sender(
                token.sender_uid, token.invite_id
            )
            new_quota = await self.quota_accountant.grant_fresh_quota(
                redeemer_uid,
                self.settings.fresh_quota,
                token.invite_id,
                redeemer_email,
            )
        except DomainError:
            raise
        except Exception as e:
            logfire.error(
                "Redemption effects interrupted",
                invite_id=str(token.invite_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise InconsistentRedemptionError(
                str(token.invite_id), "redemption effects incomplete"
            ) from e

        await self.bonus_evaluator.apply_engagement_bonus(token.sender_uid)

        if not replay:
            await self.event_publisher.publish(
                InviteRedeemed(
                    invite_id=token.invite_id,
                    sender_uid=token.sender_uid,
                    redeemer_uid=redeemer_uid,
                )
            )
            logfire.info(
                "Invite redeemed",
                invite_id=str(token.invite_id),
                sender_uid=token.sender_uid,
                redeemer_uid=redeemer_uid,
            )

        return RedemptionResult(
            invite_id=token.invite_id,
            sender_uid=token.sender_uid,
            redeemer_uid=redeemer_uid,
            new_quota=new_quota,
            replay=replay,
        )

    async def status(self, code: str) -> CodeStatus:
        """Describe a code without changing it."""
        with logfire.span("redemption_coordinator.status"):
            try:
                parsed = parse_code(code)
            except InvalidCodeError:
                return CodeStatus(
                    valid=False, state=RedemptionState.INVALID, reason="malformed"
                )

            token = await self.token_store.find(parsed)
            if token is None:
                return CodeStatus(
                    valid=False, state=RedemptionState.INVALID, reason="not_found"
                )

            invite = await self.invite_ledger.find_by_token(parsed)
            name = inviter_display_name(invite.sender_email if invite else None)
            if token.used:
                return CodeStatus(
                    valid=False,
                    state=RedemptionState.REDEEMED,
                    inviter_id=token.sender_uid,
                    inviter_name=name,
                    reason="already_redeemed",
                )
            return CodeStatus(
                valid=True,
                state=RedemptionState.VALID,
                inviter_id=token.sender_uid,
                inviter_name=name,
            )

    async def reconcile(self, invite_id: InviteId) -> RedemptionResult:
        """Complete a redemption whose effects were interrupted.

        Raises:
            NotFoundError: If the invite is unknown or was never redeemed
            InconsistentRedemptionError: If the invite has no token
        """
        with logfire.span(
            "redemption_coordinator.reconcile", invite_id=str(invite_id)
        ):
            invite = await self.invite_ledger.get(invite_id)
            token = await self.token_store.find(invite.token)
            if token is None:
                logfire.error("Invite has no token", invite_id=str(invite_id))
                raise InconsistentRedemptionError(str(invite_id), "token missing")
            if not token.used:
                raise NotFoundError("Redemption", str(invite_id))
            result = await self._settle(token, replay=True)
            logfire.info("Redemption reconciled", invite_id=str(invite_id))
            return result

    async def reconcile_pending(self, limit: int = 100) -> list[RedemptionResult]:
        """Recovery scan: settle every used token whose invite is still sent."""
        with logfire.span("redemption_coordinator.reconcile_pending", limit=limit):
            pending = await self.token_store.find_pending_settlement(limit)
            results = []
            for token in pending:
                results.append(await self.reconcile(token.invite_id))
            logfire.info("Reconciliation finished", reconciled=len(results))
            return results
