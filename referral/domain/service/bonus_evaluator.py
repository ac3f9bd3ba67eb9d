"""Bonus unlock evaluator domain service."""

from dataclasses import dataclass

import logfire

from referral.config import InvitationSettings
from referral.domain.event import BonusUnlocked, EventPublisher
from referral.domain.model.quota import QuotaSnapshot
from referral.domain.value import BonusCounters, BonusDecision, UserId

from .base import Service
from .invite_ledger import InviteLedger
from .quota_accountant import QuotaAccountant


@dataclass
class BonusOutcome:
    """Result of applying a one-shot bonus."""

    unlocked: bool
    amount: int
    quota: QuotaSnapshot
    reason: str | None = None


class BonusUnlockEvaluator(Service):
    """Grants one-shot bonus invites when engagement thresholds are crossed."""

    def __init__(
        self,
        quota_accountant: QuotaAccountant,
        invite_ledger: InviteLedger,
        event_publisher: EventPublisher,
        settings: InvitationSettings,
    ) -> None:
        """Initialize bonus evaluator.

        Args:
            quota_accountant: Quota accountant (applies the grants)
            invite_ledger: Invite ledger (graph-derived connection counts)
            event_publisher: Domain event publisher
            settings: Invitation policy
        """
        self.quota_accountant = quota_accountant
        self.invite_ledger = invite_ledger
        self.event_publisher = event_publisher
        self.settings = settings

    def evaluate(self, counters: BonusCounters) -> BonusDecision:
        """Decide whether the engagement bonus should unlock.

        Pure function of the counters. Once ``bonus_unlocked`` is set the
        decision is always negative, so re-evaluation never grants twice.
        """
        if counters.bonus_unlocked:
            return BonusDecision(should_unlock=False, reason="already_unlocked")
        if counters.redeemed_count >= self.settings.bonus_redemption_threshold:
            return BonusDecision(
                should_unlock=True,
                amount=self.settings.bonus_amount,
                reason="redemptions",
            )
        if counters.connection_count >= self.settings.bonus_connection_threshold:
            return BonusDecision(
                should_unlock=True,
                amount=self.settings.bonus_amount,
                reason="connections",
            )
        return BonusDecision(should_unlock=False)

    async def apply_engagement_bonus(
        self, user_id: UserId, connection_count: int | None = None
    ) -> BonusOutcome:
        """Evaluate and, if due, grant the engagement bonus.

        Args:
            user_id: User to evaluate
            connection_count: Connections reported by the caller. When omitted
                the referral graph is used.

        Returns:
            Whether a bonus was granted by this call, and the resulting quota

        Raises:
            NotFoundError: If user not found
        """
        with logfire.span(
            "bonus_evaluator.apply_engagement_bonus",
            user_id=user_id,
            connection_count=connection_count,
        ):
            snapshot = await self.quota_accountant.snapshot(user_id)
            if connection_count is None:
                connection_count = await self.invite_ledger.count_connections(user_id)

            decision = self.evaluate(
                BonusCounters(
                    redeemed_count=snapshot.redeemed,
                    connection_count=connection_count,
                    bonus_unlocked=snapshot.bonus_unlocked,
                )
            )
            if not decision.should_unlock:
                return BonusOutcome(
                    unlocked=False, amount=0, quota=snapshot, reason=decision.reason
                )

            granted = await self.quota_accountant.grant_bonus(user_id, decision.amount)
            if granted is None:
                # Lost the race to a concurrent evaluation
                return BonusOutcome(
                    unlocked=False,
                    amount=0,
                    quota=await self.quota_accountant.snapshot(user_id),
                    reason="already_unlocked",
                )

            logfire.info(
                "Engagement bonus unlocked",
                user_id=user_id,
                amount=decision.amount,
                reason=decision.reason,
            )
            await self.event_publisher.publish(
                BonusUnlocked(uid=user_id, kind="engagement", amount=decision.amount)
            )
            return BonusOutcome(
                unlocked=True,
                amount=decision.amount,
                quota=granted,
                reason=decision.reason,
            )

    async def apply_address_book_sync_bonus(self, user_id: UserId) -> BonusOutcome:
        """Grant the address-book sync bonus once.

        Raises:
            NotFoundError: If user not found
        """
        with logfire.span("bonus_evaluator.apply_address_book_sync_bonus", user_id=user_id):
            amount = self.settings.sync_bonus_amount
            granted = await self.quota_accountant.grant_sync_bonus(user_id, amount)
            if granted is None:
                return BonusOutcome(
                    unlocked=False,
                    amount=0,
                    quota=await self.quota_accountant.snapshot(user_id),
                    reason="already_used",
                )

            logfire.info("Address book sync bonus unlocked", user_id=user_id)
            await self.event_publisher.publish(
                BonusUnlocked(uid=user_id, kind="address_book_sync", amount=amount)
            )
            return BonusOutcome(
                unlocked=True, amount=amount, quota=granted, reason="address_book_sync"
            )
