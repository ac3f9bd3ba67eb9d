"""Record connections use case."""

import logfire
from pydantic import BaseModel, Field

from referral.application.usecase.base import BaseUseCase
from referral.application.usecase.quota.get_quota import QuotaResponse
from referral.domain.service import BonusOutcome, BonusUnlockEvaluator
from referral.domain.value import UserId


class BonusResponse(BaseModel):
    """Outcome of a bonus evaluation."""

    unlocked: bool  # True only on the call that granted the bonus
    amount: int
    quota: QuotaResponse
    reason: str | None = None

    @classmethod
    def from_domain(cls, outcome: BonusOutcome) -> "BonusResponse":
        return cls(
            unlocked=outcome.unlocked,
            amount=outcome.amount,
            quota=QuotaResponse.from_domain(outcome.quota),
            reason=outcome.reason,
        )


class RecordConnectionsRequest(BaseModel):
    """Record connections request."""

    uid: str
    connection_count: int | None = Field(default=None, ge=0)


class RecordConnectionsUseCase(BaseUseCase):
    """Use case for re-evaluating the engagement bonus.

    Called when the client learns the user's connection count changed. When
    no count is supplied the referral graph is used instead.
    """

    def __init__(self, bonus_evaluator: BonusUnlockEvaluator) -> None:
        """Initialize record connections use case.

        Args:
            bonus_evaluator: Bonus unlock evaluator domain service
        """
        self.bonus_evaluator = bonus_evaluator

    async def execute(self, request: RecordConnectionsRequest) -> BonusResponse:
        """Evaluate and, if due, grant the engagement bonus.

        Raises:
            NotFoundError: If user not found
        """
        with logfire.span(
            "record_connections.execute",
            uid=request.uid,
            connection_count=request.connection_count,
        ):
            outcome = await self.bonus_evaluator.apply_engagement_bonus(
                UserId(request.uid), connection_count=request.connection_count
            )
            return BonusResponse.from_domain(outcome)
