"""Record address book sync use case."""

from pydantic import BaseModel

from referral.application.usecase.base import BaseUseCase
from referral.application.usecase.bonus.record_connections import BonusResponse
from referral.domain.service import BonusUnlockEvaluator
from referral.domain.value import UserId


class RecordAddressBookSyncRequest(BaseModel):
    """Record address book sync request."""

    uid: str


class RecordAddressBookSyncUseCase(BaseUseCase):
    """Use case for granting the one-time address book sync bonus."""

    def __init__(self, bonus_evaluator: BonusUnlockEvaluator) -> None:
        self.bonus_evaluator = bonus_evaluator

    async def execute(self, request: RecordAddressBookSyncRequest) -> BonusResponse:
        outcome = await self.bonus_evaluator.apply_address_book_sync_bonus(
            UserId(request.uid)
        )
        return BonusResponse.from_domain(outcome)
