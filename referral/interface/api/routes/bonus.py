"""Bonus routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter

from referral.application.usecase.bonus import (
    RecordAddressBookSyncUseCase,
    RecordConnectionsUseCase,
)
from referral.application.usecase.bonus.record_address_book_sync import (
    RecordAddressBookSyncRequest,
)
from referral.application.usecase.bonus.record_connections import (
    BonusResponse,
    RecordConnectionsRequest,
)

router = APIRouter(prefix="/bonus", tags=["bonus"], route_class=DishkaRoute)


@router.post("/address-book-sync", response_model=BonusResponse)
async def record_address_book_sync(
    request: RecordAddressBookSyncRequest,
    use_case: FromDishka[RecordAddressBookSyncUseCase],
) -> BonusResponse:
    """Grant the one-time address book sync bonus."""
    return await use_case.execute(request)


@router.post("/connections", response_model=BonusResponse)
async def record_connections(
    request: RecordConnectionsRequest,
    use_case: FromDishka[RecordConnectionsUseCase],
) -> BonusResponse:
    """Re-evaluate the engagement bonus.

    ``unlocked`` is true only on the call that granted it.
    """
    return await use_case.execute(request)
