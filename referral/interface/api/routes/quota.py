"""Quota routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter

from referral.application.usecase.quota import GetQuotaUseCase
from referral.application.usecase.quota.get_quota import (
    GetQuotaRequest,
    QuotaResponse,
)

router = APIRouter(prefix="/quota", tags=["quota"], route_class=DishkaRoute)


@router.get("/{uid}", response_model=QuotaResponse)
async def get_quota(
    uid: str,
    get_quota_use_case: FromDishka[GetQuotaUseCase],
) -> QuotaResponse:
    """Get a user's invite quota.

    Example:
        GET /quota/u1

        Response:
        {
            "uid": "u1",
            "remaining": 7,
            "granted": 10,
            "redeemed": 2,
            "outstanding": 1,
            "bonus_unlocked": false,
            "sync_bonus_used": false,
            "unlimited": false,
            "can_send": true
        }
    """
    return await get_quota_use_case.execute(GetQuotaRequest(uid=uid))
