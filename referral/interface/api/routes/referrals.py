"""Referral graph routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter

from referral.application.usecase.graph import (
    GetReferralTreeUseCase,
    GetReferralsUseCase,
)
from referral.application.usecase.graph.get_referral_tree import (
    GetReferralTreeResponse,
)
from referral.application.usecase.graph.get_referrals import (
    GetReferralsRequest,
    GetReferralsResponse,
)

router = APIRouter(prefix="/referrals", tags=["referrals"], route_class=DishkaRoute)


@router.get("/tree", response_model=GetReferralTreeResponse)
async def get_referral_tree(
    get_referral_tree_use_case: FromDishka[GetReferralTreeUseCase],
) -> GetReferralTreeResponse:
    """Get the complete referral forest.

    Example:
        GET /referrals/tree

        Response:
        {
            "roots": [
                {
                    "user_id": "u1",
                    "referral_count": 2,
                    "children": [
                        {"user_id": "u2", "referral_count": 1, "children": [...]},
                        {"user_id": "u3", "referral_count": 0, "children": []}
                    ]
                }
            ],
            "total_users": 4
        }
    """
    return await get_referral_tree_use_case.execute()


@router.get("/{uid}", response_model=GetReferralsResponse)
async def get_referrals(
    uid: str,
    get_referrals_use_case: FromDishka[GetReferralsUseCase],
) -> GetReferralsResponse:
    """Get who invited a user and whom they invited."""
    return await get_referrals_use_case.execute(GetReferralsRequest(uid=uid))
