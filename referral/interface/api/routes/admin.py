"""Admin routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter

from referral.application.usecase.invite import ReconcileRedemptionsUseCase
from referral.application.usecase.invite.reconcile_redemptions import (
    ReconcileRedemptionsRequest,
    ReconcileRedemptionsResponse,
)
from referral.application.usecase.quota import SetAdminUseCase
from referral.application.usecase.quota.get_quota import QuotaResponse
from referral.application.usecase.quota.set_admin import SetAdminRequest

router = APIRouter(prefix="/admin", tags=["admin"], route_class=DishkaRoute)


@router.post("/set-admin", response_model=QuotaResponse)
async def set_admin(
    request: SetAdminRequest,
    set_admin_use_case: FromDishka[SetAdminUseCase],
) -> QuotaResponse:
    """Grant or revoke unlimited sending. Caller must be an admin."""
    return await set_admin_use_case.execute(request)


@router.post("/reconcile", response_model=ReconcileRedemptionsResponse)
async def reconcile_redemptions(
    request: ReconcileRedemptionsRequest,
    reconcile_use_case: FromDishka[ReconcileRedemptionsUseCase],
) -> ReconcileRedemptionsResponse:
    """Complete redemptions whose effects were interrupted."""
    return await reconcile_use_case.execute(request)
