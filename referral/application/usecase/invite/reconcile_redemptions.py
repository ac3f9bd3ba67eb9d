"""Reconcile redemptions use case."""

import logfire
from pydantic import BaseModel, Field

from referral.application.usecase.base import BaseUseCase
from referral.domain.error import NotAuthorizedError
from referral.domain.service import QuotaAccountant, RedemptionCoordinator
from referral.domain.value import UserId


class ReconcileRedemptionsRequest(BaseModel):
    """Reconcile redemptions request."""

    caller_uid: str
    limit: int = Field(default=100, ge=1, le=1000)


class ReconciledItem(BaseModel):
    """A redemption whose effects were completed."""

    invite_id: str
    sender_uid: str
    redeemer_uid: str


class ReconcileRedemptionsResponse(BaseModel):
    """Reconcile redemptions response."""

    reconciled: list[ReconciledItem]
    total: int


class ReconcileRedemptionsUseCase(BaseUseCase):
    """Use case for completing redemptions whose effects were interrupted.

    Finds codes that were claimed but whose invite is still ``sent`` and
    replays the remaining effects. Safe to run at any time.
    """

    def __init__(
        self,
        redemption_coordinator: RedemptionCoordinator,
        quota_accountant: QuotaAccountant,
    ) -> None:
        """Initialize reconcile redemptions use case.

        Args:
            redemption_coordinator: Redemption coordinator domain service
            quota_accountant: Quota accountant (for the caller check)
        """
        self.redemption_coordinator = redemption_coordinator
        self.quota_accountant = quota_accountant

    async def execute(
        self, request: ReconcileRedemptionsRequest
    ) -> ReconcileRedemptionsResponse:
        """Execute reconciliation.

        Raises:
            NotAuthorizedError: If the caller is not an admin
        """
        with logfire.span(
            "reconcile_redemptions.execute",
            caller_uid=request.caller_uid,
            limit=request.limit,
        ):
            if not await self.quota_accountant.is_admin(UserId(request.caller_uid)):
                logfire.warn("Reconcile refused", caller_uid=request.caller_uid)
                raise NotAuthorizedError(request.caller_uid, "reconcile redemptions")

            results = await self.redemption_coordinator.reconcile_pending(
                request.limit
            )
            items = [
                ReconciledItem(
                    invite_id=str(result.invite_id),
                    sender_uid=result.sender_uid,
                    redeemer_uid=result.redeemer_uid,
                )
                for result in results
            ]
            return ReconcileRedemptionsResponse(reconciled=items, total=len(items))
