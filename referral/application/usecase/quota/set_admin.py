"""Set admin use case."""

import logfire
from pydantic import BaseModel

from referral.application.usecase.base import BaseUseCase
from referral.application.usecase.quota.get_quota import QuotaResponse
from referral.domain.error import NotAuthorizedError
from referral.domain.service import QuotaAccountant
from referral.domain.value import UserId


class SetAdminRequest(BaseModel):
    """Set admin request."""

    caller_uid: str  # Verified identity of the operator
    uid: str
    admin: bool


class SetAdminUseCase(BaseUseCase):
    """Use case for toggling a user's unlimited (admin) status.

    Only existing admins may call it.
    """

    def __init__(self, quota_accountant: QuotaAccountant) -> None:
        """Initialize set admin use case.

        Args:
            quota_accountant: Quota accountant domain service
        """
        self.quota_accountant = quota_accountant

    async def execute(self, request: SetAdminRequest) -> QuotaResponse:
        """Execute set admin flow.

        Args:
            request: Caller, target user and desired flag

        Returns:
            Target user's new quota

        Raises:
            NotAuthorizedError: If the caller is not an admin
            NotFoundError: If the target user does not exist
        """
        with logfire.span(
            "set_admin.execute",
            caller_uid=request.caller_uid,
            uid=request.uid,
            admin=request.admin,
        ):
            if not await self.quota_accountant.is_admin(UserId(request.caller_uid)):
                logfire.warn("Set admin refused", caller_uid=request.caller_uid)
                raise NotAuthorizedError(request.caller_uid, "change admin status")

            snapshot = await self.quota_accountant.set_admin(
                UserId(request.uid), request.admin
            )
            return QuotaResponse.from_domain(snapshot)
