"""Quota use cases."""

from referral.application.usecase.quota.get_quota import (
    GetQuotaRequest,
    GetQuotaUseCase,
    QuotaResponse,
)
from referral.application.usecase.quota.set_admin import (
    SetAdminRequest,
    SetAdminUseCase,
)

__all__ = [
    "GetQuotaRequest",
    "GetQuotaUseCase",
    "QuotaResponse",
    "SetAdminRequest",
    "SetAdminUseCase",
]
