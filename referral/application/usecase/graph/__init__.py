"""Referral graph use cases."""

from referral.application.usecase.graph.get_referral_tree import (
    GetReferralTreeResponse,
    GetReferralTreeUseCase,
    ReferralTreeNodeResponse,
)
from referral.application.usecase.graph.get_referrals import (
    GetReferralsRequest,
    GetReferralsResponse,
    GetReferralsUseCase,
    ReferralEdgeItem,
)

__all__ = [
    "GetReferralTreeResponse",
    "GetReferralTreeUseCase",
    "GetReferralsRequest",
    "GetReferralsResponse",
    "GetReferralsUseCase",
    "ReferralEdgeItem",
    "ReferralTreeNodeResponse",
]
