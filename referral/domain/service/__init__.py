"""Domain services."""

from .base import Service
from .bonus_evaluator import BonusOutcome, BonusUnlockEvaluator
from .invite_ledger import InviteLedger
from .quota_accountant import QuotaAccountant
from .redemption_coordinator import (
    CodeStatus,
    GeneratedInvite,
    RedemptionCoordinator,
    RedemptionResult,
)
from .referral_graph import ReferralGraphService, ReferralTreeNode
from .token_store import TokenStore

__all__ = [
    "BonusOutcome",
    "BonusUnlockEvaluator",
    "CodeStatus",
    "GeneratedInvite",
    "InviteLedger",
    "QuotaAccountant",
    "RedemptionCoordinator",
    "RedemptionResult",
    "ReferralGraphService",
    "ReferralTreeNode",
    "Service",
    "TokenStore",
]
