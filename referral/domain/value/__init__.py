"""Domain value objects for the referral engine."""

from referral.domain.value.identifiers import EdgeId, InviteId, UserId
from referral.domain.value.types import (
    CODE_ALPHABET,
    MIN_CODE_LENGTH,
    BonusCounters,
    BonusDecision,
    InviteCode,
    InviteStatus,
    QuotaOperation,
    RedemptionState,
)

__all__ = [
    # Identifiers
    "UserId",
    "InviteId",
    "EdgeId",
    # Types
    "CODE_ALPHABET",
    "MIN_CODE_LENGTH",
    "BonusCounters",
    "BonusDecision",
    "InviteCode",
    "InviteStatus",
    "QuotaOperation",
    "RedemptionState",
]
