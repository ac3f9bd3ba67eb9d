"""Domain value objects for the referral engine.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules and business logic.
"""

import re
from enum import Enum

from pydantic import field_validator

from referral.domain.value.common import RootValueObject, ValueObject

# Unambiguous uppercase alphabet (no 0/O/1/I)
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
MIN_CODE_LENGTH = 6
MAX_CODE_LENGTH = 64


class InviteStatus(str, Enum):
    """Status of an invite."""

    SENT = "sent"
    REDEEMED = "redeemed"


class RedemptionState(str, Enum):
    """Lifecycle state of an invite code as seen by a redeemer."""

    UNKNOWN = "unknown"
    VALID = "valid"
    REDEEMED = "redeemed"
    INVALID = "invalid"


class QuotaOperation(str, Enum):
    """Quota mutations keyed by invite for idempotent retries."""

    DEBIT = "debit"
    REFUND = "refund"
    CREDIT_SENDER = "credit_sender"
    GRANT_FRESH = "grant_fresh"


class InviteCode(RootValueObject[str]):
    """Shareable single-use invite code.

    Codes are uppercase alphanumeric. Input is normalized (whitespace stripped,
    upper-cased) so a code typed by hand matches the issued one.
    """

    @field_validator("root", mode="before")
    @classmethod
    def normalize_code(cls, v: object) -> object:
        """Strip whitespace and upper-case string input."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("root")
    @classmethod
    def validate_code_format(cls, v: str) -> str:
        """Validate code is uppercase alphanumeric within length limits."""
        if not re.fullmatch(
            rf"[A-Z0-9]{{{MIN_CODE_LENGTH},{MAX_CODE_LENGTH}}}", v
        ):
            raise ValueError(
                f"Invite code must be {MIN_CODE_LENGTH}-{MAX_CODE_LENGTH} "
                "uppercase alphanumeric characters"
            )
        return v

    @property
    def redacted(self) -> str:
        """Short prefix safe to put in logs."""
        return self.root[:4] + "..."


class BonusCounters(ValueObject):
    """Engagement counters fed to the bonus evaluator."""

    redeemed_count: int = 0
    connection_count: int = 0
    bonus_unlocked: bool = False


class BonusDecision(ValueObject):
    """Outcome of evaluating bonus thresholds."""

    should_unlock: bool
    amount: int = 0
    reason: str | None = None
