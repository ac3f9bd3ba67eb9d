"""Tests for domain value objects."""

import pytest
from pydantic import ValidationError

from referral.domain.value import BonusCounters, InviteCode


class TestInviteCode:
    """Tests for InviteCode normalization and validation."""

    def test_normalizes_case_and_whitespace(self):
        code = InviteCode("  k7qx2m9pld \n")

        assert code.root == "K7QX2M9PLD"

    def test_equal_codes_hash_alike(self):
        """Codes are used as dict keys by the in-memory store."""
        assert {InviteCode("abcdef23"): 1}[InviteCode("ABCDEF23")] == 1

    @pytest.mark.parametrize("raw", ["", "ABC12", "ABC-123", "ABC 123", "A" * 65])
    def test_rejects_malformed_codes(self, raw):
        with pytest.raises(ValidationError):
            InviteCode(raw)

    def test_redacted_keeps_only_a_prefix(self):
        assert InviteCode("K7QX2M9PLD").redacted == "K7QX..."


class TestBonusCounters:
    """Tests for BonusCounters."""

    def test_is_immutable(self):
        counters = BonusCounters(
            redeemed_count=1, connection_count=2, bonus_unlocked=False
        )

        with pytest.raises(ValidationError):
            counters.redeemed_count = 5
