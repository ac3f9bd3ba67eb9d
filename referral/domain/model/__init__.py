"""Domain model entities for the referral engine."""

from referral.domain.model.invite import Invite
from referral.domain.model.invite_edge import InviteEdge
from referral.domain.model.invite_token import InviteToken
from referral.domain.model.quota import AppliedOperation, QuotaSnapshot
from referral.domain.model.user import User

__all__ = [
    "User",
    "Invite",
    "InviteToken",
    "InviteEdge",
    "QuotaSnapshot",
    "AppliedOperation",
]
