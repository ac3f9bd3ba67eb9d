"""Invite use cases."""

from referral.application.usecase.invite.generate_invite import (
    GenerateInviteRequest,
    GenerateInviteResponse,
    GenerateInviteUseCase,
    InviteItem,
)
from referral.application.usecase.invite.get_invite_status import (
    GetInviteStatusRequest,
    GetInviteStatusResponse,
    GetInviteStatusUseCase,
)
from referral.application.usecase.invite.get_my_invites import (
    GetMyInvitesRequest,
    GetMyInvitesResponse,
    GetMyInvitesUseCase,
)
from referral.application.usecase.invite.get_received_invites import (
    GetReceivedInvitesRequest,
    GetReceivedInvitesResponse,
    GetReceivedInvitesUseCase,
)
from referral.application.usecase.invite.reconcile_redemptions import (
    ReconcileRedemptionsRequest,
    ReconcileRedemptionsResponse,
    ReconcileRedemptionsUseCase,
)
from referral.application.usecase.invite.redeem_invite import (
    RedeemInviteRequest,
    RedeemInviteResponse,
    RedeemInviteUseCase,
)

__all__ = [
    "GenerateInviteRequest",
    "GenerateInviteResponse",
    "GenerateInviteUseCase",
    "GetInviteStatusRequest",
    "GetInviteStatusResponse",
    "GetInviteStatusUseCase",
    "GetMyInvitesRequest",
    "GetMyInvitesResponse",
    "GetMyInvitesUseCase",
    "GetReceivedInvitesRequest",
    "GetReceivedInvitesResponse",
    "GetReceivedInvitesUseCase",
    "InviteItem",
    "ReconcileRedemptionsRequest",
    "ReconcileRedemptionsResponse",
    "ReconcileRedemptionsUseCase",
    "RedeemInviteRequest",
    "RedeemInviteResponse",
    "RedeemInviteUseCase",
]
