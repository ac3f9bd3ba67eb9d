"""Invite routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Query, Response

from referral.application.usecase.invite import (
    GenerateInviteUseCase,
    GetInviteStatusUseCase,
    GetMyInvitesUseCase,
    GetReceivedInvitesUseCase,
    RedeemInviteUseCase,
)
from referral.application.usecase.invite.generate_invite import (
    GenerateInviteRequest,
    GenerateInviteResponse,
)
from referral.application.usecase.invite.get_invite_status import (
    GetInviteStatusRequest,
    GetInviteStatusResponse,
)
from referral.application.usecase.invite.get_my_invites import (
    GetMyInvitesRequest,
    GetMyInvitesResponse,
)
from referral.application.usecase.invite.get_received_invites import (
    GetReceivedInvitesRequest,
    GetReceivedInvitesResponse,
)
from referral.application.usecase.invite.redeem_invite import (
    RedeemInviteRequest,
    RedeemInviteResponse,
)
from referral.config import Settings
from referral.domain.value import InviteStatus

router = APIRouter(prefix="/invites", tags=["invites"], route_class=DishkaRoute)


@router.post("/generate", response_model=GenerateInviteResponse)
async def generate_invite(
    request: GenerateInviteRequest,
    generate_invite_use_case: FromDishka[GenerateInviteUseCase],
) -> GenerateInviteResponse:
    """Generate a shareable invite code.

    Args:
        request: Sender identity and optional recipient email
        generate_invite_use_case: Generate invite use case from DI

    Returns:
        Code, link, invite ID and the sender's new quota

    Example:
        POST /invites/generate
        {"sender_uid": "u1", "sender_email": "ada@example.com"}

        Response:
        {
            "code": "K7QX2M9PLD",
            "link": "https://app.example.com/redeem?code=K7QX2M9PLD",
            "invite_id": "6c1f...",
            "quota": {"uid": "u1", "remaining": 9, ...}
        }
    """
    return await generate_invite_use_case.execute(request)


@router.post("/redeem", response_model=RedeemInviteResponse)
async def redeem_invite(
    request: RedeemInviteRequest,
    redeem_invite_use_case: FromDishka[RedeemInviteUseCase],
) -> RedeemInviteResponse:
    """Redeem an invite code.

    Repeating a successful redemption with the same user returns the same
    result with ``replay`` set.
    """
    return await redeem_invite_use_case.execute(request)


@router.get("/status", response_model=GetInviteStatusResponse)
async def get_invite_status(
    response: Response,
    get_invite_status_use_case: FromDishka[GetInviteStatusUseCase],
    settings: FromDishka[Settings],
    code: str = Query(...),
) -> GetInviteStatusResponse:
    """Check a code without redeeming it.

    This is the only cacheable invite read. Redemption never relies on it.
    """
    result = await get_invite_status_use_case.execute(
        GetInviteStatusRequest(code=code)
    )
    response.headers["Cache-Control"] = (
        f"max-age={settings.invitations.status_cache_seconds}"
    )
    return result


@router.get("/mine", response_model=GetMyInvitesResponse)
async def get_my_invites(
    get_my_invites_use_case: FromDishka[GetMyInvitesUseCase],
    uid: str = Query(...),
    status_filter: InviteStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> GetMyInvitesResponse:
    """List invites sent by a user.

    Args:
        get_my_invites_use_case: Get my invites use case from DI
        uid: Sender user ID
        status_filter: Optional status filter (sent, redeemed)
        limit: Maximum number of results (1-100)
        offset: Number of results to skip

    Returns:
        Sent invites and the user's quota
    """
    return await get_my_invites_use_case.execute(
        GetMyInvitesRequest(
            uid=uid,
            status=status_filter,
            limit=limit,
            offset=offset,
        )
    )


@router.get("/received", response_model=GetReceivedInvitesResponse)
async def get_received_invites(
    get_received_invites_use_case: FromDishka[GetReceivedInvitesUseCase],
    uid: str = Query(...),
) -> GetReceivedInvitesResponse:
    """List invites redeemed by a user."""
    return await get_received_invites_use_case.execute(
        GetReceivedInvitesRequest(uid=uid)
    )
