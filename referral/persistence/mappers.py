"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from typing import Any, Dict
from uuid import UUID

from referral.domain.model import (
    AppliedOperation,
    Invite,
    InviteEdge,
    InviteToken,
    User,
)
from referral.domain.value import (
    EdgeId,
    InviteCode,
    InviteId,
    InviteStatus,
    QuotaOperation,
    UserId,
)


def _uuid(value: Any) -> UUID:
    return UUID(value) if isinstance(value, str) else value


def row_to_user(row: Dict[str, Any]) -> User:
    """Convert database row to User domain model.

    Args:
        row: Database row as dict

    Returns:
        User domain model
    """
    return User(
        id=UserId(row["id"]),
        email=row.get("email") or "",
        admin=row["admin"],
        invites_remaining=row["invites_remaining"],
        invites_granted=row["invites_granted"],
        invites_redeemed=row["invites_redeemed"],
        bonus_unlocked=row["bonus_unlocked"],
        sync_bonus_used=row["sync_bonus_used"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def user_to_dict(user: User) -> Dict[str, Any]:
    """Convert User domain model to database dict."""
    return user.model_dump()


def row_to_invite(row: Dict[str, Any]) -> Invite:
    """Convert database row to Invite domain model.

    Args:
        row: Database row as dict

    Returns:
        Invite domain model
    """
    redeemed_by = row.get("redeemed_by_uid")
    return Invite(
        id=InviteId(_uuid(row["id"])),
        sender_uid=UserId(row["sender_uid"]),
        sender_email=row.get("sender_email") or "",
        recipient_email=row.get("recipient_email"),
        token=InviteCode(row["token"]),
        status=InviteStatus(row["status"]),
        sent_at=row["sent_at"],
        redeemed_at=row.get("redeemed_at"),
        redeemed_by_uid=UserId(redeemed_by) if redeemed_by else None,
        redeemed_by_email=row.get("redeemed_by_email"),
    )


def invite_to_dict(invite: Invite) -> Dict[str, Any]:
    """Convert Invite domain model to database dict.

    Value objects dump to their primitive, enums are stored by value.
    """
    data = invite.model_dump()
    data["status"] = invite.status.value
    return data


def row_to_invite_token(row: Dict[str, Any]) -> InviteToken:
    """Convert database row to InviteToken domain model."""
    used_by = row.get("used_by_uid")
    return InviteToken(
        token=InviteCode(row["token"]),
        invite_id=InviteId(_uuid(row["invite_id"])),
        sender_uid=UserId(row["sender_uid"]),
        used=row["used"],
        used_at=row.get("used_at"),
        used_by_uid=UserId(used_by) if used_by else None,
        used_by_email=row.get("used_by_email"),
        created_at=row["created_at"],
    )


def invite_token_to_dict(token: InviteToken) -> Dict[str, Any]:
    return token.model_dump()


def row_to_invite_edge(row: Dict[str, Any]) -> InviteEdge:
    """Convert database row to InviteEdge domain model."""
    return InviteEdge(
        id=EdgeId(_uuid(row["id"])),
        from_uid=UserId(row["from_uid"]),
        to_uid=UserId(row["to_uid"]),
        invite_id=InviteId(_uuid(row["invite_id"])),
        created_at=row["created_at"],
    )


def invite_edge_to_dict(edge: InviteEdge) -> Dict[str, Any]:
    return edge.model_dump()


def row_to_applied_operation(row: Dict[str, Any]) -> AppliedOperation:
    """Convert database row to AppliedOperation domain model."""
    return AppliedOperation(
        invite_id=InviteId(_uuid(row["invite_id"])),
        operation=QuotaOperation(row["operation"]),
        uid=UserId(row["uid"]),
        amount=row["amount"],
        applied_at=row["applied_at"],
    )


def applied_operation_to_dict(operation: AppliedOperation) -> Dict[str, Any]:
    data = operation.model_dump()
    data["operation"] = operation.operation.value
    return data
