"""SQLAlchemy table definitions for the referral engine.

These table definitions are used with SQLAlchemy Core and manual mappers.
They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
)
from sqlalchemy.dialects import postgresql
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# USERS TABLE (invite accounts, keyed by the identity provider's user ID)
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("id", String(128), primary_key=True),
    Column("email", String(255), nullable=False, server_default=""),
    Column("admin", Boolean, nullable=False, server_default="false"),
    Column("invites_remaining", Integer, nullable=False, server_default="0"),
    Column("invites_granted", Integer, nullable=False, server_default="0"),
    Column("invites_redeemed", Integer, nullable=False, server_default="0"),
    Column("bonus_unlocked", Boolean, nullable=False, server_default="false"),
    Column("sync_bonus_used", Boolean, nullable=False, server_default="false"),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    CheckConstraint("invites_remaining >= 0", name="ck_users_remaining_non_negative"),
    CheckConstraint("invites_granted >= 0", name="ck_users_granted_non_negative"),
    CheckConstraint("invites_redeemed >= 0", name="ck_users_redeemed_non_negative"),
    CheckConstraint(
        "invites_granted >= invites_redeemed", name="ck_users_granted_covers_redeemed"
    ),
)

Index("idx_users_email", users_table.c.email)

# ============================================================================
# INVITE TOKENS TABLE (redemption fast path)
# ============================================================================
invite_tokens_table = Table(
    "invite_tokens",
    metadata,
    Column("token", String(64), primary_key=True),
    Column("invite_id", UUID, nullable=False, unique=True),
    Column("sender_uid", String(128), nullable=False),
    Column("used", Boolean, nullable=False, server_default="false"),
    Column("used_at", TIMESTAMP(timezone=True), nullable=True),
    Column("used_by_uid", String(128), nullable=True),
    Column("used_by_email", String(255), nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

Index("idx_invite_tokens_used_at", invite_tokens_table.c.used_at)

# ============================================================================
# INVITES TABLE (audit trail, never deleted)
# ============================================================================
invites_table = Table(
    "invites",
    metadata,
    Column("id", UUID, primary_key=True),
    Column("sender_uid", String(128), nullable=False),
    Column("sender_email", String(255), nullable=False, server_default=""),
    Column("recipient_email", String(255), nullable=True),
    Column(
        "token",
        String(64),
        ForeignKey("invite_tokens.token"),
        nullable=False,
        unique=True,
    ),
    Column(
        "status",
        postgresql.ENUM("sent", "redeemed", name="invite_status", create_type=False),
        nullable=False,
        server_default="sent",
    ),
    Column("sent_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"),
    Column("redeemed_at", TIMESTAMP(timezone=True), nullable=True),
    Column("redeemed_by_uid", String(128), nullable=True),
    Column("redeemed_by_email", String(255), nullable=True),
)

Index("idx_invites_sender_status", invites_table.c.sender_uid, invites_table.c.status)
Index("idx_invites_redeemed_by", invites_table.c.redeemed_by_uid)

# ============================================================================
# INVITE EDGES TABLE (referral graph, insert-only)
# ============================================================================
invite_edges_table = Table(
    "invite_edges",
    metadata,
    Column("id", UUID, primary_key=True),
    Column("from_uid", String(128), nullable=False),
    Column("to_uid", String(128), nullable=False),
    Column(
        "invite_id",
        UUID,
        ForeignKey("invites.id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
    ),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

Index("idx_invite_edges_from_uid", invite_edges_table.c.from_uid)
Index("idx_invite_edges_to_uid", invite_edges_table.c.to_uid)

# ============================================================================
# APPLIED OPERATIONS TABLE (idempotency record for quota effects)
# ============================================================================
applied_operations_table = Table(
    "applied_operations",
    metadata,
    Column("invite_id", UUID, nullable=False),
    Column(
        "operation",
        postgresql.ENUM(
            "debit",
            "refund",
            "credit_sender",
            "grant_fresh",
            name="quota_operation",
            create_type=False,
        ),
        nullable=False,
    ),
    Column("uid", String(128), nullable=False),
    Column("amount", Integer, nullable=False, server_default="0"),
    Column(
        "applied_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    PrimaryKeyConstraint("invite_id", "operation", name="pk_applied_operations"),
)
