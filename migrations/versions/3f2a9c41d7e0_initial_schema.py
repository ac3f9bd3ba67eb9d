"""initial_schema

Create the referral engine schema:
- Users (invite accounts keyed by identity provider user ID)
- Invite tokens (code lookup and single-use claim)
- Invites (audit trail of sent invitations)
- Invite edges (sender -> recipient referral graph)
- Applied operations (idempotency record for quota changes)

Revision ID: 3f2a9c41d7e0
Revises:
Create Date: 2026-10-16 09:12:03.412087

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3f2a9c41d7e0"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Create ENUM types (idempotent)
    op.execute("""
        DO $$ BEGIN
            CREATE TYPE invite_status AS ENUM ('sent', 'redeemed');
        EXCEPTION
            WHEN duplicate_object THEN null;
        END $$;
    """)

    op.execute("""
        DO $$ BEGIN
            CREATE TYPE quota_operation AS ENUM (
                'debit', 'refund', 'credit_sender', 'grant_fresh'
            );
        EXCEPTION
            WHEN duplicate_object THEN null;
        END $$;
    """)

    # ========================================================================
    # USERS table
    # ========================================================================
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=128), nullable=False),
        sa.Column("email", sa.String(length=255), server_default="", nullable=False),
        sa.Column("admin", sa.Boolean(), server_default="false", nullable=False),
        sa.Column(
            "invites_remaining", sa.Integer(), server_default="0", nullable=False
        ),
        sa.Column("invites_granted", sa.Integer(), server_default="0", nullable=False),
        sa.Column(
            "invites_redeemed", sa.Integer(), server_default="0", nullable=False
        ),
        sa.Column(
            "bonus_unlocked", sa.Boolean(), server_default="false", nullable=False
        ),
        sa.Column(
            "sync_bonus_used", sa.Boolean(), server_default="false", nullable=False
        ),
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "invites_remaining >= 0", name="ck_users_remaining_non_negative"
        ),
        sa.CheckConstraint(
            "invites_granted >= 0", name="ck_users_granted_non_negative"
        ),
        sa.CheckConstraint(
            "invites_redeemed >= 0", name="ck_users_redeemed_non_negative"
        ),
        sa.CheckConstraint(
            "invites_granted >= invites_redeemed",
            name="ck_users_granted_covers_redeemed",
        ),
    )
    op.create_index("idx_users_email", "users", ["email"])

    # ========================================================================
    # INVITE_TOKENS table
    # ========================================================================
    op.create_table(
        "invite_tokens",
        sa.Column("token", sa.String(length=64), nullable=False),
        sa.Column("invite_id", sa.UUID(), nullable=False),
        sa.Column("sender_uid", sa.String(length=128), nullable=False),
        sa.Column("used", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("used_at", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("used_by_uid", sa.String(length=128), nullable=True),
        sa.Column("used_by_email", sa.String(length=255), nullable=True),
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("token"),
        sa.UniqueConstraint("invite_id"),
    )
    op.create_index("idx_invite_tokens_used_at", "invite_tokens", ["used_at"])

    # ========================================================================
    # INVITES table
    # ========================================================================
    op.create_table(
        "invites",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("sender_uid", sa.String(length=128), nullable=False),
        sa.Column(
            "sender_email", sa.String(length=255), server_default="", nullable=False
        ),
        sa.Column("recipient_email", sa.String(length=255), nullable=True),
        sa.Column("token", sa.String(length=64), nullable=False),
        sa.Column(
            "status",
            postgresql.ENUM("sent", "redeemed", name="invite_status", create_type=False),
            server_default="sent",
            nullable=False,
        ),
        sa.Column(
            "sent_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
        sa.Column("redeemed_at", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("redeemed_by_uid", sa.String(length=128), nullable=True),
        sa.Column("redeemed_by_email", sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(["token"], ["invite_tokens.token"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token"),
    )
    op.create_index(
        "idx_invites_sender_status", "invites", ["sender_uid", "status"]
    )
    op.create_index("idx_invites_redeemed_by", "invites", ["redeemed_by_uid"])

    # ========================================================================
    # INVITE_EDGES table (insert-only)
    # ========================================================================
    op.create_table(
        "invite_edges",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("from_uid", sa.String(length=128), nullable=False),
        sa.Column("to_uid", sa.String(length=128), nullable=False),
        sa.Column("invite_id", sa.UUID(), nullable=False),
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["invite_id"], ["invites.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("invite_id"),
    )
    op.create_index("idx_invite_edges_from_uid", "invite_edges", ["from_uid"])
    op.create_index("idx_invite_edges_to_uid", "invite_edges", ["to_uid"])

    # ========================================================================
    # APPLIED_OPERATIONS table
    # ========================================================================
    op.create_table(
        "applied_operations",
        sa.Column("invite_id", sa.UUID(), nullable=False),
        sa.Column(
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
        sa.Column("uid", sa.String(length=128), nullable=False),
        sa.Column("amount", sa.Integer(), server_default="0", nullable=False),
        sa.Column(
            "applied_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint(
            "invite_id", "operation", name="pk_applied_operations"
        ),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("applied_operations")
    op.drop_index("idx_invite_edges_to_uid", table_name="invite_edges")
    op.drop_index("idx_invite_edges_from_uid", table_name="invite_edges")
    op.drop_table("invite_edges")
    op.drop_index("idx_invites_redeemed_by", table_name="invites")
    op.drop_index("idx_invites_sender_status", table_name="invites")
    op.drop_table("invites")
    op.drop_index("idx_invite_tokens_used_at", table_name="invite_tokens")
    op.drop_table("invite_tokens")
    op.drop_index("idx_users_email", table_name="users")
    op.drop_table("users")

    op.execute("DROP TYPE IF EXISTS quota_operation")
    op.execute("DROP TYPE IF EXISTS invite_status")
