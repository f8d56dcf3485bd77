"""Initial schema — all 5 FitMatch tables.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── 1. users ────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("username", sa.String, unique=True, index=True, nullable=False),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("email", sa.String, nullable=True),
        sa.Column("age", sa.Integer, nullable=True),
        sa.Column("gender", sa.String, nullable=True),
        sa.Column(
            "fitness_goals",
            postgresql.ARRAY(sa.String),
            server_default="{}",
            nullable=False,
            comment="Ordered, user-entered goal labels",
        ),
        sa.Column(
            "gym_preferences",
            postgresql.ARRAY(sa.String),
            server_default="{}",
            nullable=False,
            comment="Ordered, user-entered preference labels",
        ),
        sa.Column("body_measurements", postgresql.JSONB, nullable=True),
        sa.Column("profile_pic", sa.String, nullable=True),
        sa.Column(
            "progress_photos",
            postgresql.ARRAY(sa.String),
            server_default="{}",
            nullable=False,
        ),
        sa.Column("is_admin", sa.Boolean, server_default="false", nullable=False),
        sa.Column("is_banned", sa.Boolean, server_default="false", nullable=False),
        sa.Column(
            "status",
            sa.String,
            server_default="active",
            nullable=False,
            comment="active / banned",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    # Case-insensitive username lookups
    op.create_index(
        "ix_users_username_lower",
        "users",
        [sa.text("lower(username)")],
        unique=True,
    )

    # ── 2. gyms ─────────────────────────────────────────────────────
    op.create_table(
        "gyms",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String, nullable=False),
        sa.Column(
            "location",
            postgresql.JSONB,
            nullable=False,
            comment="address, city, state, zip_code, lat, lng",
        ),
        sa.Column("images", postgresql.ARRAY(sa.String), server_default="{}", nullable=False),
        sa.Column("amenities", postgresql.ARRAY(sa.String), server_default="{}", nullable=False),
        sa.Column("rating", sa.Float, nullable=True, comment="0-5, null means unrated"),
        sa.Column(
            "added_by",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )

    # ── 3. saved_gyms ───────────────────────────────────────────────
    op.create_table(
        "saved_gyms",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "gym_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("gyms.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("match_score", sa.Integer, nullable=True, comment="Score snapshot at save time"),
        sa.Column(
            "saved_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint("user_id", "gym_id", name="uq_saved_gym_pair"),
    )

    # ── 4. user_matches ─────────────────────────────────────────────
    op.create_table(
        "user_matches",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "sender_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "receiver_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "pair_low",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            comment="min(sender_id, receiver_id)",
        ),
        sa.Column(
            "pair_high",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            comment="max(sender_id, receiver_id)",
        ),
        sa.Column(
            "status",
            sa.String,
            server_default="pending",
            nullable=False,
            comment="pending / accepted / rejected",
        ),
        sa.Column("match_score", sa.Float, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint("pair_low", "pair_high", name="uq_user_match_pair"),
        sa.CheckConstraint("sender_id <> receiver_id", name="chk_user_match_no_self"),
    )

    # ── 5. messages ─────────────────────────────────────────────────
    op.create_table(
        "messages",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "sender_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "receiver_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("read", sa.Boolean, server_default="false", nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index(
        "ix_messages_receiver_unread",
        "messages",
        ["receiver_id", "read"],
    )
    op.create_index(
        "ix_messages_pair_created",
        "messages",
        ["sender_id", "receiver_id", "created_at"],
    )


def downgrade() -> None:
    # Drop in reverse order (children / dependents first).
    op.drop_index("ix_messages_pair_created", table_name="messages")
    op.drop_index("ix_messages_receiver_unread", table_name="messages")
    op.drop_table("messages")

    op.drop_table("user_matches")
    op.drop_table("saved_gyms")
    op.drop_table("gyms")

    op.drop_index("ix_users_username_lower", table_name="users")
    op.drop_table("users")
