"""initial schema

Revision ID: 5c1d2a7e9b40
Revises:
Create Date: 2026-10-19 09:12:44.301522

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1d2a7e9b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    """Create the forum tables."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        _created_at(),
        sa.Column("trust", sa.Float(), nullable=False),
        sa.Column("msats", sa.BigInteger(), nullable=False),
        sa.Column("invite_id", sa.Integer(), nullable=True),
        sa.Column("checked_notes_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("note_all_descendants", sa.Boolean(), nullable=False),
        sa.Column("note_item_sats", sa.Boolean(), nullable=False),
        sa.Column("note_mentions", sa.Boolean(), nullable=False),
        sa.Column("note_deposits", sa.Boolean(), nullable=False),
        sa.Column("note_invites", sa.Boolean(), nullable=False),
        sa.Column("note_earning", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index("ix_users_invite_id", "users", ["invite_id"])

    op.create_table(
        "sub",
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("ranking_type", sa.Text(), nullable=False),
        sa.Column("base_cost", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("name"),
    )
    op.create_table(
        "pin",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("cron", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "item",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("text", sa.Text(), nullable=True),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("fwd_user_id", sa.Integer(), nullable=True),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column("pin_id", sa.Integer(), nullable=True),
        sa.Column("sub_name", sa.Text(), nullable=True),
        sa.Column("max_bid", sa.BigInteger(), nullable=True),
        sa.Column("company", sa.Text(), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("remote", sa.Boolean(), nullable=True),
        sa.Column("status", sa.Text(), nullable=False),
        sa.Column("status_updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("path", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["fwd_user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["parent_id"], ["item.id"]),
        sa.ForeignKeyConstraint(["pin_id"], ["pin.id"]),
        sa.ForeignKeyConstraint(["sub_name"], ["sub.name"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_item_parent_id", "item", ["parent_id"])
    op.create_index("ix_item_created_at", "item", ["created_at"])
    op.create_index("ix_item_path", "item", ["path"])

    op.create_table(
        "item_act",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _created_at(),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("act", sa.Text(), nullable=False),
        sa.Column("sats", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["item_id"], ["item.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_item_act_item_id", "item_act", ["item_id"])
    op.create_index("ix_item_act_user_id", "item_act", ["user_id"])

    op.create_table(
        "mention",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _created_at(),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["item_id"], ["item.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("item_id", "user_id", name="uq_mention_item_user"),
    )
    op.create_table(
        "invite",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _created_at(),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("gift", sa.Integer(), nullable=True),
        sa.Column("limit", sa.Integer(), nullable=True),
        sa.Column("revoked", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "invoice",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _created_at(),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("hash", sa.Text(), nullable=False),
        sa.Column("bolt11", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("msats_requested", sa.BigInteger(), nullable=False),
        sa.Column("msats_received", sa.BigInteger(), nullable=True),
        sa.Column("cancelled", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("hash"),
    )
    op.create_table(
        "withdrawal",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _created_at(),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("hash", sa.Text(), nullable=False),
        sa.Column("bolt11", sa.Text(), nullable=False),
        sa.Column("msats_paying", sa.BigInteger(), nullable=False),
        sa.Column("msats_paid", sa.BigInteger(), nullable=True),
        sa.Column("msats_fee_paying", sa.BigInteger(), nullable=False),
        sa.Column("msats_fee_paid", sa.BigInteger(), nullable=True),
        sa.Column("status", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "earn",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _created_at(),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("msats", sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    """Drop the forum tables."""
    op.drop_table("earn")
    op.drop_table("withdrawal")
    op.drop_table("invoice")
    op.drop_table("invite")
    op.drop_table("mention")
    op.drop_index("ix_item_act_user_id", table_name="item_act")
    op.drop_index("ix_item_act_item_id", table_name="item_act")
    op.drop_table("item_act")
    op.drop_index("ix_item_path", table_name="item")
    op.drop_index("ix_item_created_at", table_name="item")
    op.drop_index("ix_item_parent_id", table_name="item")
    op.drop_table("item")
    op.drop_table("pin")
    op.drop_table("sub")
    op.drop_index("ix_users_invite_id", table_name="users")
    op.drop_table("users")
