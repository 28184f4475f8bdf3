"""Create peer_group and peer_group_member tables

Revision ID: 002
Revises: 001
Create Date: 2026-10-18

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "peer_group",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("creator_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("max_members", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("category", sa.String(length=32), nullable=False, server_default="other"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_peer_group_creator_id"), "peer_group", ["creator_id"])

    op.create_table(
        "peer_group_member",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("peer_group_id", sa.Integer(), sa.ForeignKey("peer_group.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("joined_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("peer_group_id", "user_id", name="uq_peer_group_member"),
    )
    op.create_index(op.f("ix_peer_group_member_peer_group_id"), "peer_group_member", ["peer_group_id"])
    op.create_index(op.f("ix_peer_group_member_user_id"), "peer_group_member", ["user_id"])


def downgrade() -> None:
    op.drop_index(op.f("ix_peer_group_member_user_id"), table_name="peer_group_member")
    op.drop_index(op.f("ix_peer_group_member_peer_group_id"), table_name="peer_group_member")
    op.drop_table("peer_group_member")
    op.drop_index(op.f("ix_peer_group_creator_id"), table_name="peer_group")
    op.drop_table("peer_group")
