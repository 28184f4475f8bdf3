"""Create goal table

Revision ID: 003
Revises: 002
Create Date: 2026-10-18

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "003"
down_revision: str | None = "002"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "goal",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("peer_group_id", sa.Integer(), sa.ForeignKey("peer_group.id"), nullable=True),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("deadline", sa.DateTime(), nullable=False),
        sa.Column("stake_amount", sa.Float(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_goal_user_id"), "goal", ["user_id"])
    op.create_index(op.f("ix_goal_peer_group_id"), "goal", ["peer_group_id"])


def downgrade() -> None:
    op.drop_index(op.f("ix_goal_peer_group_id"), table_name="goal")
    op.drop_index(op.f("ix_goal_user_id"), table_name="goal")
    op.drop_table("goal")
