"""episodes and panels

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "episodes",
        sa.Column("episode_id", sa.Integer(), primary_key=True, autoincrement=False, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("arc", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="todo"),
        sa.Column("summary", sa.Text(), nullable=False, server_default=""),
        sa.Column("page_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        "panels",
        sa.Column("panel_id", sa.Integer(), primary_key=True, autoincrement=False, nullable=False),
        sa.Column("episode_id", sa.Integer(), sa.ForeignKey("episodes.episode_id"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("page_number", sa.Integer(), nullable=False),
        sa.Column("panel_type", sa.String(length=64), nullable=False),
        sa.Column("framing", sa.String(length=64), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("dialogue", sa.Text(), nullable=False, server_default=""),
        sa.Column("characters", sa.JSON(), nullable=False),
        sa.Column("scene", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("props", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="queued"),
        sa.Column("visibility", sa.String(length=32), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_panels_episode_id", "panels", ["episode_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_panels_episode_id", table_name="panels")
    op.drop_table("panels")
    op.drop_table("episodes")
