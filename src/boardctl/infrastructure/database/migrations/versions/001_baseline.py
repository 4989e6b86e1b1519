"""Baseline schema — users, environments, boards, and ordered cards.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-03-02

Databases created by ``init_database`` already contain every table and are
stamped at head by ``boardctl upgrade`` instead of running this script.
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Text, primary_key=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("email", sa.Text, unique=True),
        sa.Column("created", sa.Text, nullable=False),
    )

    op.create_table(
        "environments",
        sa.Column("id", sa.Text, primary_key=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("slug", sa.Text, nullable=False),
        sa.Column("owner_id", sa.Text, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created", sa.Text, nullable=False),
    )
    op.create_index("ix_environments_owner", "environments", ["owner_id"])

    op.create_table(
        "environment_members",
        sa.Column("environment_id", sa.Text, sa.ForeignKey("environments.id"), nullable=False),
        sa.Column("user_id", sa.Text, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("role", sa.Text, nullable=False, server_default="member"),
        sa.Column("created", sa.Text, nullable=False),
        sa.UniqueConstraint("environment_id", "user_id"),
    )
    op.create_index("ix_environment_members_user", "environment_members", ["user_id"])

    op.create_table(
        "boards",
        sa.Column("id", sa.Text, primary_key=True),
        sa.Column("environment_id", sa.Text, sa.ForeignKey("environments.id"), nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created", sa.Text, nullable=False),
    )
    op.create_index("ix_boards_environment", "boards", ["environment_id"])

    op.create_table(
        "cards",
        sa.Column("id", sa.Text, primary_key=True),
        sa.Column("board_id", sa.Text, sa.ForeignKey("boards.id"), nullable=False),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column("completed", sa.Integer, server_default="0"),
        sa.Column("due_date", sa.Text),
        sa.Column("created", sa.Text, nullable=False),
        sa.Column("modified", sa.Text, nullable=False),
    )
    op.create_index("ix_cards_board_position", "cards", ["board_id", "position"])


def downgrade() -> None:
    op.drop_table("cards")
    op.drop_table("boards")
    op.drop_table("environment_members")
    op.drop_table("environments")
    op.drop_table("users")
