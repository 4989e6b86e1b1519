"""Add the card audit trail and the plugin event write-ahead log.

Revision ID: 002_activity_log
Revises: 001_baseline
Create Date: 2026-03-16
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "002_activity_log"
down_revision: str | None = "001_baseline"
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None


def upgrade() -> None:
    op.create_table(
        "activity_logs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("card_id", sa.Text, nullable=False),
        sa.Column("user_id", sa.Text, nullable=False),
        sa.Column("action", sa.Text, nullable=False),
        sa.Column("details", sa.Text),
        sa.Column("created", sa.Text, nullable=False),
    )
    op.create_index("ix_activity_logs_card", "activity_logs", ["card_id"])
    op.create_index("ix_activity_logs_created", "activity_logs", ["created"])

    op.create_table(
        "event_wal",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("hook_name", sa.Text, nullable=False),
        sa.Column("payload", sa.Text, nullable=False),
        sa.Column("status", sa.Text, nullable=False),
        sa.Column("error", sa.Text),
        sa.Column("retries", sa.Integer, server_default="0"),
        sa.Column("created", sa.Text, nullable=False),
        sa.Column("completed", sa.Text),
    )
    op.create_index("ix_event_wal_status", "event_wal", ["status"])


def downgrade() -> None:
    op.drop_table("event_wal")
    op.drop_table("activity_logs")
