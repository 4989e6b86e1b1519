"""SQLAlchemy Core table definitions for the boardctl database.

Environments own boards, boards own cards. ``cards.position`` is the dense
per-board rank maintained by the relocation engine.
"""

from __future__ import annotations

from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Text, primary_key=True),
    Column("name", Text, nullable=False),
    Column("email", Text, unique=True),
    Column("created", Text, nullable=False),
)

environments = Table(
    "environments",
    metadata,
    Column("id", Text, primary_key=True),
    Column("name", Text, nullable=False),
    Column("slug", Text, nullable=False),
    Column("owner_id", Text, ForeignKey("users.id"), nullable=False),
    Column("created", Text, nullable=False),
)

environment_members = Table(
    "environment_members",
    metadata,
    Column("environment_id", Text, ForeignKey("environments.id"), nullable=False),
    Column("user_id", Text, ForeignKey("users.id"), nullable=False),
    Column("role", Text, nullable=False, default="member", server_default="member"),
    Column("created", Text, nullable=False),
    UniqueConstraint("environment_id", "user_id"),
)

boards = Table(
    "boards",
    metadata,
    Column("id", Text, primary_key=True),
    Column("environment_id", Text, ForeignKey("environments.id"), nullable=False),
    Column("name", Text, nullable=False),
    Column("description", Text),
    Column("position", Integer, nullable=False, default=0, server_default="0"),
    Column("created", Text, nullable=False),
)

cards = Table(
    "cards",
    metadata,
    Column("id", Text, primary_key=True),
    Column("board_id", Text, ForeignKey("boards.id"), nullable=False),
    Column("title", Text, nullable=False),
    Column("description", Text),
    Column("position", Integer, nullable=False),
    Column("completed", Integer, default=0, server_default="0"),
    Column("due_date", Text),
    Column("created", Text, nullable=False),
    Column("modified", Text, nullable=False),
)

activity_logs = Table(
    "activity_logs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("card_id", Text, nullable=False),
    Column("user_id", Text, nullable=False),
    Column("action", Text, nullable=False),  # CREATED | MOVED | UPDATED | DELETED
    Column("details", Text),  # JSON object
    Column("created", Text, nullable=False),
)

event_wal = Table(
    "event_wal",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("hook_name", Text, nullable=False),
    Column("payload", Text, nullable=False),  # JSON
    Column("status", Text, nullable=False),
    Column("error", Text),
    Column("retries", Integer, default=0, server_default="0"),
    Column("created", Text, nullable=False),
    Column("completed", Text),
)

# ---------------------------------------------------------------------------
# Indexes for frequently filtered columns
# ---------------------------------------------------------------------------

Index("ix_environments_owner", environments.c.owner_id)
Index("ix_environment_members_user", environment_members.c.user_id)
Index("ix_boards_environment", boards.c.environment_id)
# Not unique: positions are rewritten row by row inside one transaction,
# and a unique index would reject the intermediate states.
Index("ix_cards_board_position", cards.c.board_id, cards.c.position)
Index("ix_activity_logs_card", activity_logs.c.card_id)
Index("ix_activity_logs_created", activity_logs.c.created)
Index("ix_event_wal_status", event_wal.c.status)
