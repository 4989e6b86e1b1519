"""Database engine, schema, and migrations via SQLAlchemy Core."""

from boardctl.infrastructure.database.engine import begin_write, create_db_engine, init_database
from boardctl.infrastructure.database.schema import (
    activity_logs,
    boards,
    cards,
    environment_members,
    environments,
    event_wal,
    metadata,
    users,
)

__all__ = [
    "activity_logs",
    "begin_write",
    "boards",
    "cards",
    "create_db_engine",
    "environment_members",
    "environments",
    "event_wal",
    "init_database",
    "metadata",
    "users",
]
