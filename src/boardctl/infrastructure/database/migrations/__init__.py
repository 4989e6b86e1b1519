"""Alembic wiring for the board schema.

There is no alembic.ini: :func:`build_config` points Alembic at the
revision scripts next to this module. Databases built by
``init_database`` carry tables but no ``alembic_version`` row;
:func:`unversioned_revision` maps the tables they do carry back to the
revision that created them so an upgrade can stamp instead of re-creating.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import inspect

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

MIGRATIONS_DIR = Path(__file__).parent

# Oldest first. Each revision is recognised by the tables it creates.
REVISION_TABLES: dict[str, frozenset[str]] = {
    "001_baseline": frozenset({"users", "environments", "environment_members", "boards", "cards"}),
    "002_activity_log": frozenset({"activity_logs", "event_wal"}),
}


def build_config(db_url: str) -> Config:
    """Alembic Config for the board revision scripts against *db_url*."""
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    cfg.set_main_option("sqlalchemy.url", db_url)
    return cfg


def head_revision(cfg: Config) -> str | None:
    return ScriptDirectory.from_config(cfg).get_current_head()


def current_revision(engine: Engine) -> str | None:
    """The revision stamped in ``alembic_version``, or None."""
    with engine.connect() as conn:
        return MigrationContext.configure(conn).get_current_revision()


def pending_revisions(cfg: Config, current: str | None) -> list[dict[str, str]]:
    """Revisions after *current* up to head, oldest first."""
    pending: list[dict[str, str]] = []
    for rev in ScriptDirectory.from_config(cfg).walk_revisions():
        if rev.revision == current:
            break
        pending.append({"revision": rev.revision, "description": rev.doc or ""})
    pending.reverse()
    return pending


def unversioned_revision(engine: Engine) -> str | None:
    """The newest revision whose tables all exist, for unstamped databases.

    Returns None for an empty database (or one missing baseline tables),
    which a plain upgrade handles.
    """
    tables = set(inspect(engine).get_table_names())
    matched: str | None = None
    for revision, created in REVISION_TABLES.items():
        if not created <= tables:
            break
        matched = revision
    return matched
