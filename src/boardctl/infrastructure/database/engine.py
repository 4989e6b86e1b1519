"""Database engine setup.

SQLite is the default persistence layer: WAL mode for concurrent reads and
ACID transactions for the ordering invariant. Any other SQLAlchemy URL is
accepted; row locking then comes from ``SELECT ... FOR UPDATE``.

SQLite needs two adjustments so that a read-then-write transaction really is
one transaction. pysqlite defers ``BEGIN`` until the first DML statement, so
reads would run outside it; we disable that and emit ``BEGIN`` ourselves.
Writers ask for ``BEGIN IMMEDIATE`` via the ``sqlite_begin`` execution
option, which takes the write lock up front and makes concurrent writers wait
(``busy_timeout``) instead of failing on a stale snapshot.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine, make_url

from boardctl.infrastructure.database.schema import metadata

SQLITE_BEGIN_OPTION = "sqlite_begin"
_BEGIN_MODES = frozenset({"DEFERRED", "IMMEDIATE", "EXCLUSIVE"})


def create_db_engine(url: str, *, busy_timeout: float = 30.0, echo: bool = False) -> Engine:
    """Create an engine for *url*, with SQLite pragmas and begin handling."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return create_engine(url, echo=echo, pool_pre_ping=True)

    engine = create_engine(
        url,
        echo=echo,
        connect_args={"check_same_thread": False, "timeout": busy_timeout},
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        # Hand transaction control to the "begin" listener below.
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin(conn: Connection) -> None:
        mode = str(conn.get_execution_options().get(SQLITE_BEGIN_OPTION, "DEFERRED")).upper()
        if mode not in _BEGIN_MODES:
            mode = "DEFERRED"
        conn.exec_driver_sql(f"BEGIN {mode}")

    return engine


@contextmanager
def begin_write(engine: Engine) -> Iterator[Connection]:
    """Open a write transaction, taking the SQLite write lock up front.

    Commits on normal exit, rolls back on exception. On other backends
    this is a plain ``engine.begin()``.
    """
    with engine.connect() as conn:
        conn.execution_options(**{SQLITE_BEGIN_OPTION: "IMMEDIATE"})
        with conn.begin():
            yield conn


def init_database(url: str, *, busy_timeout: float = 30.0, echo: bool = False) -> Engine:
    """Initialize the boardctl database at *url*.

    For SQLite file URLs the parent directory is created first. All tables
    from :data:`schema.metadata` are created if missing.

    Idempotent — safe to call on an existing database.

    Returns the engine ready for use.
    """
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_db_engine(url, busy_timeout=busy_timeout, echo=echo)
    metadata.create_all(engine)
    return engine
