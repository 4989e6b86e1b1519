"""Tests for database engine setup and transaction handling."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import inspect, insert, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError

from boardctl.infrastructure.database.engine import begin_write, create_db_engine, init_database
from boardctl.infrastructure.database.schema import users


def _url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'test.db'}"


class TestCreateDbEngine:
    def test_wal_mode_enabled(self, tmp_path: Path) -> None:
        engine = create_db_engine(_url(tmp_path))
        with engine.connect() as conn:
            assert conn.execute(text("PRAGMA journal_mode")).scalar() == "wal"

    def test_foreign_keys_enabled(self, tmp_path: Path) -> None:
        engine = create_db_engine(_url(tmp_path))
        with engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1


class TestInitDatabase:
    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        init_database(f"sqlite:///{tmp_path / 'nested' / 'dir' / 'board.db'}")
        assert (tmp_path / "nested" / "dir" / "board.db").exists()

    def test_creates_all_tables(self, db_engine: Engine) -> None:
        assert set(inspect(db_engine).get_table_names()) >= {
            "users",
            "environments",
            "environment_members",
            "boards",
            "cards",
            "activity_logs",
            "event_wal",
        }

    def test_idempotent(self, db_url: str) -> None:
        init_database(db_url).dispose()
        engine = init_database(db_url)
        assert "cards" in inspect(engine).get_table_names()
        engine.dispose()


class TestBeginWrite:
    def test_commits_on_exit(self, db_engine: Engine) -> None:
        with begin_write(db_engine) as conn:
            conn.execute(insert(users).values(id="usr_000000000001", name="A", created="now"))

        with db_engine.connect() as conn:
            assert conn.execute(select(users.c.name)).scalar_one() == "A"

    def test_rolls_back_on_exception(self, db_engine: Engine) -> None:
        with pytest.raises(RuntimeError), begin_write(db_engine) as conn:
            conn.execute(insert(users).values(id="usr_000000000001", name="A", created="now"))
            raise RuntimeError("abort")

        with db_engine.connect() as conn:
            assert conn.execute(select(users.c.id)).first() is None

    def test_reads_run_inside_the_transaction(self, db_engine: Engine) -> None:
        with begin_write(db_engine) as conn:
            conn.execute(select(users.c.id)).fetchall()
            assert conn.connection.dbapi_connection.in_transaction

    def test_second_writer_waits_for_lock(self, tmp_path: Path) -> None:
        engine = init_database(_url(tmp_path), busy_timeout=0.1)
        try:
            with begin_write(engine):
                with pytest.raises(OperationalError, match="locked"):
                    with begin_write(engine):
                        pass
        finally:
            engine.dispose()

    def test_readers_not_blocked_by_writer(self, db_engine: Engine) -> None:
        with begin_write(db_engine) as writer:
            writer.execute(insert(users).values(id="usr_000000000001", name="A", created="now"))
            with db_engine.connect() as reader:
                # Uncommitted row is invisible, and the read does not block.
                assert reader.execute(select(users.c.id)).first() is None
