"""CheckService — ordering integrity and repair.

The relocation engine keeps every board dense, but rows can still be
damaged from outside it (manual SQL, an interrupted import). ``check``
reports each board whose positions are not exactly ``0..n-1``; ``fix``
renumbers those boards in their current order.
"""

from __future__ import annotations

import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any

from sqlalchemy.engine import make_url

from boardctl.domain.ordering import compact, is_dense
from boardctl.services._helpers import now_compact
from boardctl.services.base import BaseService
from boardctl.services.result import ServiceResult
from boardctl.services.telemetry import trace_span, traced

SEVERITY_ERROR = "error"
CAT_ORDERING = "ordering"

BACKUP_MAX_COUNT = 10


class CheckService(BaseService):
    """Board ordering checks and compaction."""

    @traced
    def check(self) -> ServiceResult:
        """Report non-dense boards without modifying anything."""
        issues: list[dict[str, Any]] = []
        with trace_span("ordering"), self._store.read() as reader:
            for board_id in reader.board_ids():
                slots = reader.list_ordered(board_id)
                if is_dense(slots):
                    continue
                issues.append(
                    {
                        "category": CAT_ORDERING,
                        "severity": SEVERITY_ERROR,
                        "board_id": board_id,
                        "message": (
                            f"Board '{board_id}' positions "
                            f"{[s.position for s in slots]} are not 0..{len(slots) - 1}"
                        ),
                        "fix_action": "compact",
                    }
                )

        return ServiceResult(
            ok=True,
            op="check",
            data={"issues": issues, "count": len(issues)},
        )

    @traced
    def fix(self) -> ServiceResult:
        """Compact every non-dense board, keeping its current card order."""
        warnings: list[str] = []
        backup_path = self._backup_db()
        if backup_path is None:
            warnings.append("Database is not a SQLite file; no backup was taken")

        fixes: list[str] = []
        with self._store.transaction() as txn:
            for board_id in txn.board_ids():
                slots = txn.list_ordered(board_id)
                if is_dense(slots):
                    continue
                written = txn.write_positions(compact(slots, board_id))
                fixes.append(f"Compacted board '{board_id}' ({written} card(s) renumbered)")

        data: dict[str, Any] = {"fixes": fixes, "count": len(fixes)}
        if backup_path is not None:
            data["backup_path"] = str(backup_path)
        return ServiceResult(ok=True, op="fix", data=data, warnings=warnings)

    # ------------------------------------------------------------------
    # Backup helpers
    # ------------------------------------------------------------------

    def _backup_db(self) -> Path | None:
        """Snapshot the SQLite database into ``.boardctl/backups``.

        Uses the SQLite online backup API so committed pages still in the
        ``-wal`` file are part of the snapshot. Returns None for in-memory
        or non-SQLite databases.
        """
        url = make_url(self._store.settings.database_url)
        if url.get_backend_name() != "sqlite" or url.database in (None, "", ":memory:"):
            return None
        db_path = Path(url.database)
        if not db_path.is_file():
            return None

        backup_dir = self._store.root / ".boardctl" / "backups"
        backup_dir.mkdir(parents=True, exist_ok=True)
        backup_path = backup_dir / f"boardctl-{now_compact()}.db"
        raw = self._store.engine.raw_connection()
        try:
            with closing(sqlite3.connect(str(backup_path))) as dest:
                raw.driver_connection.backup(dest)
        finally:
            raw.close()

        self._prune_backups(backup_dir)
        return backup_path

    def _prune_backups(self, backup_dir: Path) -> None:
        """Keep only the newest backups."""
        backups = sorted(backup_dir.glob("boardctl-*.db"))
        if len(backups) > BACKUP_MAX_COUNT:
            for old in backups[: len(backups) - BACKUP_MAX_COUNT]:
                old.unlink(missing_ok=True)
