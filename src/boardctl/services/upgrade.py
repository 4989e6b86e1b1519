"""UpgradeService — database migration with Alembic.

Pipeline: BACKUP → MIGRATE → VALIDATE → REPORT
"""

from __future__ import annotations

import logging
from typing import Any

from alembic import command

from boardctl.infrastructure.database.migrations import (
    build_config,
    current_revision,
    head_revision,
    pending_revisions,
    unversioned_revision,
)
from boardctl.services.base import BaseService
from boardctl.services.check import CheckService
from boardctl.services.result import ServiceResult

logger = logging.getLogger(__name__)


class UpgradeService(BaseService):
    """Handles database schema migrations via Alembic."""

    def check_pending(self) -> ServiceResult:
        """List pending migrations without applying."""
        op = "upgrade"

        try:
            cfg = build_config(self._store.settings.database_url)
            head = head_revision(cfg)
            current = current_revision(self._store.engine)
            pending = pending_revisions(cfg, current)
        except Exception as exc:
            return ServiceResult.failure(op, "CHECK_FAILED", f"Failed to check migrations: {exc}")

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "pending_count": len(pending),
                "pending": pending,
                "current": current,
                "head": head,
            },
        )

    def apply(self) -> ServiceResult:
        """BACKUP → MIGRATE → VALIDATE → REPORT pipeline."""
        op = "upgrade"
        warnings: list[str] = []

        check_result = self.check_pending()
        if not check_result.ok:
            return check_result

        pending_count = check_result.data["pending_count"]
        if pending_count == 0:
            return ServiceResult(
                ok=True,
                op=op,
                data={
                    "applied_count": 0,
                    "current": check_result.data["head"],
                    "message": "Database is already up to date",
                },
            )

        # BACKUP
        try:
            backup_path = CheckService(self._store)._backup_db()
        except OSError as exc:
            return ServiceResult.failure(op, "BACKUP_FAILED", f"Backup failed: {exc}")

        # MIGRATE; tables built by init_database are stamped at the
        # revision that created them first
        try:
            cfg = build_config(self._store.settings.database_url)
            if check_result.data["current"] is None:
                existing = unversioned_revision(self._store.engine)
                if existing is not None:
                    command.stamp(cfg, existing)
            command.upgrade(cfg, "head")
            logger.info("Applied %d migration(s)", pending_count)
        except Exception as exc:
            return ServiceResult.failure(
                op,
                "MIGRATION_FAILED",
                f"Migration failed: {exc}. Backup at: {backup_path}",
                backup_path=str(backup_path) if backup_path else None,
            )

        # VALIDATE
        integrity = CheckService(self._store).check()
        if integrity.ok and integrity.data["count"] > 0:
            warnings.append(
                f"Post-migration check found {integrity.data['count']} non-dense board(s)"
            )

        data: dict[str, Any] = {
            "applied_count": pending_count,
            "current": check_result.data["head"],
        }
        if backup_path is not None:
            data["backup_path"] = str(backup_path)
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    def stamp_current(self) -> ServiceResult:
        """Stamp the database as at the current head (for fresh databases)."""
        op = "upgrade"

        try:
            cfg = build_config(self._store.settings.database_url)
            command.stamp(cfg, "head")
            head = head_revision(cfg)
        except Exception as exc:
            return ServiceResult.failure(op, "STAMP_FAILED", f"Failed to stamp database: {exc}")

        return ServiceResult(ok=True, op=op, data={"stamped": True, "current": head})
