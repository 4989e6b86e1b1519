"""WAL-backed async event dispatch via pluggy + ThreadPoolExecutor.

Every side effect of a committed card operation (audit entry, realtime
event) goes through here. The event is written to ``event_wal`` first, then
the hook runs on a worker thread; the caller never waits for it. ``drain()``
retries anything still pending or failed.

INVARIANT: Plugin failures are warnings, never errors.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

from sqlalchemy import insert, select, update

from boardctl.infrastructure.database.engine import begin_write
from boardctl.infrastructure.database.schema import event_wal
from boardctl.services._helpers import now_iso

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from boardctl.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class EventBus:
    """WAL-backed async event dispatch.

    Parameters:
        engine: SQLAlchemy engine with the ``event_wal`` table.
        plugin_manager: Loaded PluginManager for hook dispatch.
        sync: Run hooks inline (tests, ``--sync``).
        max_retries: Attempts before an event is marked ``dead_letter``.
        max_workers: ThreadPoolExecutor worker count.
    """

    def __init__(
        self,
        engine: Engine,
        plugin_manager: PluginManager,
        *,
        sync: bool = False,
        max_retries: int = 3,
        max_workers: int = 2,
    ) -> None:
        self._engine = engine
        self._pm = plugin_manager
        self._sync = sync
        self._max_retries = max_retries
        self._executor: ThreadPoolExecutor | None = (
            None if sync else ThreadPoolExecutor(max_workers=max_workers)
        )
        self._futures: list[Future[None]] = []

    @property
    def plugin_manager(self) -> PluginManager:
        return self._pm

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def dispatch(self, hook_name: str, payload: dict[str, Any]) -> int:
        """Write the event to the WAL, then run its hook without waiting.

        Returns the WAL event row id.
        """
        event_id = self._write_wal(hook_name, payload)

        if self._executor is None:
            self._execute_hook(event_id, hook_name, payload)
        else:
            future = self._executor.submit(self._execute_hook, event_id, hook_name, payload)
            self._futures.append(future)

        return event_id

    def wait(self, timeout: float = 30.0) -> None:
        """Block until every in-flight hook has finished."""
        for future in self._futures:
            try:
                future.result(timeout=timeout)
            except Exception:
                logger.debug("In-flight hook did not finish cleanly", exc_info=True)
        self._futures.clear()

    def drain(self) -> list[dict[str, Any]]:
        """Retry pending/failed events synchronously.

        Returns a summary list of ``{id, hook_name, status}`` for each retried event.
        """
        self.wait()

        with self._engine.connect() as conn:
            rows = conn.execute(
                select(event_wal.c.id, event_wal.c.hook_name, event_wal.c.payload)
                .where(event_wal.c.status.in_(["pending", "failed"]))
                .order_by(event_wal.c.id)
            ).fetchall()

        results: list[dict[str, Any]] = []
        for row in rows:
            self._execute_hook(row.id, row.hook_name, json.loads(row.payload))
            with self._engine.connect() as conn:
                status = conn.execute(
                    select(event_wal.c.status).where(event_wal.c.id == row.id)
                ).scalar_one()
            results.append({"id": row.id, "hook_name": row.hook_name, "status": status})

        return results

    def shutdown(self) -> None:
        """Wait for in-flight hooks, then stop the executor."""
        self.wait()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _write_wal(self, hook_name: str, payload: dict[str, Any]) -> int:
        """Insert a pending event into the WAL. Returns the row id."""
        with begin_write(self._engine) as conn:
            result = conn.execute(
                insert(event_wal).values(
                    hook_name=hook_name,
                    payload=json.dumps(payload),
                    status="pending",
                    retries=0,
                    created=now_iso(),
                )
            )
            event_id = result.inserted_primary_key[0]
            assert event_id is not None
            return int(event_id)

    def _execute_hook(self, event_id: int, hook_name: str, payload: dict[str, Any]) -> None:
        """Run one hook and record the outcome in the WAL."""
        hook_fn = getattr(self._pm.hook, hook_name, None)
        if hook_fn is None:
            self._mark_completed(event_id)
            return

        try:
            hook_fn(**payload)
        except Exception as exc:
            logger.warning("Hook %s failed for event %s: %s", hook_name, event_id, exc)
            self._mark_failed(event_id, str(exc))
        else:
            self._mark_completed(event_id)

    def _mark_completed(self, event_id: int) -> None:
        with begin_write(self._engine) as conn:
            conn.execute(
                update(event_wal)
                .where(event_wal.c.id == event_id)
                .values(status="completed", completed=now_iso())
            )

    def _mark_failed(self, event_id: int, error: str) -> None:
        """Increment retries; mark ``failed``, or ``dead_letter`` once exhausted."""
        with begin_write(self._engine) as conn:
            retries = conn.execute(
                select(event_wal.c.retries).where(event_wal.c.id == event_id)
            ).scalar_one()

            new_retries = retries + 1
            new_status = "dead_letter" if new_retries >= self._max_retries else "failed"

            conn.execute(
                update(event_wal)
                .where(event_wal.c.id == event_id)
                .values(
                    status=new_status,
                    error=error,
                    retries=new_retries,
                    completed=now_iso() if new_status == "dead_letter" else None,
                )
            )
