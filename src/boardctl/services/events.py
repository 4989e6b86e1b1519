"""EventService — inspect and retry the plugin event write-ahead log."""

from __future__ import annotations

from sqlalchemy import func, select

from boardctl.infrastructure.database.schema import event_wal
from boardctl.services.base import BaseService
from boardctl.services.result import ServiceResult


class EventService(BaseService):
    """Operations on queued side-effect events."""

    def drain(self) -> ServiceResult:
        """Synchronously retry every pending or failed event."""
        bus = self._store.event_bus
        if bus is None:
            return ServiceResult(
                ok=True,
                op="events_drain",
                data={"drained": [], "count": 0},
                warnings=["Event bus is not initialized; nothing to drain"],
            )
        drained = bus.drain()
        return ServiceResult(
            ok=True,
            op="events_drain",
            data={"drained": drained, "count": len(drained)},
        )

    def status(self) -> ServiceResult:
        """Count WAL events per status."""
        with self._store.read() as reader:
            rows = reader.conn.execute(
                select(event_wal.c.status, func.count())
                .group_by(event_wal.c.status)
                .order_by(event_wal.c.status)
            ).fetchall()
        counts = {row[0]: row[1] for row in rows}
        return ServiceResult(
            ok=True,
            op="events_status",
            data={"counts": counts, "total": sum(counts.values())},
        )
