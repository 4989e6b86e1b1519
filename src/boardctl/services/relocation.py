"""RelocationService — move a card within or across boards.

Pipeline: LOAD → AUTHORIZE → LOCK → RECONCILE → WRITE → COMMIT → NOTIFY

Everything between LOCK and COMMIT runs in one store transaction, so the
lists the reconciler sees are the lists its writes land on. A concurrent
relocation either commits before our lock (and we reconcile against its
result, wherever it left the card) or waits for our commit. Nobody is
rejected for losing the race.

INVARIANT: Every board touched by a committed relocation is dense.
"""

from __future__ import annotations

from typing import Any, NamedTuple

import structlog
from sqlalchemy.exc import SQLAlchemyError

from boardctl.domain.ordering import MovePlan, reconcile
from boardctl.services.access import AccessGate
from boardctl.services.base import BaseService
from boardctl.services.result import CONFLICT, NOT_FOUND, ServiceResult
from boardctl.services.telemetry import trace_span, traced

log = structlog.get_logger(__name__)


class _CardVanished(Exception):
    """The card or its target board was deleted between authorization and lock."""


class _Applied(NamedTuple):
    plan: MovePlan
    source_board_id: str
    environment_id: str


class RelocationService(BaseService):
    """Atomic card relocation with dense-position reconciliation."""

    @traced
    def relocate(
        self,
        card_id: str,
        actor_id: str,
        target_board_id: str,
        new_position: int,
    ) -> ServiceResult:
        """Move *card_id* to *new_position* on *target_board_id*.

        *new_position* is zero-based and clamped into range. Returns the
        card's final ``{id, board_id, position}``. Missing cards and boards
        the actor cannot reach both come back as ``NOT_FOUND``; a failed
        commit comes back as ``CONFLICT`` and may be retried.
        """
        op = "relocate"

        with trace_span("load"), self._store.read() as reader:
            card = reader.get_card(card_id)
        if card is None:
            return ServiceResult.failure(op, NOT_FOUND, f"No card found with ID '{card_id}'")

        with trace_span("authorize"):
            allowed = AccessGate(self._store).can_access_boards(
                actor_id, card.board_id, target_board_id
            )
        if not allowed:
            log.info(
                "card.relocate_denied",
                card_id=card_id,
                actor_id=actor_id,
                target_board_id=target_board_id,
            )
            return ServiceResult.failure(op, NOT_FOUND, f"No card found with ID '{card_id}'")

        try:
            applied = self._apply(card_id, target_board_id, new_position)
        except _CardVanished:
            return ServiceResult.failure(op, NOT_FOUND, f"No card found with ID '{card_id}'")
        except SQLAlchemyError as exc:
            log.warning(
                "card.relocate_failed",
                card_id=card_id,
                actor_id=actor_id,
                target_board_id=target_board_id,
                error=str(exc),
            )
            return ServiceResult.failure(
                op,
                CONFLICT,
                f"Could not relocate card '{card_id}': {exc.__class__.__name__}",
                retryable=True,
            )

        plan = applied.plan
        log.info(
            "card.relocated",
            card_id=card_id,
            actor_id=actor_id,
            from_board_id=applied.source_board_id,
            to_board_id=plan.board_id,
            position=plan.position,
            writes=len(plan.writes),
        )

        with trace_span("notify"):
            warnings = self._notify(
                plan, actor_id, applied.source_board_id, applied.environment_id
            )

        return ServiceResult(
            ok=True,
            op=op,
            data={"id": plan.card_id, "board_id": plan.board_id, "position": plan.position},
            warnings=warnings,
            meta={"writes": len(plan.writes)},
        )

    def _apply(self, card_id: str, target_board_id: str, new_position: int) -> _Applied:
        """Reconcile and write inside one transaction."""
        with self._store.transaction() as txn:
            with trace_span("lock"):
                current = txn.lock_card(card_id, target_board_id)
            if current is None:
                raise _CardVanished(card_id)
            source_board_id: str = current.board_id

            with trace_span("read"):
                source = txn.list_ordered(source_board_id)
                destination = (
                    txn.list_ordered(target_board_id)
                    if target_board_id != source_board_id
                    else None
                )
                target_board = txn.get_board(target_board_id)
            if target_board is None:
                raise _CardVanished(card_id)

            with trace_span("reconcile"):
                plan = reconcile(
                    source,
                    card_id,
                    source_board_id,
                    target_board_id,
                    new_position,
                    destination,
                )

            with trace_span("write") as span:
                written = txn.write_positions(plan.writes)
                if span is not None:
                    span.annotate("rows", written)

        return _Applied(plan, source_board_id, target_board.environment_id)

    def _notify(
        self,
        plan: MovePlan,
        actor_id: str,
        source_board_id: str,
        environment_id: str,
    ) -> list[str]:
        notifier = self._notifier
        warnings = notifier.record_move(
            plan.card_id, actor_id, source_board_id, plan.board_id, plan.position
        )
        payload: dict[str, Any] = {
            "id": plan.card_id,
            "board_id": plan.board_id,
            "position": plan.position,
            "from_board_id": source_board_id,
            "actor_id": actor_id,
        }
        warnings.extend(notifier.emit_moved(environment_id, payload))
        return warnings
