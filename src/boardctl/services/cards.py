"""CardService — create, list, fetch, edit, and delete cards.

A new card lands at the end of its board (``position = count``) unless a
position is requested, in which case it is appended and then moved into
place inside the same transaction. Deleting a card closes the gap it
leaves. Edits never touch position or board; boards stay dense across
every operation here.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from boardctl.domain.ids import generate_id
from boardctl.domain.ordering import compact, reconcile
from boardctl.infrastructure.database.schema import activity_logs, cards, users
from boardctl.services._helpers import clean_text, normalize_due_date, now_iso
from boardctl.services.access import AccessGate
from boardctl.services.base import BaseService
from boardctl.services.notifier import (
    EVENT_CARD_CREATED,
    EVENT_CARD_DELETED,
    EVENT_CARD_UPDATED,
)
from boardctl.services.result import CONFLICT, INVALID_INPUT, NOT_FOUND, ServiceResult
from boardctl.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from sqlalchemy import Row

DEFAULT_ACTIVITY_LIMIT = 10
MAX_ACTIVITY_LIMIT = 50


def card_to_dict(row: Row[Any]) -> dict[str, Any]:
    """Public representation of a card row."""
    return {
        "id": row.id,
        "board_id": row.board_id,
        "title": row.title,
        "description": row.description,
        "position": row.position,
        "completed": bool(row.completed),
        "due_date": row.due_date,
        "created": row.created,
        "modified": row.modified,
    }


def _bad_due_date(value: str | None) -> str:
    return f"Invalid due date '{value}'; expected an ISO 8601 date"


class CardService(BaseService):
    """Card lifecycle outside of relocation."""

    @traced
    def create_card(
        self,
        board_id: str,
        actor_id: str,
        title: str,
        *,
        description: str | None = None,
        due_date: str | None = None,
        position: int | None = None,
    ) -> ServiceResult:
        """Create a card on *board_id*, at the end or at *position*."""
        op = "create_card"
        warnings: list[str] = []

        # ── VALIDATE ──────────────────────────────────────────────
        clean_title = clean_text(title)
        if clean_title is None:
            return ServiceResult.failure(op, INVALID_INPUT, "Card title must not be empty")
        try:
            clean_due = normalize_due_date(due_date)
        except ValueError:
            return ServiceResult.failure(op, INVALID_INPUT, _bad_due_date(due_date))
        if not AccessGate(self._store).can_access_board(actor_id, board_id):
            return ServiceResult.failure(op, NOT_FOUND, f"No board found with ID '{board_id}'")

        # ── PERSIST ───────────────────────────────────────────────
        card_id = generate_id("card")
        stamp = now_iso()
        try:
            with self._store.transaction() as txn:
                txn.lock_boards([board_id])
                board = txn.get_board(board_id)
                if board is None:
                    return ServiceResult.failure(
                        op, NOT_FOUND, f"No board found with ID '{board_id}'"
                    )

                with trace_span("insert"):
                    final_position = txn.count_cards(board_id)
                    txn.conn.execute(
                        insert(cards).values(
                            id=card_id,
                            board_id=board_id,
                            title=clean_title,
                            description=clean_text(description),
                            position=final_position,
                            due_date=clean_due,
                            created=stamp,
                            modified=stamp,
                        )
                    )

                if position is not None:
                    with trace_span("place"):
                        plan = reconcile(
                            txn.list_ordered(board_id), card_id, board_id, board_id, position
                        )
                        txn.write_positions(plan.writes)
                        final_position = plan.position
                environment_id = board.environment_id
        except SQLAlchemyError as exc:
            return ServiceResult.failure(
                op,
                CONFLICT,
                f"Could not create card: {exc.__class__.__name__}",
                retryable=True,
            )

        # ── EVENT ─────────────────────────────────────────────────
        notifier = self._notifier
        warnings.extend(
            notifier.record_create(card_id, actor_id, board_id, clean_title, final_position)
        )
        warnings.extend(
            notifier.emit(
                environment_id,
                EVENT_CARD_CREATED,
                {"id": card_id, "board_id": board_id, "position": final_position},
            )
        )

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": card_id,
                "board_id": board_id,
                "title": clean_title,
                "position": final_position,
            },
            warnings=warnings,
        )

    def list_cards(self, board_id: str, actor_id: str) -> ServiceResult:
        """Cards on *board_id* in position order."""
        op = "list_cards"
        with self._store.read() as reader:
            if not reader.can_access_board(actor_id, board_id):
                return ServiceResult.failure(
                    op, NOT_FOUND, f"No board found with ID '{board_id}'"
                )
            rows = reader.list_cards(board_id)

        items = [card_to_dict(row) for row in rows]
        return ServiceResult(
            ok=True,
            op=op,
            data={"board_id": board_id, "items": items, "count": len(items)},
        )

    def get_card(self, card_id: str, actor_id: str) -> ServiceResult:
        op = "get_card"
        with self._store.read() as reader:
            row = reader.get_card(card_id)
            if row is None or not reader.can_access_board(actor_id, row.board_id):
                return ServiceResult.failure(
                    op, NOT_FOUND, f"No card found with ID '{card_id}'"
                )
        return ServiceResult(ok=True, op=op, data=card_to_dict(row))

    @traced
    def update_card(
        self,
        card_id: str,
        actor_id: str,
        *,
        title: str | None = None,
        description: str | None = None,
        due_date: str | None = None,
        completed: bool | None = None,
    ) -> ServiceResult:
        """Edit a card's title, description, due date, or completion flag.

        ``None`` leaves a field unchanged; an empty *description* or
        *due_date* clears it. Position and board are not editable here:
        those go through :class:`RelocationService` so boards stay dense.
        """
        op = "update_card"

        # ── VALIDATE ──────────────────────────────────────────────
        values: dict[str, Any] = {}
        if title is not None:
            clean_title = clean_text(title)
            if clean_title is None:
                return ServiceResult.failure(op, INVALID_INPUT, "Card title must not be empty")
            values["title"] = clean_title
        if description is not None:
            values["description"] = clean_text(description)
        if due_date is not None:
            try:
                values["due_date"] = normalize_due_date(due_date)
            except ValueError:
                return ServiceResult.failure(op, INVALID_INPUT, _bad_due_date(due_date))
        if completed is not None:
            values["completed"] = int(completed)
        if not values:
            return ServiceResult.failure(op, INVALID_INPUT, "Nothing to update")

        with self._store.read() as reader:
            row = reader.get_card(card_id)
            allowed = row is not None and reader.can_access_board(actor_id, row.board_id)
        if not allowed:
            return ServiceResult.failure(op, NOT_FOUND, f"No card found with ID '{card_id}'")

        # ── PERSIST ───────────────────────────────────────────────
        try:
            with self._store.transaction() as txn:
                result = txn.conn.execute(
                    update(cards).where(cards.c.id == card_id).values(**values, modified=now_iso())
                )
                if result.rowcount == 0:
                    return ServiceResult.failure(
                        op, NOT_FOUND, f"No card found with ID '{card_id}'"
                    )
                updated = txn.get_card(card_id)
                board = txn.get_board(updated.board_id)
        except SQLAlchemyError as exc:
            return ServiceResult.failure(
                op,
                CONFLICT,
                f"Could not update card '{card_id}': {exc.__class__.__name__}",
                retryable=True,
            )

        # ── EVENT ─────────────────────────────────────────────────
        fields = sorted(values)
        notifier = self._notifier
        warnings = notifier.record_update(card_id, actor_id, updated.board_id, fields)
        if board is not None:
            warnings.extend(
                notifier.emit(
                    board.environment_id,
                    EVENT_CARD_UPDATED,
                    {"id": card_id, "board_id": updated.board_id, "fields": fields},
                )
            )

        data = card_to_dict(updated)
        data["updated_fields"] = fields
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    def card_activity(
        self,
        card_id: str,
        actor_id: str,
        *,
        limit: int = DEFAULT_ACTIVITY_LIMIT,
        cursor: int | None = None,
    ) -> ServiceResult:
        """Audit entries for *card_id*, newest first.

        Pages are at most :data:`MAX_ACTIVITY_LIMIT` entries. Pass the
        previous page's ``next_cursor`` as *cursor* to continue; it is None
        on the last page.
        """
        op = "card_activity"
        limit = max(1, min(limit, MAX_ACTIVITY_LIMIT))

        with self._store.read() as reader:
            row = reader.get_card(card_id)
            if row is None or not reader.can_access_board(actor_id, row.board_id):
                return ServiceResult.failure(
                    op, NOT_FOUND, f"No card found with ID '{card_id}'"
                )
            query = (
                select(activity_logs, users.c.name.label("user_name"))
                .select_from(
                    activity_logs.outerjoin(users, users.c.id == activity_logs.c.user_id)
                )
                .where(activity_logs.c.card_id == card_id)
                .order_by(activity_logs.c.id.desc())
                .limit(limit + 1)
            )
            if cursor is not None:
                query = query.where(activity_logs.c.id < cursor)
            rows = reader.conn.execute(query).fetchall()

        page = rows[:limit]
        items = [
            {
                "id": entry.id,
                "action": entry.action,
                "user_id": entry.user_id,
                "user_name": entry.user_name,
                "details": json.loads(entry.details) if entry.details else {},
                "created": entry.created,
            }
            for entry in page
        ]
        next_cursor = items[-1]["id"] if len(rows) > limit else None
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "card_id": card_id,
                "items": items,
                "count": len(items),
                "next_cursor": next_cursor,
            },
        )

    @traced
    def delete_card(self, card_id: str, actor_id: str) -> ServiceResult:
        """Delete *card_id* and shift every later card on its board down one."""
        op = "delete_card"

        with self._store.read() as reader:
            row = reader.get_card(card_id)
            allowed = row is not None and reader.can_access_board(actor_id, row.board_id)
        if row is None or not allowed:
            return ServiceResult.failure(op, NOT_FOUND, f"No card found with ID '{card_id}'")

        try:
            with self._store.transaction() as txn:
                current = txn.lock_card(card_id)
                if current is None:
                    return ServiceResult.failure(
                        op, NOT_FOUND, f"No card found with ID '{card_id}'"
                    )
                board_id: str = current.board_id

                txn.conn.execute(delete(cards).where(cards.c.id == card_id))
                with trace_span("compact"):
                    shifted = txn.write_positions(compact(txn.list_ordered(board_id), board_id))
                board = txn.get_board(board_id)
        except SQLAlchemyError as exc:
            return ServiceResult.failure(
                op,
                CONFLICT,
                f"Could not delete card '{card_id}': {exc.__class__.__name__}",
                retryable=True,
            )

        warnings: list[str] = []
        notifier = self._notifier
        warnings.extend(notifier.record_delete(card_id, actor_id, board_id))
        if board is not None:
            warnings.extend(
                notifier.emit(
                    board.environment_id,
                    EVENT_CARD_DELETED,
                    {"id": card_id, "board_id": board_id},
                )
            )

        return ServiceResult(
            ok=True,
            op=op,
            data={"id": card_id, "board_id": board_id, "shifted": shifted},
            warnings=warnings,
        )
