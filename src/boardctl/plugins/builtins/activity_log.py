"""Built-in audit trail: one ``activity_logs`` row per card lifecycle event."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from sqlalchemy import insert

from boardctl.infrastructure.database.engine import begin_write
from boardctl.infrastructure.database.schema import activity_logs
from boardctl.plugins.hookspecs import hookimpl
from boardctl.services._helpers import now_iso

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


class ActivityLogPlugin:
    """Records CREATED / MOVED / UPDATED / DELETED entries for each card."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @hookimpl
    def post_card_create(
        self,
        card_id: str,
        actor_id: str,
        board_id: str,
        title: str,
        position: int,
    ) -> None:
        self._log(
            card_id,
            actor_id,
            "CREATED",
            {"board_id": board_id, "title": title, "position": position},
        )

    @hookimpl
    def post_card_move(
        self,
        card_id: str,
        actor_id: str,
        from_board_id: str,
        to_board_id: str,
        new_position: int,
    ) -> None:
        self._log(
            card_id,
            actor_id,
            "MOVED",
            {
                "from_board_id": from_board_id,
                "to_board_id": to_board_id,
                "new_position": new_position,
            },
        )

    @hookimpl
    def post_card_update(
        self, card_id: str, actor_id: str, board_id: str, fields: list[str]
    ) -> None:
        self._log(card_id, actor_id, "UPDATED", {"board_id": board_id, "fields": fields})

    @hookimpl
    def post_card_delete(self, card_id: str, actor_id: str, board_id: str) -> None:
        self._log(card_id, actor_id, "DELETED", {"board_id": board_id})

    def _log(self, card_id: str, actor_id: str, action: str, details: dict[str, Any]) -> None:
        with begin_write(self._engine) as conn:
            conn.execute(
                insert(activity_logs).values(
                    card_id=card_id,
                    user_id=actor_id,
                    action=action,
                    details=json.dumps(details),
                    created=now_iso(),
                )
            )
