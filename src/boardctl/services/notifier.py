"""Post-commit side effects: audit entries and realtime events.

Everything here runs after the owning transaction has committed and goes
through the plugin event bus, which returns as soon as the event is in the
WAL. Nothing a notifier does can undo or delay the operation that triggered
it.

INVARIANT: Plugin failures are warnings, never errors.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from boardctl.plugins.event_bus import EventBus

logger = logging.getLogger(__name__)

EVENT_CARD_CREATED = "cardCreated"
EVENT_CARD_MOVED = "cardMoved"
EVENT_CARD_UPDATED = "cardUpdated"
EVENT_CARD_DELETED = "cardDeleted"
EVENT_BOARD_DELETED = "boardDeleted"


def environment_channel(environment_id: str) -> str:
    """Realtime channel name for everyone watching *environment_id*."""
    return f"env_{environment_id}"


class SideEffectNotifier:
    """Fire-and-forget audit and event emission over the event bus.

    Each method returns the warnings it produced (empty on success). With no
    event bus configured every call is a no-op.
    """

    def __init__(self, event_bus: EventBus | None) -> None:
        self._bus = event_bus

    def record_move(
        self,
        card_id: str,
        actor_id: str,
        from_board_id: str,
        to_board_id: str,
        new_position: int,
    ) -> list[str]:
        """Audit entry for a committed relocation."""
        return self._dispatch(
            "post_card_move",
            {
                "card_id": card_id,
                "actor_id": actor_id,
                "from_board_id": from_board_id,
                "to_board_id": to_board_id,
                "new_position": new_position,
            },
        )

    def emit_moved(self, environment_id: str, payload: dict[str, Any]) -> list[str]:
        """``cardMoved`` on the environment's channel."""
        return self.emit(environment_id, EVENT_CARD_MOVED, payload)

    def record_create(
        self,
        card_id: str,
        actor_id: str,
        board_id: str,
        title: str,
        position: int,
    ) -> list[str]:
        return self._dispatch(
            "post_card_create",
            {
                "card_id": card_id,
                "actor_id": actor_id,
                "board_id": board_id,
                "title": title,
                "position": position,
            },
        )

    def record_update(
        self, card_id: str, actor_id: str, board_id: str, fields: list[str]
    ) -> list[str]:
        return self._dispatch(
            "post_card_update",
            {"card_id": card_id, "actor_id": actor_id, "board_id": board_id, "fields": fields},
        )

    def record_delete(self, card_id: str, actor_id: str, board_id: str) -> list[str]:
        return self._dispatch(
            "post_card_delete",
            {"card_id": card_id, "actor_id": actor_id, "board_id": board_id},
        )

    def emit(self, environment_id: str, event: str, payload: dict[str, Any]) -> list[str]:
        """Publish *event* to every subscriber of the environment."""
        return self._dispatch(
            "publish_event",
            {
                "channel": environment_channel(environment_id),
                "event": event,
                "payload": payload,
            },
        )

    def _dispatch(self, hook_name: str, payload: dict[str, Any]) -> list[str]:
        if self._bus is None:
            return []
        try:
            self._bus.dispatch(hook_name, payload)
        except Exception:
            logger.warning("Event dispatch failed for %s", hook_name, exc_info=True)
            return [f"Event dispatch failed for {hook_name}"]
        return []
