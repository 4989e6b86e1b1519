"""Pluggy hook specifications for card lifecycle side effects.

All hooks run after the owning transaction has committed, dispatched
asynchronously through the event bus. Audit plugins implement the
``post_card_*`` hooks; realtime transports implement ``publish_event``.
"""

from __future__ import annotations

from typing import Any

import pluggy

hookspec = pluggy.HookspecMarker("boardctl")
hookimpl = pluggy.HookimplMarker("boardctl")


class BoardctlHookSpec:
    """Hook specifications for the boardctl plugin system."""

    @hookspec
    def post_card_create(
        self,
        card_id: str,
        actor_id: str,
        board_id: str,
        title: str,
        position: int,
    ) -> None:
        """Called after a card is created."""

    @hookspec
    def post_card_move(
        self,
        card_id: str,
        actor_id: str,
        from_board_id: str,
        to_board_id: str,
        new_position: int,
    ) -> None:
        """Called after a relocation commits."""

    @hookspec
    def post_card_update(
        self,
        card_id: str,
        actor_id: str,
        board_id: str,
        fields: list[str],
    ) -> None:
        """Called after a card's title, description, due date or completion changes."""

    @hookspec
    def post_card_delete(
        self,
        card_id: str,
        actor_id: str,
        board_id: str,
    ) -> None:
        """Called after a card is deleted."""

    @hookspec
    def publish_event(
        self,
        channel: str,
        event: str,
        payload: dict[str, Any],
    ) -> None:
        """Deliver a logical event to subscribers of *channel* (``env_<id>``)."""
