"""Command group: card lifecycle and relocation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from boardctl.commands._base import BoardGroup
from boardctl.commands._options import actor_option
from boardctl.services.cards import DEFAULT_ACTIVITY_LIMIT, MAX_ACTIVITY_LIMIT, CardService
from boardctl.services.relocation import RelocationService

if TYPE_CHECKING:
    from boardctl.commands._context import AppContext

_CARD_EXAMPLES = """\
  boardctl card create brd_0a1b2c3d4e5f "Write release notes" --actor usr_1234567890ab
  boardctl card list brd_0a1b2c3d4e5f --actor usr_1234567890ab
  boardctl card move crd_00ff00ff00ff --position 0 --actor usr_1234567890ab
  boardctl card move crd_00ff00ff00ff --board brd_99aa99aa99aa --position 2
  boardctl card update crd_00ff00ff00ff --done --actor usr_1234567890ab
  boardctl card log crd_00ff00ff00ff --actor usr_1234567890ab
  boardctl card delete crd_00ff00ff00ff --actor usr_1234567890ab"""


@click.group(cls=BoardGroup, examples=_CARD_EXAMPLES)
def card() -> None:
    """Create, list, edit, move, and delete cards."""


@card.command(
    examples="""\
  boardctl card create brd_0a1b2c3d4e5f "Fix login bug" --actor usr_1234567890ab
  boardctl card create brd_0a1b2c3d4e5f "Hotfix" --position 0 --due 2026-11-01"""
)
@click.argument("board_id")
@click.argument("title")
@actor_option
@click.option("--description", default=None, help="Card description.")
@click.option("--due", "due_date", default=None, help="Due date (ISO 8601).")
@click.option(
    "--position",
    type=int,
    default=None,
    help="Zero-based slot; defaults to the end of the board.",
)
@click.pass_obj
def create(
    app: AppContext,
    board_id: str,
    title: str,
    actor_id: str,
    description: str | None,
    due_date: str | None,
    position: int | None,
) -> None:
    """Create a card on BOARD_ID."""
    app.emit(
        CardService(app.store).create_card(
            board_id,
            actor_id,
            title,
            description=description,
            due_date=due_date,
            position=position,
        )
    )


@card.command("list", examples="  boardctl card list brd_0a1b2c3d4e5f --actor usr_1234567890ab")
@click.argument("board_id")
@actor_option
@click.pass_obj
def list_cmd(app: AppContext, board_id: str, actor_id: str) -> None:
    """List a board's cards in order."""
    app.emit(CardService(app.store).list_cards(board_id, actor_id))


@card.command(examples="  boardctl card show crd_00ff00ff00ff --actor usr_1234567890ab")
@click.argument("card_id")
@actor_option
@click.pass_obj
def show(app: AppContext, card_id: str, actor_id: str) -> None:
    """Show one card."""
    app.emit(CardService(app.store).get_card(card_id, actor_id))


@card.command(
    examples="""\
  boardctl card move crd_00ff00ff00ff --position 0
  boardctl card move crd_00ff00ff00ff --board brd_99aa99aa99aa --position 99"""
)
@click.argument("card_id")
@actor_option
@click.option(
    "--board",
    "target_board_id",
    default=None,
    help="Destination board; defaults to the card's current board.",
)
@click.option(
    "--position",
    type=int,
    required=True,
    help="Zero-based destination slot (clamped into range).",
)
@click.pass_obj
def move(
    app: AppContext,
    card_id: str,
    actor_id: str,
    target_board_id: str | None,
    position: int,
) -> None:
    """Move a card within its board or onto another board."""
    if target_board_id is None:
        current = CardService(app.store).get_card(card_id, actor_id)
        if not current.ok:
            app.emit(current)
            return
        target_board_id = current.data["board_id"]
    app.emit(RelocationService(app.store).relocate(card_id, actor_id, target_board_id, position))


@card.command(
    examples="""\
  boardctl card update crd_00ff00ff00ff --title "Fix signup bug" --actor usr_1234567890ab
  boardctl card update crd_00ff00ff00ff --due 2026-12-01 --done
  boardctl card update crd_00ff00ff00ff --description '' --due ''"""
)
@click.argument("card_id")
@actor_option
@click.option("--title", default=None, help="New title.")
@click.option("--description", default=None, help="New description ('' clears it).")
@click.option("--due", "due_date", default=None, help="Due date, ISO 8601 ('' clears it).")
@click.option("--done/--not-done", "completed", default=None, help="Mark complete or reopen.")
@click.pass_obj
def update(
    app: AppContext,
    card_id: str,
    actor_id: str,
    title: str | None,
    description: str | None,
    due_date: str | None,
    completed: bool | None,
) -> None:
    """Edit a card's details. Use 'card move' to change its position."""
    app.emit(
        CardService(app.store).update_card(
            card_id,
            actor_id,
            title=title,
            description=description,
            due_date=due_date,
            completed=completed,
        )
    )


@card.command(
    examples="""\
  boardctl card log crd_00ff00ff00ff --actor usr_1234567890ab
  boardctl card log crd_00ff00ff00ff --limit 20 --cursor 41"""
)
@click.argument("card_id")
@actor_option
@click.option(
    "--limit",
    type=click.IntRange(1, MAX_ACTIVITY_LIMIT, clamp=True),
    default=DEFAULT_ACTIVITY_LIMIT,
    show_default=True,
    help="Entries per page.",
)
@click.option("--cursor", type=int, default=None, help="Continue after this entry id.")
@click.pass_obj
def log(app: AppContext, card_id: str, actor_id: str, limit: int, cursor: int | None) -> None:
    """Show a card's activity, newest first."""
    app.emit(CardService(app.store).card_activity(card_id, actor_id, limit=limit, cursor=cursor))


@card.command(examples="  boardctl card delete crd_00ff00ff00ff --actor usr_1234567890ab")
@click.argument("card_id")
@actor_option
@click.pass_obj
def delete(app: AppContext, card_id: str, actor_id: str) -> None:
    """Delete a card and close the gap it leaves."""
    app.emit(CardService(app.store).delete_card(card_id, actor_id))
