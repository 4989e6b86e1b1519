"""Command group: boards."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from boardctl.commands._base import BoardGroup
from boardctl.commands._options import actor_option
from boardctl.services.workspace import WorkspaceService

if TYPE_CHECKING:
    from boardctl.commands._context import AppContext

_BOARD_EXAMPLES = """\
  boardctl board create env_0a1b2c3d4e5f Backlog --actor usr_1234567890ab
  boardctl board create env_0a1b2c3d4e5f Doing --description 'Work in progress'
  boardctl board list env_0a1b2c3d4e5f --actor usr_1234567890ab
  boardctl board delete brd_0a1b2c3d4e5f --yes --actor usr_1234567890ab"""


@click.group(cls=BoardGroup, examples=_BOARD_EXAMPLES)
def board() -> None:
    """Manage boards."""


@board.command(
    examples="""\
  boardctl board create env_0a1b2c3d4e5f Backlog --actor usr_1234567890ab
  boardctl board create env_0a1b2c3d4e5f Doing --description 'Work in progress'"""
)
@click.argument("environment_id")
@click.argument("name")
@actor_option
@click.option("--description", default=None, help="Board description.")
@click.pass_obj
def create(
    app: AppContext,
    environment_id: str,
    name: str,
    actor_id: str,
    description: str | None,
) -> None:
    """Create a board in ENVIRONMENT_ID (owner only)."""
    app.emit(
        WorkspaceService(app.store).create_board(
            environment_id, name, actor_id, description=description
        )
    )


@board.command("list", examples="  boardctl board list env_0a1b2c3d4e5f --actor usr_1234567890ab")
@click.argument("environment_id")
@actor_option
@click.pass_obj
def list_cmd(app: AppContext, environment_id: str, actor_id: str) -> None:
    """List ENVIRONMENT_ID's boards in order."""
    app.emit(WorkspaceService(app.store).list_boards(environment_id, actor_id))


@board.command(
    examples="""\
  boardctl board update brd_0a1b2c3d4e5f --name Backlog --actor usr_1234567890ab
  boardctl board update brd_0a1b2c3d4e5f --description ''"""
)
@click.argument("board_id")
@actor_option
@click.option("--name", default=None, help="New board name.")
@click.option("--description", default=None, help="New description ('' clears it).")
@click.pass_obj
def update(
    app: AppContext,
    board_id: str,
    actor_id: str,
    name: str | None,
    description: str | None,
) -> None:
    """Rename a board or change its description (owner only)."""
    app.emit(
        WorkspaceService(app.store).update_board(
            board_id, actor_id, name=name, description=description
        )
    )


@board.command(examples="  boardctl board delete brd_0a1b2c3d4e5f --yes --actor usr_1234567890ab")
@click.argument("board_id")
@actor_option
@click.confirmation_option(prompt="Delete this board and all of its cards?")
@click.pass_obj
def delete(app: AppContext, board_id: str, actor_id: str) -> None:
    """Delete a board and every card on it (owner only)."""
    app.emit(WorkspaceService(app.store).delete_board(board_id, actor_id))
