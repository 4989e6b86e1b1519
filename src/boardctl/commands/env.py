"""Command group: environments and membership."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from boardctl.commands._base import BoardGroup
from boardctl.commands._options import actor_option
from boardctl.services.workspace import WorkspaceService

if TYPE_CHECKING:
    from boardctl.commands._context import AppContext

_ENV_EXAMPLES = """\
  boardctl env create "Product Team" --owner usr_1234567890ab
  boardctl env list --actor usr_1234567890ab
  boardctl env add-member env_0a1b2c3d4e5f usr_ba0987654321 --actor usr_1234567890ab"""


@click.group(cls=BoardGroup, examples=_ENV_EXAMPLES)
def env() -> None:
    """Manage environments (workspaces)."""


@env.command()
@click.argument("name")
@click.option("--owner", "owner_id", required=True, help="User ID of the owner.")
@click.pass_obj
def create(app: AppContext, name: str, owner_id: str) -> None:
    """Create an environment owned by --owner."""
    app.emit(WorkspaceService(app.store).create_environment(name, owner_id))


@env.command("list", examples="  boardctl env list --actor usr_1234567890ab")
@actor_option
@click.pass_obj
def list_cmd(app: AppContext, actor_id: str) -> None:
    """List the environments you own or belong to."""
    app.emit(WorkspaceService(app.store).list_environments(actor_id))


@env.command("add-member")
@click.argument("environment_id")
@click.argument("user_id")
@actor_option
@click.pass_obj
def add_member(app: AppContext, environment_id: str, user_id: str, actor_id: str) -> None:
    """Add USER_ID to ENVIRONMENT_ID (owner only)."""
    app.emit(WorkspaceService(app.store).add_member(environment_id, user_id, actor_id))
