"""Command group: users."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from boardctl.commands._base import BoardGroup
from boardctl.services.workspace import WorkspaceService

if TYPE_CHECKING:
    from boardctl.commands._context import AppContext


@click.group(cls=BoardGroup)
def user() -> None:
    """Manage users."""


@user.command(examples='  boardctl user create "Ada Lovelace" --email ada@example.com')
@click.argument("name")
@click.option("--email", default=None, help="Unique email address.")
@click.pass_obj
def create(app: AppContext, name: str, email: str | None) -> None:
    """Create a user."""
    app.emit(WorkspaceService(app.store).create_user(name, email=email))
