"""Command: card ordering integrity check and repair."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from boardctl.commands._base import BoardCommand

if TYPE_CHECKING:
    from boardctl.commands._context import AppContext


@click.command(
    cls=BoardCommand,
    examples="""\
  boardctl check
  boardctl check --fix
  boardctl --json check""",
)
@click.option("--fix", is_flag=True, help="Compact boards with gaps or duplicate positions.")
@click.pass_obj
def check(app: AppContext, fix: bool) -> None:
    """Check that every board's positions are dense."""
    from boardctl.services.check import CheckService

    svc = CheckService(app.store)
    app.emit(svc.fix() if fix else svc.check())
