"""Command: database schema migration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from boardctl.commands._base import BoardCommand

if TYPE_CHECKING:
    from boardctl.commands._context import AppContext


@click.command(
    cls=BoardCommand,
    examples="""\
  boardctl upgrade
  boardctl upgrade --check
  boardctl --json upgrade --check""",
)
@click.option(
    "--check", "check_only", is_flag=True, help="Show pending migrations without applying."
)
@click.pass_obj
def upgrade(app: AppContext, check_only: bool) -> None:
    """Run pending database migrations."""
    from boardctl.services.upgrade import UpgradeService

    svc = UpgradeService(app.store)
    app.emit(svc.check_pending() if check_only else svc.apply())
