"""Command group: plugin event write-ahead log."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from boardctl.commands._base import BoardGroup
from boardctl.services.events import EventService

if TYPE_CHECKING:
    from boardctl.commands._context import AppContext


@click.group(cls=BoardGroup)
def events() -> None:
    """Inspect and retry queued side-effect events."""


@events.command(examples="  boardctl events drain\n  boardctl --json events drain")
@click.pass_obj
def drain(app: AppContext) -> None:
    """Retry pending and failed events synchronously."""
    app.emit(EventService(app.store).drain())


@events.command()
@click.pass_obj
def status(app: AppContext) -> None:
    """Count events per status."""
    app.emit(EventService(app.store).status())
