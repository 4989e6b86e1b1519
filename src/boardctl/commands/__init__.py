"""Subcommand modules for boardctl.

:func:`register_commands` imports each module only when the root group is
built, keeping ``boardctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from boardctl.commands.board import board
    from boardctl.commands.card import card
    from boardctl.commands.env import env
    from boardctl.commands.events import events
    from boardctl.commands.user import user

    cli.add_command(user)
    cli.add_command(env)
    cli.add_command(board)
    cli.add_command(card)
    cli.add_command(events)

    # --- Standalone commands ---
    from boardctl.commands.check import check
    from boardctl.commands.upgrade import upgrade

    cli.add_command(check)
    cli.add_command(upgrade)
