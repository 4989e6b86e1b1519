"""Options shared across command groups."""

from __future__ import annotations

import click

ACTOR_ENV_VAR = "BOARDCTL_ACTOR"

actor_option = click.option(
    "--actor",
    "actor_id",
    required=True,
    envvar=ACTOR_ENV_VAR,
    show_envvar=True,
    help="User ID performing the action.",
)
