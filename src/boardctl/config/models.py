"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, boardctl.toml only contains overrides.
A fresh deployment needs no config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- boardctl.toml sections ---


class DatabaseConfig(BaseModel):
    """[database] section.

    ``url`` left empty resolves to ``{root}/.boardctl/boardctl.db``.
    """

    model_config = {"frozen": True}

    url: str = ""
    busy_timeout: float = 30.0
    echo: bool = False


class EventsConfig(BaseModel):
    """[events] section."""

    model_config = {"frozen": True}

    max_workers: int = 2
    max_retries: int = 3


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    activity_log: bool = True
    local_dir: str = ".boardctl/plugins"
