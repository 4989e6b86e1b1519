"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``. Opens the Store lazily and routes results to
stdout/stderr with the right exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from boardctl.config.logging import configure_logging
from boardctl.output.formatters import OutputSettings, format_result
from boardctl.services.telemetry import enable_telemetry

if TYPE_CHECKING:
    from boardctl.config.settings import BoardSettings
    from boardctl.infrastructure.store import Store
    from boardctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The store is created on first use so ``--help`` and ``--version``
    never touch the database.
    """

    def __init__(self, settings: BoardSettings) -> None:
        self.settings = settings
        self._store: Store | None = None

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        if settings.verbose:
            enable_telemetry()

    @property
    def store(self) -> Store:
        """The store instance (created lazily on first access)."""
        if self._store is None:
            from boardctl.infrastructure.store import Store

            self._store = Store(self.settings)
            self._store.init_event_bus(sync=self.settings.sync)
        return self._store

    def close(self) -> None:
        """Wait for queued side effects and release the database."""
        if self._store is not None:
            self._store.close()
            self._store = None

    def emit(self, result: ServiceResult) -> None:
        """Print a ServiceResult; exit 1 on failure.

        Success goes to stdout with warnings on stderr, so piped output stays
        clean. Failure goes to stderr.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # JSON output already carries the warnings.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
