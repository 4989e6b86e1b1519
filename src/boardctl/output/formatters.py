"""Adapt a ServiceResult to the requested output mode.

Three modes, picked from the global CLI flags: JSON for machines
(``--json``), bare ids for scripts (``-q``), and Rich text for people.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from boardctl.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from boardctl.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    """Output switches resolved from the CLI flags."""

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
