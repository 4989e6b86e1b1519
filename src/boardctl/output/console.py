"""Rich Console factory and theme for boardctl output.

Consoles render into a StringIO buffer so every renderer keeps the
``format_result() -> str`` contract. Outside a terminal (tests, pipes)
Rich drops the color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

BOARD_THEME = Theme(
    {
        "board.ok": "bold green",
        "board.error": "bold red",
        "board.warning": "bold yellow",
        "board.op": "bold cyan",
        "board.key": "dim",
        "board.id": "bold blue",
        "board.title": "bold",
        "board.position": "magenta",
        "board.done": "green",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=BOARD_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
