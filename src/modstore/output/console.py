"""Rich Console factory and theme for modstore output.

Consoles render into a StringIO buffer so every renderer keeps the
``format_result() -> str`` contract. Rich drops color codes on its own
when the output is not a terminal (tests, pipes).
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

MODSTORE_THEME = Theme(
    {
        "ms.ok": "bold green",
        "ms.error": "bold red",
        "ms.warning": "bold yellow",
        "ms.op": "bold cyan",
        "ms.key": "dim",
        "ms.id": "bold blue",
        "ms.code": "magenta",
        "ms.tag": "green",
        "ms.value": "bold",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes.
        width: Override terminal width (keeps table layout stable in tests).
    """
    return Console(
        file=StringIO(),
        theme=MODSTORE_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
