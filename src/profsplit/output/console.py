"""Rich Console factory and theme for profsplit output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract. In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

PROFSPLIT_THEME = Theme(
    {
        "ps.ok": "bold green",
        "ps.error": "bold red",
        "ps.warning": "bold yellow",
        "ps.op": "bold cyan",
        "ps.key": "dim",
        "ps.id": "bold blue",
        "ps.path": "dim",
        "ps.label": "bold",
        "ps.action.noop": "dim",
        "ps.action.retype": "yellow",
        "ps.action.duplicate_and_repoint": "magenta",
        "ps.mode.single": "cyan",
        "ps.mode.split": "green",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=PROFSPLIT_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_action(action: str) -> str:
    """Return the Rich style name for a plan action."""
    return f"ps.action.{action}" if action in {"noop", "retype", "duplicate_and_repoint"} else ""


def style_for_mode(mode: str) -> str:
    return f"ps.mode.{mode}" if mode in {"single", "split"} else ""
