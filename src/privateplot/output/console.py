"""Rich Console factories and theme for privateplot output.

Result rendering goes to a StringIO-backed console so the renderers keep a
``render_result() -> str`` contract; the live publish reporter gets a console
bound to a real stream instead. Rich drops color codes on its own when the
stream is not a terminal (CliRunner, pipes).
"""

from __future__ import annotations

import sys
from io import StringIO
from typing import TextIO

from rich.console import Console
from rich.theme import Theme

PLOT_THEME = Theme(
    {
        "plot.ok": "bold green",
        "plot.error": "bold red",
        "plot.warning": "bold yellow",
        "plot.op": "bold cyan",
        "plot.key": "dim",
        "plot.id": "bold blue",
        "plot.path": "dim",
        "plot.title": "bold",
        "plot.action": "cyan",
        "plot.skip": "yellow",
        "plot.status.active": "green",
        "plot.status.inactive": "dim",
    }
)

_STATUS_STYLES: dict[str, str] = {
    "active": "plot.status.active",
    "inactive": "plot.status.inactive",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders into a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=PLOT_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def create_stream_console(*, stderr: bool = False, file: TextIO | None = None) -> Console:
    """Console that writes straight to stdout, stderr, or *file*."""
    return Console(
        file=file or (sys.stderr if stderr else sys.stdout),
        theme=PLOT_THEME,
        highlight=False,
    )


def get_output(console: Console) -> str:
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_status(status: str | None) -> str:
    return _STATUS_STYLES.get(status or "", "")
