"""Rich Console factory and theme for tlsserve output.

Consoles render into a StringIO buffer so ``format_result`` keeps
returning a plain string. In non-TTY environments (tests, pipes) Rich
drops color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

TLS_THEME = Theme(
    {
        "tls.ok": "bold green",
        "tls.error": "bold red",
        "tls.warning": "bold yellow",
        "tls.op": "bold cyan",
        "tls.key": "dim",
        "tls.url": "bold blue underline",
        "tls.path": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=TLS_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
