"""Subcommand modules for tlsserve.

Provides register_commands() which uses deferred imports so
``tlsserve --help`` never pulls in Flask or Werkzeug.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register standalone commands on the root CLI group."""
    from tlsserve.commands.serve import serve

    cli.add_command(serve)
