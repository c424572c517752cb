"""Allow ``python -m tlsserve``."""

from tlsserve.cli import cli

cli()
