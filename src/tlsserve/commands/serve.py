"""serve: load the TLS credentials, bind, and answer ``GET /``."""

from __future__ import annotations

from pathlib import Path

import click

from tlsserve.commands._base import TlsCommand
from tlsserve.commands._context import AppContext


def _absolute(path: Path | None) -> Path | None:
    # Paths typed on the command line are relative to the CWD, not the config root.
    return path.resolve() if path is not None else None


@click.command(
    cls=TlsCommand,
    examples="""\
  # Serve with server.cert / server.key from the current directory on :443
  tlsserve serve

  # Unprivileged port with explicit credentials
  tlsserve serve --cert certs/fullchain.pem --key certs/privkey.pem --port 8443

  # Machine-readable startup report
  tlsserve --json serve --host 127.0.0.1 --port 8443""",
)
@click.option(
    "--cert",
    "cert_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="PEM certificate file [default: server.cert].",
)
@click.option(
    "--key",
    "key_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="PEM private key file [default: server.key].",
)
@click.option("--host", default=None, help="Bind address [default: 0.0.0.0].")
@click.option(
    "--port",
    default=None,
    type=click.IntRange(0, 65535),
    help="Listen port [default: 443].",
)
@click.pass_obj
def serve(
    app: AppContext,
    cert_path: Path | None,
    key_path: Path | None,
    host: str | None,
    port: int | None,
) -> None:
    """Start the HTTPS server and block until the process is stopped."""
    from tlsserve.services.serve import ServeService

    settings = app.settings.with_server(
        cert_path=_absolute(cert_path),
        key_path=_absolute(key_path),
        host=host,
        port=port,
    )
    service = ServeService(settings)
    app.emit(service.start())

    if service.server is None:
        raise click.ClickException("serve reported success without a running server")
    service.server.serve_forever()
