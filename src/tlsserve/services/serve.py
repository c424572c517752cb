"""ServeService: bring up the HTTPS listener.

Pipeline: LOAD CREDENTIALS → BUILD TLS CONTEXT → BIND → REPORT

Startup failures come back as a failed ServiceResult carrying the
error's stable code; nothing is left bound when that happens.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from tlsserve.domain.credentials import load_credentials
from tlsserve.domain.errors import TlsServeError
from tlsserve.infrastructure.listener import HttpsServer
from tlsserve.services.result import ServiceResult

if TYPE_CHECKING:
    from tlsserve.config.settings import TlsSettings
    from tlsserve.web.routes import RouteTable

logger = logging.getLogger(__name__)


class ServeService:
    """Start an :class:`HttpsServer` from resolved settings.

    On success the running server is available as :attr:`server`; the
    caller decides whether to block in ``serve_forever`` or run it on a
    thread.
    """

    def __init__(self, settings: TlsSettings, *, routes: RouteTable | None = None) -> None:
        self._settings = settings
        self._routes = routes
        self.server: HttpsServer | None = None

    def start(self) -> ServiceResult:
        op = "serve"
        started = time.perf_counter()
        cfg = self._settings.server
        cert_file = self._settings.cert_file
        key_file = self._settings.key_file

        try:
            credentials = load_credentials(cert_file, key_file)
            server = HttpsServer(credentials, host=cfg.host, port=cfg.port, routes=self._routes)
            server.start()
        except TlsServeError as exc:
            logger.debug("Startup failed [%s]: %s", exc.code, exc.message)
            return ServiceResult.failure(op, exc)

        self.server = server
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "url": server.url,
                "host": server.host,
                "port": server.port,
                "cert_path": str(cert_file),
                "key_path": str(key_file),
            },
            meta={"startup_ms": round((time.perf_counter() - started) * 1000, 2)},
        )
