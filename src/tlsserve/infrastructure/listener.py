"""HTTPS listener: bind, wrap with TLS, attach the Flask dispatcher.

The listening socket is bound here rather than inside Werkzeug so that
bind failures surface as :class:`BindError` instead of Werkzeug's
print-and-exit behavior. The bound socket is then handed to a threaded
Werkzeug server by file descriptor.

The listening socket itself stays plain TCP. Each accepted connection is
wrapped on its own request thread, under a handshake timeout, so a client
that stalls or fails the handshake only costs its own thread.
"""

from __future__ import annotations

import logging
import socket
import ssl
import threading
from typing import Any

from werkzeug.serving import ThreadedWSGIServer, select_address_family

from tlsserve.domain.credentials import TlsCredentials
from tlsserve.domain.errors import BindError
from tlsserve.domain.lifecycle import ServerState, is_valid_transition
from tlsserve.infrastructure.tls import build_ssl_context
from tlsserve.web.app import create_app
from tlsserve.web.routes import RouteTable

logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 443
HANDSHAKE_TIMEOUT = 10.0


def _bind(host: str, port: int) -> socket.socket:
    """Open a listening TCP socket on ``(host, port)``."""
    family = select_address_family(host, port)
    try:
        return socket.create_server((host, port), family=family)
    except OSError as exc:
        reason = exc.strerror or str(exc)
        msg = f"Cannot bind {host}:{port}: {reason}"
        raise BindError(msg, host=host, port=port, errno=exc.errno) from exc


class TlsWSGIServer(ThreadedWSGIServer):
    """Threaded Werkzeug server that runs the TLS handshake per connection.

    ``ssl_context`` is set after construction so Werkzeug reports the
    ``https`` scheme and logs SSL errors, while ``accept()`` keeps
    returning plain sockets.
    """

    def __init__(
        self,
        host: str,
        port: int,
        app: Any,
        *,
        tls_context: ssl.SSLContext,
        fd: int,
        handshake_timeout: float = HANDSHAKE_TIMEOUT,
    ) -> None:
        super().__init__(host, port, app, fd=fd)
        self.tls_context = tls_context
        self.ssl_context = tls_context
        self.handshake_timeout = handshake_timeout

    def finish_request(self, request: Any, client_address: Any) -> None:
        request.settimeout(self.handshake_timeout)
        try:
            conn = self.tls_context.wrap_socket(request, server_side=True)
        except OSError as exc:
            # ssl.SSLError and socket timeouts are both OSError.
            logger.debug("TLS handshake with %s failed: %s", client_address[0], exc)
            return
        conn.settimeout(None)
        try:
            super().finish_request(conn, client_address)
        finally:
            self.shutdown_request(conn)


class HttpsServer:
    """One HTTPS listener and everything it owns.

    Holds the loaded credentials, the configured address, and, once
    started, the Werkzeug server wrapping the bound socket. Instances are
    independent, so tests can run several side by side on ephemeral ports.

    Usage::

        server = HttpsServer(load_credentials("server.cert", "server.key"))
        server.start()
        server.serve_forever()
    """

    def __init__(
        self,
        credentials: TlsCredentials,
        *,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        routes: RouteTable | None = None,
        handshake_timeout: float = HANDSHAKE_TIMEOUT,
    ) -> None:
        self.credentials = credentials
        self.host = host
        self.port = port
        self.routes = routes
        self.handshake_timeout = handshake_timeout
        self.state = ServerState.NOT_STARTED
        self._wsgi: TlsWSGIServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"https://{host}:{self.port}"

    @property
    def wsgi_server(self) -> TlsWSGIServer:
        """The underlying Werkzeug server (only once running)."""
        if self._wsgi is None:
            msg = "Server has not been started"
            raise RuntimeError(msg)
        return self._wsgi

    def start(self) -> HttpsServer:
        """Bind the socket and attach the dispatcher.

        The SSL context is built before anything is bound, so bad
        credentials never leave a listener behind.

        Raises:
            CredentialLoadError: If the credential material is invalid.
            BindError: If the address is in use or binding is not permitted.
            RuntimeError: If the server is already running.
        """
        if not is_valid_transition(self.state, ServerState.RUNNING):
            msg = f"Cannot start server in state {self.state}"
            raise RuntimeError(msg)

        ssl_context = build_ssl_context(self.credentials)
        app = create_app(self.routes)

        sock = _bind(self.host, self.port)
        try:
            self._wsgi = TlsWSGIServer(
                self.host,
                sock.getsockname()[1],
                app,
                tls_context=ssl_context,
                fd=sock.fileno(),
                handshake_timeout=self.handshake_timeout,
            )
        finally:
            # Werkzeug duplicates the descriptor; the original is ours to close.
            sock.close()

        self.port = self._wsgi.port
        self.state = ServerState.RUNNING
        logger.info("HTTPS server listening on %s", self.url)
        return self

    def serve_forever(self) -> None:
        """Process requests until the process is killed or interrupted."""
        self.wsgi_server.serve_forever()

    def serve_in_thread(self) -> threading.Thread:
        """Run the request loop on a daemon thread and return it."""
        wsgi = self.wsgi_server
        self._thread = threading.Thread(
            target=wsgi.serve_forever,
            name=f"tlsserve-{self.port}",
            daemon=True,
        )
        self._thread.start()
        return self._thread

    def close(self) -> None:
        """Stop the request loop (if threaded) and release the socket."""
        if self._wsgi is None:
            return
        if self._thread is not None:
            self._wsgi.shutdown()
            self._thread.join()
            self._thread = None
        self._wsgi.server_close()


def start_server(
    credentials: TlsCredentials,
    port: int = DEFAULT_PORT,
    *,
    host: str = DEFAULT_HOST,
    routes: RouteTable | None = None,
    handshake_timeout: float = HANDSHAKE_TIMEOUT,
) -> HttpsServer:
    """Create an :class:`HttpsServer` and start it."""
    server = HttpsServer(
        credentials, host=host, port=port, routes=routes, handshake_timeout=handshake_timeout
    )
    return server.start()
