"""Routing table: ``(method, path)`` mapped to a handler.

A handler is any zero-argument callable returning something Flask can
turn into a response. The table is plain data so it can be swapped out
in tests and inspected without building an app.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping

from flask import Response
from flask.typing import ResponseReturnValue

Handler = Callable[[], ResponseReturnValue]
RouteTable = Mapping[tuple[str, str], Handler]

GREETING = "Hello from HTTPS server!"


def greeting() -> Response:
    """Static plaintext greeting served at the root path."""
    return Response(GREETING, status=200, mimetype="text/plain")


DEFAULT_ROUTES: RouteTable = {
    ("GET", "/"): greeting,
}
