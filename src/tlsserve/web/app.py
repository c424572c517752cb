"""Flask dispatcher generated from a routing table.

Only the routes in the table are registered. Anything else, including a
known path requested with the wrong method, is answered with the stock
404 page.
"""

from __future__ import annotations

import logging

from flask import Flask, Response
from flask.typing import ResponseReturnValue
from werkzeug.exceptions import MethodNotAllowed, NotFound

from tlsserve.web.routes import DEFAULT_ROUTES, RouteTable

logger = logging.getLogger(__name__)


def _method_not_allowed_as_not_found(_exc: MethodNotAllowed) -> ResponseReturnValue:
    return NotFound().get_response()


def create_app(routes: RouteTable | None = None) -> Flask:
    """Build a Flask app serving exactly the entries of *routes*.

    Defaults to :data:`~tlsserve.web.routes.DEFAULT_ROUTES`.
    """
    table = DEFAULT_ROUTES if routes is None else routes
    app = Flask("tlsserve")

    for (method, path), handler in table.items():
        endpoint = f"{method.lower()}:{path}"
        app.add_url_rule(path, endpoint=endpoint, view_func=handler, methods=[method.upper()])
        name = getattr(handler, "__name__", repr(handler))
        logger.debug("Registered route %s %s -> %s", method.upper(), path, name)

    app.register_error_handler(MethodNotAllowed, _method_not_allowed_as_not_found)
    return app


def handle_request(app: Flask, method: str, path: str) -> Response:
    """Dispatch a single request through *app* without touching the network."""
    with app.test_request_context(path, method=method.upper()):
        return app.full_dispatch_request()
