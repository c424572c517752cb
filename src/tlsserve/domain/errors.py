"""Startup error taxonomy.

Both errors are fatal: the process exits non-zero and no listener is
left bound. Per-request failures never surface here; they stay inside
the connection thread that hit them.
"""

from __future__ import annotations

from typing import Any


class TlsServeError(Exception):
    """Base class for fatal startup errors.

    Attributes:
        code: Stable machine-readable identifier, copied into
            ``ServiceError.code`` when the failure is reported.
        detail: Extra context (paths, port, errno) for JSON output.
    """

    code = "TLSSERVE_ERROR"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class CredentialLoadError(TlsServeError):
    """Certificate or key file missing, unreadable, empty, or malformed."""

    code = "CREDENTIAL_LOAD_ERROR"


class BindError(TlsServeError):
    """Listening port unavailable or bind not permitted."""

    code = "BIND_ERROR"
