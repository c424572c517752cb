"""TLS credential pair and its loader.

Credentials are read exactly once at startup and held immutably for the
process lifetime. Format validation (is this really PEM, does the key
match the certificate) happens later, when the SSL context is built.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from tlsserve.domain.errors import CredentialLoadError


@dataclass(frozen=True)
class TlsCredentials:
    """Certificate and private-key material plus where it came from."""

    cert: bytes
    key: bytes
    cert_path: Path
    key_path: Path

    def __repr__(self) -> str:
        # Never echo key material into logs or tracebacks.
        return (
            f"TlsCredentials(cert_path={str(self.cert_path)!r}, "
            f"key_path={str(self.key_path)!r}, cert={len(self.cert)} bytes, "
            f"key={len(self.key)} bytes)"
        )


def _read_material(path: Path, role: str) -> bytes:
    """Read one credential file fully, closing the handle on every path."""
    if not path.exists():
        msg = f"{role} file not found: {path}"
        raise CredentialLoadError(msg, path=str(path), role=role)
    if not path.is_file():
        msg = f"{role} path is not a regular file: {path}"
        raise CredentialLoadError(msg, path=str(path), role=role)

    try:
        with path.open("rb") as fh:
            data = fh.read()
    except OSError as exc:
        msg = f"Cannot read {role} file {path}: {exc.strerror or exc}"
        raise CredentialLoadError(msg, path=str(path), role=role) from exc

    if not data.strip():
        msg = f"{role} file is empty: {path}"
        raise CredentialLoadError(msg, path=str(path), role=role)
    return data


def load_credentials(cert_path: str | Path, key_path: str | Path) -> TlsCredentials:
    """Load the certificate and private key from disk.

    Raises:
        CredentialLoadError: If either file is missing, unreadable, or empty.
    """
    cert_file = Path(cert_path)
    key_file = Path(key_path)
    cert = _read_material(cert_file, "certificate")
    key = _read_material(key_file, "private key")
    return TlsCredentials(cert=cert, key=key, cert_path=cert_file, key_path=key_file)
