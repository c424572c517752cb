"""SSL context construction from in-memory credential material."""

from __future__ import annotations

import logging
import ssl
import tempfile
from pathlib import Path

from tlsserve.domain.credentials import TlsCredentials
from tlsserve.domain.errors import CredentialLoadError

logger = logging.getLogger(__name__)


def _reject_encrypted_key() -> bytes:
    # Without a callback OpenSSL would prompt on the controlling terminal.
    msg = "private key is encrypted; provide an unencrypted PEM key"
    raise CredentialLoadError(msg, role="private key")


def build_ssl_context(credentials: TlsCredentials) -> ssl.SSLContext:
    """Create a server-side SSL context holding *credentials*.

    ``SSLContext.load_cert_chain`` only reads from paths, so the PEM bytes
    are staged in a private temporary directory that is removed before
    this function returns.

    Raises:
        CredentialLoadError: If the material is not valid PEM, the key is
            encrypted, or the key does not match the certificate.
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.minimum_version = ssl.TLSVersion.TLSv1_2

    with tempfile.TemporaryDirectory(prefix="tlsserve-") as tmp:
        cert_file = Path(tmp) / "cert.pem"
        key_file = Path(tmp) / "key.pem"
        cert_file.write_bytes(credentials.cert)
        key_file.touch(mode=0o600)
        key_file.write_bytes(credentials.key)
        try:
            context.load_cert_chain(
                certfile=cert_file,
                keyfile=key_file,
                password=_reject_encrypted_key,
            )
        except ssl.SSLError as exc:
            msg = (
                f"Invalid TLS material ({credentials.cert_path}, "
                f"{credentials.key_path}): {exc.reason or exc}"
            )
            raise CredentialLoadError(
                msg,
                cert_path=str(credentials.cert_path),
                key_path=str(credentials.key_path),
            ) from exc

    logger.debug("SSL context ready for %s", credentials.cert_path)
    return context
