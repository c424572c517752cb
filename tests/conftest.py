"""Shared pytest fixtures for tlsserve tests."""

from __future__ import annotations

import datetime
import ipaddress
import logging
import os
from collections.abc import Generator
from dataclasses import dataclass
from pathlib import Path

import pytest
from click.testing import CliRunner
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from tests.helpers import key_to_pem, make_key
from tlsserve.domain.credentials import TlsCredentials, load_credentials
from tlsserve.infrastructure.listener import HttpsServer, start_server


@dataclass(frozen=True)
class PemBundle:
    """Throwaway CA plus a leaf certificate for localhost / 127.0.0.1."""

    ca_cert: bytes
    cert: bytes
    key: bytes


def _name(common_name: str) -> x509.Name:
    return x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])


def _build_bundle() -> PemBundle:
    now = datetime.datetime.now(datetime.UTC)
    not_before = now - datetime.timedelta(days=1)
    not_after = now + datetime.timedelta(days=30)

    ca_key = make_key()
    ca_name = _name("tlsserve test CA")
    ca_cert = (
        x509.CertificateBuilder()
        .subject_name(ca_name)
        .issuer_name(ca_name)
        .public_key(ca_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_after)
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .add_extension(
            x509.KeyUsage(
                digital_signature=True,
                content_commitment=False,
                key_encipherment=False,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=True,
                crl_sign=True,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(ca_key.public_key()), critical=False)
        .sign(ca_key, hashes.SHA256())
    )

    leaf_key = make_key()
    leaf_cert = (
        x509.CertificateBuilder()
        .subject_name(_name("localhost"))
        .issuer_name(ca_name)
        .public_key(leaf_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_after)
        .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
        .add_extension(
            x509.SubjectAlternativeName(
                [
                    x509.DNSName("localhost"),
                    x509.IPAddress(ipaddress.ip_address("127.0.0.1")),
                ]
            ),
            critical=False,
        )
        .add_extension(x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), critical=False)
        .add_extension(
            x509.SubjectKeyIdentifier.from_public_key(leaf_key.public_key()), critical=False
        )
        .add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_public_key(ca_key.public_key()),
            critical=False,
        )
        .sign(ca_key, hashes.SHA256())
    )

    return PemBundle(
        ca_cert=ca_cert.public_bytes(serialization.Encoding.PEM),
        cert=leaf_cert.public_bytes(serialization.Encoding.PEM),
        key=key_to_pem(leaf_key),
    )


@pytest.fixture(scope="session")
def pem_bundle() -> PemBundle:
    """One CA/leaf pair for the whole session (key generation is not free)."""
    return _build_bundle()


# requests lets these replace any per-session ``verify=`` path.
_CA_BUNDLE_VARS = frozenset({"REQUESTS_CA_BUNDLE", "CURL_CA_BUNDLE"})


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's TLSSERVE_* and CA bundle overrides out of every test."""
    for name in list(os.environ):
        if name.startswith("TLSSERVE_") or name in _CA_BUNDLE_VARS:
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Undo configure_logging() calls made by CLI invocations."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    levels = {name: logging.getLogger(name).level for name in ("tlsserve", "werkzeug")}
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def cert_files(tmp_path: Path, pem_bundle: PemBundle) -> tuple[Path, Path]:
    """``server.cert`` and ``server.key`` written into a temp directory."""
    cert_path = tmp_path / "server.cert"
    key_path = tmp_path / "server.key"
    cert_path.write_bytes(pem_bundle.cert)
    key_path.write_bytes(pem_bundle.key)
    return cert_path, key_path


@pytest.fixture
def ca_file(tmp_path: Path, pem_bundle: PemBundle) -> Path:
    """CA bundle path for ``requests``' ``verify=`` argument."""
    path = tmp_path / "ca.pem"
    path.write_bytes(pem_bundle.ca_cert)
    return path


@pytest.fixture
def credentials(cert_files: tuple[Path, Path]) -> TlsCredentials:
    return load_credentials(*cert_files)


@pytest.fixture
def running_server(credentials: TlsCredentials) -> Generator[HttpsServer]:
    """A started server on an ephemeral loopback port, serving on a thread."""
    server = start_server(credentials, port=0, host="127.0.0.1")
    server.serve_in_thread()
    try:
        yield server
    finally:
        server.close()
