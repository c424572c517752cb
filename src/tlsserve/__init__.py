"""tlsserve: TLS-terminated HTTP greeting server."""

__version__ = "0.1.0"
