"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults live here, ``tlsserve.toml`` only
contains overrides. The defaults reproduce the stock deployment:
``server.cert`` / ``server.key`` in the working directory, port 443.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """[server] section."""

    model_config = {"frozen": True}

    host: str = "0.0.0.0"
    port: int = Field(default=443, ge=0, le=65535)
    cert_path: Path = Path("server.cert")
    key_path: Path = Path("server.key")
