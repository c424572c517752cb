"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs: CLI flags passed by Click
  2. Env vars: ``TLSSERVE_*`` prefix, ``__`` for nested sections
  3. TOML file: ``tlsserve.toml`` discovered via walk-up
  4. Code defaults: baked into :mod:`tlsserve.config.models`
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from tlsserve.config.discovery import find_config
from tlsserve.config.models import ServerConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``tlsserve.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for the TOML path during construction.
_tls = threading.local()


class TlsSettings(BaseSettings):
    """Frozen settings object stored on the CLI context.

    Attributes:
        config_root: Directory relative credential paths resolve against
            (parent of ``tlsserve.toml``, or CWD if no config found).
        config_path: The TOML file in effect, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "TLSSERVE_",
        "env_nested_delimiter": "__",
    }

    config_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        config_root: Path | None = None,
        **cli_flags: Any,
    ) -> TlsSettings:
        """Construct settings from a CLI invocation.

        Uses the explicit *config_path* when given (a missing file is a
        usage error), otherwise discovers ``tlsserve.toml`` via walk-up
        from *config_root* or the CWD.
        """
        toml_path: Path | None
        if config_path:
            toml_path = Path(config_path)
            if not toml_path.is_file():
                msg = f"Config file not found: {toml_path}"
                raise click.ClickException(msg)
        else:
            toml_path = find_config(config_root)

        resolved_root = config_root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(
                config_root=resolved_root,
                config_path=toml_path,
                **cli_flags,
            )
        except ValidationError as exc:
            msg = f"Invalid configuration: {exc}"
            raise click.ClickException(msg) from exc
        finally:
            _tls.toml_path = None

    def with_server(self, **overrides: Any) -> TlsSettings:
        """Return a copy whose ``[server]`` section has *overrides* applied.

        ``None`` values are ignored so unset CLI options keep the
        configured value.
        """
        update = {k: v for k, v in overrides.items() if v is not None}
        if not update:
            return self
        server = ServerConfig.model_validate({**self.server.model_dump(), **update})
        return self.model_copy(update={"server": server})

    def resolve_path(self, path: Path) -> Path:
        """Anchor a relative path at :attr:`config_root`."""
        path = path.expanduser()
        return path if path.is_absolute() else self.config_root / path

    @property
    def cert_file(self) -> Path:
        return self.resolve_path(self.server.cert_path)

    @property
    def key_file(self) -> Path:
        return self.resolve_path(self.server.key_path)
