"""Rich/JSON output for ServiceResult.

Human mode prints ``OK: <op>`` followed by indented ``key: value``
lines; quiet mode keeps only the first line. JSON mode dumps the whole
result model so scripts can read the bound URL and error codes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel
from rich.text import Text

from tlsserve.output.console import create_console, get_output

if TYPE_CHECKING:
    from tlsserve.services.result import ServiceResult


class OutputSettings(BaseModel):
    """Rendering switches taken from the global CLI flags."""

    model_config = {"frozen": True}

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


_VALUE_STYLES: dict[str, str] = {
    "url": "tls.url",
    "cert_path": "tls.path",
    "key_path": "tls.path",
}


def _kv_line(key: str, value: Any) -> Text:
    return Text.assemble(
        "  ",
        (key, "tls.key"),
        ": ",
        (str(value), _VALUE_STYLES.get(key, "")),
    )


def format_result(
    result: ServiceResult,
    *,
    settings: OutputSettings | None = None,
) -> str:
    """Format a ServiceResult for display."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)

    console = create_console()
    if result.ok:
        console.print(Text.assemble(("OK", "tls.ok"), ": ", (result.op, "tls.op")), soft_wrap=True)
        if not settings.quiet:
            for key, value in result.data.items():
                console.print(_kv_line(key, value), soft_wrap=True)
            if settings.verbose and result.meta:
                for key, value in result.meta.items():
                    console.print(_kv_line(key, value), soft_wrap=True)
        return get_output(console).rstrip("\n")

    message = result.error.message if result.error else "Unknown error"
    console.print(
        Text.assemble(("ERROR", "tls.error"), ": ", (result.op, "tls.op"), " - ", message),
        soft_wrap=True,
    )
    if settings.verbose and result.error is not None:
        console.print(_kv_line("code", result.error.code), soft_wrap=True)
        for key, value in result.error.detail.items():
            console.print(_kv_line(key, value), soft_wrap=True)
    return get_output(console).rstrip("\n")
