"""Tests for ServiceResult and ServiceError."""

import json

import pytest
from pydantic import ValidationError

from tlsserve.domain.errors import BindError
from tlsserve.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="serve", data={"port": 8443})
        assert result.ok is True
        assert result.op == "serve"
        assert result.data == {"port": 8443}
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_error_construction(self) -> None:
        error = ServiceError(code="BIND_ERROR", message="Address already in use")
        result = ServiceResult(ok=False, op="serve", error=error)
        assert result.ok is False
        assert result.error is not None
        assert result.error.code == "BIND_ERROR"
        assert result.error.detail == {}

    def test_json_serialization(self) -> None:
        result = ServiceResult(
            ok=True,
            op="serve",
            data={"url": "https://127.0.0.1:8443"},
            meta={"startup_ms": 3.2},
        )
        parsed = json.loads(result.model_dump_json())
        assert parsed["ok"] is True
        assert parsed["data"]["url"] == "https://127.0.0.1:8443"
        assert parsed["meta"]["startup_ms"] == 3.2

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="serve")
        with pytest.raises(ValidationError):
            result.ok = False  # type: ignore[misc]


class TestFailure:
    def test_from_domain_error(self) -> None:
        exc = BindError("Cannot bind 0.0.0.0:443: Permission denied", port=443, errno=13)
        result = ServiceResult.failure("serve", exc)
        assert result.ok is False
        assert result.op == "serve"
        assert result.error == ServiceError(
            code="BIND_ERROR",
            message="Cannot bind 0.0.0.0:443: Permission denied",
            detail={"port": 443, "errno": 13},
        )
        assert result.data == {}
