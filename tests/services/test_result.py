"""Tests for ServiceResult, ServiceError, and the failure helper."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from modstore.services.result import ErrorCode, ServiceError, ServiceResult, failure


class TestServiceResult:
    def test_success_defaults(self) -> None:
        result = ServiceResult(ok=True, op="add_item", data={"item": {"id": "a"}})
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_json_serialization(self) -> None:
        result = ServiceResult(ok=True, op="list_items", data={"count": 0}, meta={"page": 1})
        parsed = json.loads(result.model_dump_json())
        assert parsed["ok"] is True
        assert parsed["meta"]["page"] == 1

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="test")
        with pytest.raises(ValidationError):
            result.ok = False  # type: ignore[misc]


class TestFailure:
    def test_builds_error(self) -> None:
        result = failure("get_item", ErrorCode.NOT_FOUND, "No item", module="students")
        assert result.ok is False
        assert result.op == "get_item"
        assert result.error == ServiceError(
            code="NOT_FOUND", message="No item", detail={"module": "students"}
        )

    def test_code_serializes_as_plain_string(self) -> None:
        result = failure("add_item", ErrorCode.VETOED, "vetoed")
        assert json.loads(result.model_dump_json())["error"]["code"] == "VETOED"
