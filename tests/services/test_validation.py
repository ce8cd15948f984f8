"""Tests for ValidationService dry runs."""

from __future__ import annotations

from pathlib import Path

import pytest

from modstore.config.settings import StoreSettings
from modstore.infrastructure.workspace import Workspace
from modstore.services.validation import ValidationService


@pytest.fixture
def svc(tmp_path: Path) -> ValidationService:
    settings = StoreSettings.from_cli(
        root=tmp_path,
        modules={
            "students": {
                "template": {"age": 0},
                "schema": {"name": {"required": True}, "age": {"type": "int", "min": 18}},
            }
        },
    )
    ws = Workspace(settings)
    try:
        yield ValidationService(ws)
    finally:
        ws.close()


class TestValidationService:
    def test_valid(self, svc: ValidationService) -> None:
        result = svc.check("students", {"name": "Ann", "age": 20})
        assert result.ok
        assert result.data == {"module": "students", "valid": True}

    def test_template_applied_before_checking(self, svc: ValidationService) -> None:
        result = svc.check("students", {"name": "Ann"})
        assert result.error is not None
        assert result.error.code == "INVALID"
        assert result.error.detail["errors"] == [
            {"field": "age", "message": "age must be >= 18"}
        ]

    def test_check_does_not_store(self, svc: ValidationService) -> None:
        svc.check("students", {"name": "Ann", "age": 20})
        assert svc.errors().data["count"] == 0

    def test_errors_log(self, svc: ValidationService) -> None:
        svc._store.add("students", {"age": 30})
        result = svc.errors()
        assert result.op == "validation_errors"
        assert result.data["count"] == 1
        assert result.data["errors"][0]["module"] == "students"
