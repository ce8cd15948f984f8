"""ValidationService — check items against configured schemas without writing."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from modstore.services.base import BaseService
from modstore.services.result import ErrorCode, ServiceResult, failure


class ValidationService(BaseService):
    """Dry-run validation and access to the validation failure log."""

    def check(self, module: str, item: Mapping[str, Any]) -> ServiceResult:
        """Validate *item* as if it were added to *module* (template applied)."""
        op = "validate"
        candidate = {**self._store.template(module), **item}
        report = self._workspace.validator.validate(module, candidate)
        errors = [error.model_dump() for error in report.errors]
        if not report.valid:
            message = "; ".join(error.message for error in report.errors)
            return failure(op, ErrorCode.INVALID, message, module=module, errors=errors)
        return ServiceResult(ok=True, op=op, data={"module": module, "valid": True})

    def errors(self) -> ServiceResult:
        """Every validation failure recorded by the schema hooks so far."""
        log = self._workspace.validator.errors()
        return ServiceResult(
            ok=True,
            op="validation_errors",
            data={"count": len(log), "errors": log},
        )
