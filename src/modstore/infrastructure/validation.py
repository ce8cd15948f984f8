"""SchemaValidator — enforce per-module field rules through store hooks.

Registers a ``before:add`` hook (payload: candidate item) and a
``before:update`` hook (payload: ``{"before", "after"}``, checking
``after``). An invalid item is vetoed with ``HookDecision.CANCEL``, a
warning is logged, and the failure is kept in an inspectable error log.

While :meth:`SchemaValidator.suspended` is active the hooks allow everything;
the workspace uses it to restore saved rows that predate a stricter schema.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from modstore.domain.hooks import HookDecision, HookEvent
from modstore.domain.validation import FieldRule, ValidationReport, validate_item

if TYPE_CHECKING:
    from modstore.infrastructure.store import Store

logger = logging.getLogger(__name__)


class SchemaValidator:
    """Per-module schemas plus the hooks that enforce them."""

    def __init__(self) -> None:
        self._schemas: dict[str, dict[str, FieldRule]] = {}
        self._errors: list[dict[str, Any]] = []
        self._suspended = False

    def register_schema(
        self,
        module: str,
        schema: Mapping[str, FieldRule | Mapping[str, Any]],
    ) -> None:
        """Set the schema for *module*; raw mappings are validated into FieldRules."""
        self._schemas[module] = {
            name: rule if isinstance(rule, FieldRule) else FieldRule.model_validate(rule)
            for name, rule in schema.items()
        }

    def schema(self, module: str) -> dict[str, FieldRule]:
        return dict(self._schemas.get(module, {}))

    def validate(self, module: str, item: Mapping[str, Any]) -> ValidationReport:
        """Validate *item*; modules without a schema always pass."""
        schema = self._schemas.get(module)
        if not schema:
            return ValidationReport(valid=True)
        return validate_item(schema, item)

    def install(self, store: Store, module: str) -> None:
        """Register the vetoing hooks for *module* on *store*."""

        def before_add(item: dict[str, Any]) -> HookDecision:
            return self._check(module, item)

        def before_update(change: dict[str, Any]) -> HookDecision:
            return self._check(module, change["after"])

        store.on(module, HookEvent.BEFORE_ADD, before_add)
        store.on(module, HookEvent.BEFORE_UPDATE, before_update)

    @contextmanager
    def suspended(self) -> Iterator[None]:
        """Let every item through the installed hooks for the duration of the block."""
        previous, self._suspended = self._suspended, True
        try:
            yield
        finally:
            self._suspended = previous

    def errors(self) -> list[dict[str, Any]]:
        """Copies of every recorded validation failure, oldest first."""
        return copy.deepcopy(self._errors)

    def clear_errors(self) -> None:
        self._errors.clear()

    def _check(self, module: str, item: Mapping[str, Any]) -> HookDecision:
        if self._suspended:
            return HookDecision.ALLOW
        report = self.validate(module, item)
        if report.valid:
            return HookDecision.ALLOW
        messages = [error.message for error in report.errors]
        logger.warning("Validation failed for %s: %s", module, "; ".join(messages))
        self._errors.append(
            {
                "module": module,
                "item": copy.deepcopy(dict(item)),
                "errors": [error.model_dump() for error in report.errors],
                "timestamp": datetime.now(UTC).isoformat(),
            }
        )
        return HookDecision.CANCEL
