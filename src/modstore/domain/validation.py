"""Field rules and the pure validation routine behind schema hooks.

Validation is not a store concept: a schema is enforced by registering
``before:add`` / ``before:update`` hooks that veto invalid items (see
:mod:`modstore.infrastructure.validation`).
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, Field

from modstore.domain.items import to_number

_TYPE_CHECKS: dict[str, Callable[[Any], bool]] = {
    "str": lambda v: isinstance(v, str),
    "string": lambda v: isinstance(v, str),
    "int": lambda v: isinstance(v, int) and not isinstance(v, bool),
    "float": lambda v: isinstance(v, float),
    "number": lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
    "bool": lambda v: isinstance(v, bool),
    "boolean": lambda v: isinstance(v, bool),
    "list": lambda v: isinstance(v, list),
    "dict": lambda v: isinstance(v, dict),
}


class FieldRule(BaseModel):
    """Constraints on one field. Unset constraints are not checked."""

    model_config = {"frozen": True, "populate_by_name": True}

    required: bool = False
    type: str | None = None
    pattern: str | None = None
    min_length: int | None = Field(default=None, alias="minLength")
    max_length: int | None = Field(default=None, alias="maxLength")
    min: float | None = None
    max: float | None = None
    custom: Callable[[Any], bool] | None = None


class FieldError(BaseModel):
    """One failed constraint."""

    model_config = {"frozen": True}

    field: str
    message: str


class ValidationReport(BaseModel):
    """Outcome of validating one item against a schema."""

    model_config = {"frozen": True}

    valid: bool
    errors: list[FieldError] = Field(default_factory=list)


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def _check_field(name: str, rule: FieldRule, value: Any) -> list[FieldError]:
    errors: list[FieldError] = []
    if rule.required and _is_blank(value):
        errors.append(FieldError(field=name, message=f"{name} is required"))
    if value is None:
        return errors

    if rule.type is not None:
        check = _TYPE_CHECKS.get(rule.type)
        if check is None or not check(value):
            errors.append(FieldError(field=name, message=f"{name} must be {rule.type}"))
    if rule.pattern is not None and re.search(rule.pattern, str(value)) is None:
        errors.append(FieldError(field=name, message=f"{name} does not match pattern"))
    if rule.custom is not None and not rule.custom(value):
        errors.append(FieldError(field=name, message=f"{name} failed custom validation"))
    if rule.min_length is not None and len(str(value)) < rule.min_length:
        errors.append(
            FieldError(field=name, message=f"{name} must be at least {rule.min_length} chars")
        )
    if rule.max_length is not None and len(str(value)) > rule.max_length:
        errors.append(
            FieldError(field=name, message=f"{name} must be at most {rule.max_length} chars")
        )
    if rule.min is not None and to_number(value) < rule.min:
        errors.append(FieldError(field=name, message=f"{name} must be >= {rule.min:g}"))
    if rule.max is not None and to_number(value) > rule.max:
        errors.append(FieldError(field=name, message=f"{name} must be <= {rule.max:g}"))
    return errors


def validate_item(schema: Mapping[str, FieldRule], item: Mapping[str, Any]) -> ValidationReport:
    """Check *item* against every rule in *schema*."""
    errors: list[FieldError] = []
    for name, rule in schema.items():
        errors.extend(_check_field(name, rule, item.get(name)))
    return ValidationReport(valid=not errors, errors=errors)
