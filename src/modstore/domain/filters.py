"""Query filter trees.

Raw filters arrive as plain lists and mappings (often straight from JSON).
:func:`parse_filter` turns them into three node types:

- ``list``                    -> :class:`AllOf` (every sub-filter holds)
- mapping without ``op``      -> :class:`FieldMatch` (per-field equality,
  list values are membership tests)
- mapping with ``op``         -> :class:`Criterion` (operator dispatch)

Evaluation lives in :mod:`modstore.infrastructure.query`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from modstore.domain.errors import PreconditionError

OPERATORS: frozenset[str] = frozenset(
    {"eq", "neq", "lt", "lte", "gt", "gte", "in", "contains", "hasTag", "related"}
)


class RelatedValue(BaseModel):
    """Value of a ``related`` criterion.

    ``relation_name`` names the target module. ``filter`` is either a raw
    filter tree, a callable, or absent (any related item satisfies it).
    """

    model_config = {"frozen": True, "populate_by_name": True}

    relation_name: str = Field(alias="relationName")
    filter: Any = None


class Criterion(BaseModel):
    """A single ``{field, op, value}`` test."""

    model_config = {"frozen": True}

    field: str | None = None
    op: str = "eq"
    value: Any = None


class FieldMatch(BaseModel):
    """Every listed field equals (or, for list values, is a member of) its value."""

    model_config = {"frozen": True}

    fields: dict[str, Any] = Field(default_factory=dict)


class AllOf(BaseModel):
    """Conjunction of sub-filters. An empty conjunction matches everything."""

    model_config = {"frozen": True}

    filters: list[Filter] = Field(default_factory=list)


Filter = AllOf | FieldMatch | Criterion

AllOf.model_rebuild()


def parse_filter(raw: Any) -> Filter:
    """Parse a raw filter tree into typed nodes.

    Raises:
        PreconditionError: If a node is neither a list nor a mapping, or a
            ``related`` criterion has no ``relationName``.
    """
    if isinstance(raw, (AllOf, FieldMatch, Criterion)):
        return raw
    if isinstance(raw, (list, tuple)):
        return AllOf(filters=[parse_filter(sub) for sub in raw])
    if isinstance(raw, Mapping):
        if "op" not in raw:
            return FieldMatch(fields=dict(raw))
        op = raw.get("op") or "eq"
        value = raw.get("value")
        if op == "related":
            value = _parse_related(value)
        return Criterion(field=raw.get("field"), op=op, value=value)
    msg = f"Unsupported filter node: {raw!r}"
    raise PreconditionError(msg)


def _parse_related(value: Any) -> RelatedValue:
    if isinstance(value, RelatedValue):
        return value
    try:
        return RelatedValue.model_validate(value)
    except ValidationError as exc:
        msg = f"Invalid 'related' criterion value: {value!r}"
        raise PreconditionError(msg) from exc
