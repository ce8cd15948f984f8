"""QueryEngine — predicate evaluation over a module's items.

Evaluates the typed filter trees from :mod:`modstore.domain.filters`.
``related`` criteria resolve through a caller-supplied lookup so the
engine stays a pure function of the items it is given.
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from modstore.domain.filters import AllOf, Criterion, FieldMatch, Filter, RelatedValue, parse_filter
from modstore.domain.items import Item, normalize_tags, to_number

RelatedLookup = Callable[[str, Any, str], list[Item]]

_ORDERING: dict[str, Callable[[float, float], bool]] = {
    "lt": operator.lt,
    "lte": operator.le,
    "gt": operator.gt,
    "gte": operator.ge,
}


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


class QueryEngine:
    """Evaluate filters and free-text search against lists of items."""

    def __init__(self, related: RelatedLookup) -> None:
        self._related = related

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def filter(self, module: str, items: Iterable[Item], raw_filter: Any) -> list[Item]:
        """Return the items (not copies) matching *raw_filter*, in order."""
        parsed = parse_filter(raw_filter)
        return [item for item in items if self.matches(module, item, parsed)]

    def search(self, items: list[Item], q: Any, fields: Iterable[str]) -> list[Item]:
        """Case-insensitive substring search, accumulated per field.

        An item matching on two listed fields appears twice.
        """
        needle = str(q).lower()
        out: list[Item] = []
        for field_name in fields:
            for item in items:
                if field_name not in item:
                    continue
                if needle in str(item[field_name]).lower():
                    out.append(item)
        return out

    def matches(self, module: str, item: Mapping[str, Any], node: Filter) -> bool:
        """Evaluate one parsed filter node against *item*."""
        if isinstance(node, AllOf):
            return all(self.matches(module, item, sub) for sub in node.filters)
        if isinstance(node, FieldMatch):
            return all(self._field_equals(item, key, value) for key, value in node.fields.items())
        return self._criterion(module, item, node)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _field_equals(item: Mapping[str, Any], key: str, expected: Any) -> bool:
        actual = item.get(key)
        if _is_sequence(expected):
            return actual in expected
        return actual == expected

    def _criterion(self, module: str, item: Mapping[str, Any], crit: Criterion) -> bool:
        op = crit.op
        actual = item.get(crit.field) if crit.field is not None else None
        expected = crit.value

        if op == "eq":
            return actual == expected
        if op == "neq":
            return actual != expected
        if op in _ORDERING:
            return _ORDERING[op](to_number(actual), to_number(expected))
        if op == "in":
            return _is_sequence(expected) and actual in expected
        if op == "contains":
            if actual is None:
                return False
            return str(expected).lower() in str(actual).lower()
        if op == "hasTag":
            return expected in normalize_tags(item.get("tags"))
        if op == "related":
            return self._related_match(module, item, expected)
        return False

    def _related_match(self, module: str, item: Mapping[str, Any], spec: RelatedValue) -> bool:
        target = spec.relation_name
        related = self._related(module, item.get("id"), target)
        if spec.filter is None:
            return bool(related)
        if callable(spec.filter):
            return any(spec.filter(other) for other in related)
        parsed = parse_filter(spec.filter)
        return any(self.matches(target, other, parsed) for other in related)
