"""Item predicates for bulk operations.

A bulk operation takes exactly one of the two variants below and calls
``matches``; it never inspects whether a bare argument is a string or a
function.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from modstore.domain.items import matches_key


@dataclass(frozen=True)
class KeyPredicate:
    """Match the single item whose ``id`` or ``code`` equals *key*."""

    key: str

    def matches(self, item: Mapping[str, Any]) -> bool:
        return matches_key(item, self.key)


@dataclass(frozen=True)
class FunctionPredicate:
    """Match items for which *fn* returns a truthy value."""

    fn: Callable[[dict[str, Any]], Any]

    def matches(self, item: Mapping[str, Any]) -> bool:
        return bool(self.fn(item))


Predicate = KeyPredicate | FunctionPredicate
