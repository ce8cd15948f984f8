"""Item values and the copy rules applied at every store boundary.

Items are plain ``dict[str, Any]`` records carrying at least ``id``,
``code`` and ``tags``.

INVARIANT: Nothing handed to or returned from the store aliases its
internal state. Copies use ``copy.deepcopy`` so callables and other
non-JSON values survive.
"""

from __future__ import annotations

import copy
import math
from collections.abc import Iterable, Mapping
from typing import Any

Item = dict[str, Any]


def clone_item(item: Mapping[str, Any]) -> Item:
    """Return a deep, independent copy of *item*."""
    return copy.deepcopy(dict(item))


def clone_items(items: Iterable[Mapping[str, Any]]) -> list[Item]:
    """Deep-copy every item, preserving order."""
    return [clone_item(item) for item in items]


def merge_item(base: Mapping[str, Any], patch: Mapping[str, Any]) -> Item:
    """Shallow merge of two copied mappings; *patch* wins on conflict."""
    merged = clone_item(base)
    merged.update(copy.deepcopy(dict(patch)))
    return merged


def normalize_tags(value: Any) -> list[str]:
    """Coerce a creation-time ``tags`` value into a list.

    Examples:
        >>> normalize_tags(["a", "b"])
        ['a', 'b']
        >>> normalize_tags("solo")
        ['solo']
        >>> normalize_tags(None)
        []
    """
    if isinstance(value, list):
        return value
    if isinstance(value, (tuple, set, frozenset)):
        return list(value)
    if value:
        return [value]
    return []


def matches_key(item: Mapping[str, Any], key: Any) -> bool:
    """True when *key* equals the item's ``id`` or ``code``."""
    return item.get("id") == key or item.get("code") == key


def to_number(value: Any) -> float:
    """Numeric coercion used by ordering operators and statistics.

    Booleans map to 1/0, numeric strings are parsed, the empty string is
    zero, and everything else is NaN (which never compares true).
    """
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan
