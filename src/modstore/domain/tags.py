"""Tag list rules used by ``add_tag`` / ``remove_tag``.

A ``tags`` value that a patch turned into a scalar or tuple is coerced the
same way ``add`` coerces it before the tag is applied.
"""

from __future__ import annotations

from typing import Any

from modstore.domain.items import normalize_tags


def with_tag(tags: Any, tag: str) -> list[Any]:
    """Append *tag*, keeping the list unique in first-seen order.

    Examples:
        >>> with_tag(["a", "b"], "c")
        ['a', 'b', 'c']
        >>> with_tag(["a", "a"], "a")
        ['a']
        >>> with_tag("solo", "b")
        ['solo', 'b']
    """
    return list(dict.fromkeys([*normalize_tags(tags), tag]))


def without_tag(tags: Any, tag: str) -> list[Any]:
    """Drop every occurrence of *tag*."""
    return [t for t in normalize_tags(tags) if t != tag]
