"""Pagination and field indexes over a module.

A :class:`FieldIndex` maps field values to item ids rather than list
positions, so lookups stay correct after the store reorders or removes
items; ids that no longer resolve are skipped.
"""

from __future__ import annotations

import math
from collections import defaultdict
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from modstore.infrastructure.store import Store


class Page(BaseModel):
    """One page of a module's items."""

    model_config = {"frozen": True}

    page: int
    page_size: int
    total: int
    pages: int
    items: list[dict[str, Any]] = Field(default_factory=list)


def paginate(
    store: Store,
    module: str,
    page: int = 1,
    page_size: int = 10,
    *,
    sort_by: str | None = None,
) -> Page:
    """Return the 1-indexed *page* of *module*.

    Raises:
        ValueError: If *page* or *page_size* is less than 1.
    """
    if page < 1 or page_size < 1:
        msg = f"page and page_size must be >= 1 (got {page}, {page_size})"
        raise ValueError(msg)
    items = store.get_all(module, sort_by=sort_by)
    total = len(items)
    start = (page - 1) * page_size
    return Page(
        page=page,
        page_size=page_size,
        total=total,
        pages=math.ceil(total / page_size),
        items=items[start : start + page_size],
    )


class FieldIndex:
    """Value -> ids index on one field of one module.

    Build it with :meth:`rebuild`; it does not track later mutations.
    Items lacking the field, or holding unhashable values, are not indexed.
    """

    def __init__(self, store: Store, module: str, field: str) -> None:
        self._store = store
        self.module = module
        self.field = field
        self._index: dict[Any, list[Any]] = {}
        self.rebuild()

    def rebuild(self) -> None:
        index: dict[Any, list[Any]] = defaultdict(list)
        for item in self._store.get_all(self.module):
            if self.field not in item:
                continue
            value = item[self.field]
            try:
                index[value].append(item["id"])
            except TypeError:
                continue  # unhashable values are not indexable
        self._index = dict(index)

    def keys(self) -> list[Any]:
        return list(self._index)

    def lookup(self, value: Any) -> list[dict[str, Any]]:
        """Current copies of the items indexed under *value*."""
        try:
            ids = self._index.get(value, [])
        except TypeError:
            return []
        found: list[dict[str, Any]] = []
        for item_id in ids:
            item = self._store.get(self.module, item_id)
            if item is not None:
                found.append(item)
        return found
