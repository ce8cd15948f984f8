"""QueryService — listing, search, filters, relations, and statistics."""

from __future__ import annotations

from typing import Any

from modstore.domain.errors import PreconditionError
from modstore.services.base import BaseService
from modstore.services.indexing import paginate
from modstore.services.result import ErrorCode, ServiceResult, failure

_STAT_OPS = frozenset({"count", "sum", "avg"})


class QueryService(BaseService):
    """Read-side operations. None of these mutate items."""

    def list_items(
        self,
        module: str,
        *,
        sort_by: str | None = None,
        page: int | None = None,
        page_size: int = 10,
    ) -> ServiceResult:
        """All items of *module*, optionally sorted and paginated.

        Sorting reorders the stored list, so later listings keep the order.
        """
        op = "list_items"
        if page is None:
            items = self._store.get_all(module, sort_by=sort_by)
            return ServiceResult(ok=True, op=op, data={"count": len(items), "items": items})
        try:
            result = paginate(self._store, module, page, page_size, sort_by=sort_by)
        except ValueError as exc:
            return failure(op, ErrorCode.INVALID_INPUT, str(exc))
        return ServiceResult(
            ok=True,
            op=op,
            data={"count": len(result.items), "items": result.items},
            meta={
                "page": result.page,
                "page_size": result.page_size,
                "total": result.total,
                "pages": result.pages,
            },
        )

    def search(self, module: str, text: str, fields: list[str] | None = None) -> ServiceResult:
        """Substring search; an item matching several fields is listed once per field."""
        items = self._store.search(module, text, fields or None)
        return ServiceResult(ok=True, op="search", data={"count": len(items), "items": items})

    def filter(self, module: str, filters: Any) -> ServiceResult:
        """Evaluate a raw filter tree (lists, mappings, ``{field, op, value}``)."""
        op = "filter"
        try:
            items = self._store.query(module, filters)
        except PreconditionError as exc:
            return failure(op, ErrorCode.INVALID_FILTER, str(exc))
        return ServiceResult(ok=True, op=op, data={"count": len(items), "items": items})

    def related(
        self,
        module: str,
        key: str,
        target: str,
        *,
        limit: int | None = None,
    ) -> ServiceResult:
        op = "related"
        source = self._store.get(module, key)
        if source is None:
            message = f"No item {key!r} in module {module!r}"
            return failure(op, ErrorCode.NOT_FOUND, message, module=module)
        items = self._store.get_related(module, key, target, limit=limit)
        return ServiceResult(
            ok=True,
            op=op,
            data={"source": source["id"], "target": target, "count": len(items), "items": items},
        )

    def stats(self, module: str, stat: str = "count", field: str | None = None) -> ServiceResult:
        op = "stats"
        if stat not in _STAT_OPS:
            return failure(op, ErrorCode.INVALID_INPUT, f"Unknown statistic {stat!r}")
        if stat != "count" and not field:
            return failure(op, ErrorCode.INVALID_INPUT, f"Statistic {stat!r} needs a field")
        value = self._store.stats(module, stat, field)
        data: dict[str, Any] = {"module": module, "op": stat, "value": value}
        if field:
            data["field"] = field
        return ServiceResult(ok=True, op=op, data=data)
