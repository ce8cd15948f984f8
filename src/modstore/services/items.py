"""ItemService — CRUD over store modules with explicit failure codes.

The store collapses "item absent" and "hook vetoed" into the same
``None`` / ``False`` return. This service tells them apart by checking
existence first, and reports ``NOT_FOUND`` and ``VETOED`` separately.
Validation failures recorded during a vetoed call are attached to the
error detail.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from modstore.domain.errors import DuplicateItemError, PreconditionError
from modstore.domain.ids import validate_code
from modstore.services.base import BaseService
from modstore.services.result import ErrorCode, ServiceResult, failure

logger = logging.getLogger(__name__)

# Assigned on add; an update may not move them.
_KEY_FIELDS = ("id", "code")


class ItemService(BaseService):
    """Create, read, update, delete, and tag items."""

    def add(self, module: str, fields: Mapping[str, Any] | None = None) -> ServiceResult:
        op = "add_item"
        code = (fields or {}).get("code")
        if code is not None and not (isinstance(code, str) and validate_code(code)):
            message = f"Malformed code {code!r}; expected the XXX-NNNN shape"
            return failure(op, ErrorCode.INVALID_INPUT, message, module=module)
        mark = len(self._workspace.validator.errors())
        try:
            item = self._store.add(module, fields or {})
        except DuplicateItemError as exc:
            return failure(op, ErrorCode.DUPLICATE_ID, str(exc), module=module, id=exc.item_id)
        except PreconditionError as exc:
            return failure(op, ErrorCode.INVALID_INPUT, str(exc))
        if item is None:
            return self._vetoed(op, module, mark)
        return ServiceResult(ok=True, op=op, data={"item": item}, warnings=self._plugin_warnings())

    def get(self, module: str, key: str) -> ServiceResult:
        op = "get_item"
        item = self._store.get(module, key)
        if item is None:
            return self._not_found(op, module, key)
        return ServiceResult(ok=True, op=op, data={"item": item})

    def update(self, module: str, key: str, patch: Mapping[str, Any]) -> ServiceResult:
        op = "update_item"
        frozen = sorted(k for k in _KEY_FIELDS if k in patch)
        if frozen:
            message = f"Fields {frozen} are assigned on add and cannot be updated"
            return failure(op, ErrorCode.INVALID_INPUT, message, module=module, key=key)
        if self._store.get(module, key) is None:
            return self._not_found(op, module, key)
        mark = len(self._workspace.validator.errors())
        item = self._store.update(module, key, patch)
        if item is None:
            return self._vetoed(op, module, mark, key=key)
        return ServiceResult(
            ok=True,
            op=op,
            data={"item": item, "fields_changed": sorted(patch)},
            warnings=self._plugin_warnings(),
        )

    def remove(self, module: str, key: str) -> ServiceResult:
        op = "remove_item"
        existing = self._store.get(module, key)
        if existing is None:
            return self._not_found(op, module, key)
        if not self._store.remove(module, key):
            return self._vetoed(op, module, None, key=key)
        return ServiceResult(
            ok=True,
            op=op,
            data={"id": existing["id"], "code": existing.get("code")},
            warnings=self._plugin_warnings(),
        )

    def tag(self, module: str, key: str, tag: str, *, remove: bool = False) -> ServiceResult:
        """Add (or, with *remove*, drop) one tag."""
        op = "untag_item" if remove else "tag_item"
        if self._store.get(module, key) is None:
            return self._not_found(op, module, key)
        mark = len(self._workspace.validator.errors())
        if remove:
            item = self._store.remove_tag(module, key, tag)
        else:
            item = self._store.add_tag(module, key, tag)
        if item is None:
            return self._vetoed(op, module, mark, key=key)
        return ServiceResult(ok=True, op=op, data={"item": item}, warnings=self._plugin_warnings())

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _not_found(op: str, module: str, key: str) -> ServiceResult:
        message = f"No item {key!r} in module {module!r}"
        return failure(op, ErrorCode.NOT_FOUND, message, module=module)

    def _vetoed(
        self,
        op: str,
        module: str,
        mark: int | None,
        *,
        key: str | None = None,
    ) -> ServiceResult:
        detail: dict[str, Any] = {"module": module}
        if key is not None:
            detail["key"] = key
        if mark is not None:
            new_errors = self._workspace.validator.errors()[mark:]
            if new_errors:
                detail["errors"] = [e for entry in new_errors for e in entry["errors"]]
        logger.debug("%s on %s vetoed by a before-hook", op, module)
        message = f"Operation on module {module!r} was vetoed by a hook"
        return failure(op, ErrorCode.VETOED, message, **detail)
