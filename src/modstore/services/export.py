"""JSON export and import of whole stores.

Snapshot layout::

    {"version": "<modstore version>", "timestamp": <ms since epoch>,
     "modules": {"<module>": [<item>, ...], ...}}

Import follows the store's bulk-load contract: for every module in the
snapshot, ``clear(module)`` and then ``add`` each item in order. The whole
snapshot is checked first, so a malformed file changes nothing.
"""

from __future__ import annotations

import json
import time
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from modstore.services.base import BaseService
from modstore.services.result import ErrorCode, ServiceResult, failure

if TYPE_CHECKING:
    from modstore.infrastructure.store import Store


def export_snapshot(store: Store) -> dict[str, Any]:
    """Every module's items, in stored order."""
    from modstore import __version__

    return {
        "version": __version__,
        "timestamp": int(time.time() * 1000),
        "modules": {module: store.get_all(module) for module in store.modules()},
    }


def export_json(store: Store, *, indent: int | None = 2) -> str:
    """Serialize :func:`export_snapshot`. Non-JSON values are stringified."""
    return json.dumps(export_snapshot(store), indent=indent, default=str)


def _check_module(module: Any, items: Any) -> None:
    if not isinstance(module, str) or not module:
        msg = f"Invalid module name {module!r}"
        raise ValueError(msg)
    if not isinstance(items, list):
        msg = f"Module {module!r} must hold a list of items"
        raise ValueError(msg)
    seen: list[Any] = []
    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            msg = f"Item {index} of module {module!r} is not an object"
            raise ValueError(msg)
        item_id = item.get("id")
        if item_id is None:
            continue
        if item_id in seen:
            msg = f"Duplicate id {item_id!r} in module {module!r}"
            raise ValueError(msg)
        seen.append(item_id)


def validate_snapshot(snapshot: Any) -> dict[str, list[Mapping[str, Any]]]:
    """Check the shape of *snapshot* and return its ``modules`` mapping.

    Raises:
        ValueError: If the snapshot is not an object, has no ``modules``
            mapping, or a module holds anything but a list of objects with
            distinct ids.
    """
    if not isinstance(snapshot, Mapping):
        msg = "Snapshot must be a JSON object"
        raise ValueError(msg)
    modules = snapshot.get("modules")
    if not isinstance(modules, Mapping):
        msg = "Snapshot has no 'modules' mapping"
        raise ValueError(msg)
    for module, items in modules.items():
        _check_module(module, items)
    return dict(modules)


def import_snapshot(store: Store, snapshot: Any) -> dict[str, int]:
    """Replace each module named in *snapshot*. Returns items added per module.

    Nothing is cleared unless the whole snapshot passes
    :func:`validate_snapshot`.

    Raises:
        ValueError: If the snapshot is malformed.
    """
    modules = validate_snapshot(snapshot)
    loaded: dict[str, int] = {}
    for module, items in modules.items():
        store.clear(module)
        loaded[module] = sum(1 for item in items if store.add(module, item) is not None)
    return loaded


def import_json(store: Store, raw: str) -> dict[str, int]:
    """Parse and import a JSON snapshot (see :func:`import_snapshot`)."""
    return import_snapshot(store, json.loads(raw))


class ExportService(BaseService):
    """File-level export and import of JSON snapshots."""

    def export_file(self, path: Path) -> ServiceResult:
        payload = export_json(self._store)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(payload, encoding="utf-8")
        counts = {module: self._store.count(module) for module in self._store.modules()}
        return ServiceResult(
            ok=True,
            op="export_json",
            data={"path": str(path), "modules": counts},
        )

    def import_file(self, path: Path) -> ServiceResult:
        op = "import_json"
        if not path.is_file():
            return failure(op, ErrorCode.NOT_FOUND, f"No such file: {path}")
        try:
            loaded = import_json(self._store, path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, ValueError) as exc:
            self._workspace.skip_save()
            return failure(op, ErrorCode.INVALID_SNAPSHOT, str(exc), path=str(path))
        return ServiceResult(
            ok=True,
            op=op,
            data={"path": str(path), "modules": loaded},
            warnings=self._plugin_warnings(),
        )
