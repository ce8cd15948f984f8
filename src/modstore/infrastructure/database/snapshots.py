"""SnapshotRepository — per-module JSON snapshots in SQLite.

Loading follows the store's bulk-load contract: ``clear(module)`` and then
``add`` for every item in saved order, so hooks and templates apply. The
module's code counter is fast-forwarded first so removed codes are not
handed out again.

A row that cannot be re-added (a duplicate id, or a plugin veto) is
skipped with a warning; the caller compares the loaded count against
:meth:`SnapshotRepository.saved_counts` to avoid saving the shortened module.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, select

from modstore.domain.errors import DuplicateItemError
from modstore.infrastructure.database.schema import module_snapshots

if TYPE_CHECKING:
    from collections.abc import Collection

    from sqlalchemy.engine import Engine

    from modstore.infrastructure.store import Store

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class SnapshotRepository:
    """Save and restore store modules as whole-module snapshots."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def save_module(self, store: Store, module: str) -> int:
        """Replace the saved snapshot of *module*. Returns the item count."""
        items = store.get_all(module)
        payload = json.dumps(items, default=str)
        with self._engine.begin() as conn:
            conn.execute(delete(module_snapshots).where(module_snapshots.c.module == module))
            conn.execute(
                insert(module_snapshots).values(
                    module=module,
                    payload=payload,
                    item_count=len(items),
                    code_sequence=store.code_sequence(module),
                    saved_at=_now_iso(),
                )
            )
        logger.debug("Saved snapshot %s (%d items)", module, len(items))
        return len(items)

    def save_all(self, store: Store, *, exclude: Collection[str] = ()) -> dict[str, int]:
        """Save every module the store knows about, except those in *exclude*."""
        return {
            module: self.save_module(store, module)
            for module in store.modules()
            if module not in exclude
        }

    def read_module(self, module: str) -> list[dict[str, Any]] | None:
        """Return the saved items of *module*, or None if never saved."""
        row = self._read_row(module)
        if row is None:
            return None
        return json.loads(row.payload)

    def load_module(self, store: Store, module: str) -> int | None:
        """Replace *module* in the store with its snapshot.

        Returns how many items were re-added (vetoed adds are not counted),
        or None if no snapshot exists.
        """
        row = self._read_row(module)
        if row is None:
            return None
        items = json.loads(row.payload)
        store.clear(module)
        store.restore_code_sequence(module, row.code_sequence)
        loaded = 0
        for item in items:
            try:
                added = store.add(module, item)
            except DuplicateItemError as exc:
                logger.warning("Skipping saved %s row: %s", module, exc)
                continue
            if added is not None:
                loaded += 1
        if loaded < len(items):
            logger.warning("Loaded %d of %d saved %s items", loaded, len(items), module)
        else:
            logger.debug("Loaded snapshot %s (%d items)", module, loaded)
        return loaded

    def load_all(self, store: Store) -> dict[str, int]:
        """Load every saved module into *store*."""
        loaded: dict[str, int] = {}
        for module in self.list_modules():
            count = self.load_module(store, module)
            if count is not None:
                loaded[module] = count
        return loaded

    def saved_counts(self) -> dict[str, int]:
        """Item count recorded with each saved module."""
        with self._engine.connect() as conn:
            rows = conn.execute(
                select(module_snapshots.c.module, module_snapshots.c.item_count)
            ).fetchall()
        return {row.module: row.item_count for row in rows}

    def list_modules(self) -> list[str]:
        """Names of every saved module, sorted."""
        with self._engine.connect() as conn:
            rows = conn.execute(
                select(module_snapshots.c.module).order_by(module_snapshots.c.module)
            ).fetchall()
        return [row.module for row in rows]

    def delete_module(self, module: str) -> bool:
        with self._engine.begin() as conn:
            result = conn.execute(
                delete(module_snapshots).where(module_snapshots.c.module == module)
            )
        return bool(result.rowcount)

    def _read_row(self, module: str) -> Any:
        with self._engine.connect() as conn:
            return conn.execute(
                select(module_snapshots.c.payload, module_snapshots.c.code_sequence).where(
                    module_snapshots.c.module == module
                )
            ).first()
