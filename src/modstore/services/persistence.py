"""PersistenceService — inspect and drop saved module snapshots."""

from __future__ import annotations

from modstore.services.base import BaseService
from modstore.services.result import ErrorCode, ServiceResult, failure


class PersistenceService(BaseService):
    """Operations on the SQLite snapshot database."""

    def status(self) -> ServiceResult:
        """Saved modules next to the live item count of each store module."""
        saved = self._workspace.snapshots.list_modules()
        live = {module: self._store.count(module) for module in self._store.modules()}
        return ServiceResult(
            ok=True,
            op="status",
            data={
                "database": str(self._workspace.settings.database_path),
                "saved": saved,
                "modules": live,
            },
        )

    def drop(self, module: str) -> ServiceResult:
        """Empty *module* in the store and delete its saved snapshot."""
        op = "drop_module"
        known = set(self._store.modules()) | set(self._workspace.snapshots.list_modules())
        if module not in known:
            return failure(op, ErrorCode.NOT_FOUND, f"No module {module!r}")
        count = self._store.drop_module(module)
        self._workspace.snapshots.delete_module(module)
        return ServiceResult(ok=True, op=op, data={"module": module, "removed": count})
