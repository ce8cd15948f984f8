"""BaseService — foundation for all modstore services.

Every service receives a :class:`Workspace` at construction time. The
Workspace provides the configured store, its validator, and snapshot
persistence.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modstore.infrastructure.store import Store
    from modstore.infrastructure.workspace import Workspace


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class ItemService(BaseService):
            def get(self, module: str, key: str) -> ServiceResult:
                item = self._store.get(module, key)
                ...
    """

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace

    @property
    def _store(self) -> Store:
        return self._workspace.store

    def _plugin_warnings(self) -> list[str]:
        """Turn plugin failures recorded since the last call into warnings.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        bus = self._workspace.event_bus
        if bus is None:
            return []
        return [
            f"Plugin hook {failure['hook_name']} failed: {failure['error']}"
            for failure in bus.drain_failures()
        ]
