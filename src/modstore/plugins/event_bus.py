"""Synchronous event dispatch via pluggy.

The store calls :meth:`EventBus.dispatch` after each committed mutation.
Unlike store hooks, plugin hooks are isolated: a failing plugin is logged
and counted, and the mutation that triggered it still stands.

INVARIANT: Plugin failures are warnings, never errors.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from modstore.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class EventBus:
    """Forward lifecycle events to registered pluggy hook implementations.

    Parameters:
        plugin_manager: Loaded PluginManager for hook dispatch.
    """

    def __init__(self, plugin_manager: PluginManager) -> None:
        self._pm = plugin_manager
        self._dispatched = 0
        self._failures: list[dict[str, Any]] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def dispatch(self, hook_name: str, payload: dict[str, Any]) -> bool:
        """Call *hook_name* with *payload*. Returns False if a plugin raised."""
        hook_fn = getattr(self._pm.hook, hook_name, None)
        if hook_fn is None:
            return True

        self._dispatched += 1
        try:
            hook_fn(**payload)
        except Exception as exc:
            logger.warning("Plugin hook %s failed: %s", hook_name, exc, exc_info=True)
            self._failures.append({"hook_name": hook_name, "error": str(exc)})
            return False
        return True

    @property
    def dispatched(self) -> int:
        """Number of events handed to pluggy."""
        return self._dispatched

    @property
    def failures(self) -> list[dict[str, Any]]:
        """``{hook_name, error}`` records for each failed dispatch."""
        return list(self._failures)

    def drain_failures(self) -> list[dict[str, Any]]:
        """Return and forget the recorded failures."""
        failures, self._failures = self._failures, []
        return failures
