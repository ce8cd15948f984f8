"""Pluggy hook specifications for store lifecycle events and setup extensions.

Five lifecycle events fire synchronously after the store's own after-hooks.
One setup-time hook lets plugins contribute module templates.
"""

from __future__ import annotations

from typing import Any

import pluggy

hookspec = pluggy.HookspecMarker("modstore")
hookimpl = pluggy.HookimplMarker("modstore")


class StoreHookSpec:
    """Hook specifications for the modstore plugin system."""

    @hookspec
    def post_add(self, module: str, item_id: Any, code: str, tags: list[str]) -> None:
        """Called after an item is added."""

    @hookspec
    def post_update(self, module: str, item_id: Any, fields_changed: list[str]) -> None:
        """Called after an item is updated (once per item in a bulk update)."""

    @hookspec
    def post_remove(self, module: str, item_id: Any) -> None:
        """Called after an item is removed (once per item in a bulk remove)."""

    @hookspec
    def post_undo(self, kind: str, module: str) -> None:
        """Called after a history entry is reversed."""

    @hookspec
    def post_clear(self, module: str | None) -> None:
        """Called after a module (or the whole store, when None) is cleared."""

    @hookspec
    def register_templates(self) -> dict[str, dict[str, Any]] | None:
        """Return module -> template mappings to register on new stores."""
