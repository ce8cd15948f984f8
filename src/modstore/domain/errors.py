"""Store exceptions.

Lookups that miss and hooks that veto never raise; they collapse to
``None`` / ``False`` / ``[]``. Only broken preconditions raise.
"""

from __future__ import annotations


class PreconditionError(ValueError):
    """A required argument is missing or invalid."""


class DuplicateItemError(PreconditionError):
    """An explicit ``id`` collides with a live item in the same module."""

    def __init__(self, module: str, item_id: str) -> None:
        super().__init__(f"Item {item_id!r} already exists in module {module!r}")
        self.module = module
        self.item_id = item_id
