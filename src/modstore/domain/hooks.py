"""Hook decisions and lifecycle event names.

Before-hooks are cancelable and answer with a :class:`HookDecision`.
After-hooks are observers; their return value is ignored.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class HookDecision(StrEnum):
    """Outcome of a cancelable ``before:*`` dispatch."""

    ALLOW = "allow"
    CANCEL = "cancel"

    @classmethod
    def from_return(cls, value: Any) -> HookDecision:
        """Interpret a callback's return value.

        ``HookDecision.CANCEL`` and the literal ``False`` veto. Anything
        else (``None``, ``0``, ``""``, ``ALLOW``) allows.
        """
        if value is cls.CANCEL or value is False:
            return cls.CANCEL
        return cls.ALLOW


class HookEvent(StrEnum):
    """Events fired by the store."""

    BEFORE_ADD = "before:add"
    AFTER_ADD = "after:add"
    BEFORE_UPDATE = "before:update"
    AFTER_UPDATE = "after:update"
    BEFORE_REMOVE = "before:remove"
    AFTER_REMOVE = "after:remove"
    RELATION_ADDED = "relation:added"
