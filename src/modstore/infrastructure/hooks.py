"""HookBus — per-module, per-event ordered callbacks.

Two dispatch modes:
- ``emit_cancelable`` for ``before:*`` events: stops at the first veto.
- ``emit`` for ``after:*`` events: every callback runs, return values ignored.

INVARIANT: Callback exceptions propagate to the caller of the triggering
operation. There is no isolation between hooks.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from modstore.domain.hooks import HookDecision

logger = logging.getLogger(__name__)

HookFn = Callable[[Any], Any]


class HookBus:
    """Ordered hook registrations keyed by ``(module, event)``.

    Hooks accumulate for the lifetime of the bus; there is no removal API
    and registering the same callable twice runs it twice.
    """

    def __init__(self) -> None:
        self._hooks: dict[str, dict[str, list[HookFn]]] = defaultdict(lambda: defaultdict(list))

    def on(self, module: str, event: str, fn: HookFn) -> None:
        """Append *fn* to the callbacks for *event* on *module*."""
        self._hooks[module][event].append(fn)

    def listeners(self, module: str, event: str) -> list[HookFn]:
        """Return a copy of the callbacks registered for *event* on *module*."""
        if module not in self._hooks:
            return []
        return list(self._hooks[module].get(event, ()))

    def emit_cancelable(self, module: str, event: str, payload: Any) -> HookDecision:
        """Run before-hooks in registration order; the first veto wins."""
        for fn in self.listeners(module, event):
            if HookDecision.from_return(fn(payload)) is HookDecision.CANCEL:
                logger.debug("%s on %s vetoed by %r", event, module, fn)
                return HookDecision.CANCEL
        return HookDecision.ALLOW

    def emit(self, module: str, event: str, payload: Any) -> None:
        """Run observer hooks in registration order."""
        for fn in self.listeners(module, event):
            fn(payload)
