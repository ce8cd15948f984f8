"""Item ID and module code generation.

Two identifiers per item:
- ``id``: process-unique, base36 timestamp plus a base36 counter.
- ``code``: module-scoped sequential label, ``STU-0001`` style. The first
  three letters of the module name, uppercased, then a counter of at least
  4 digits that grows naturally past 9999.

INVARIANT: Codes are never reused within a module.
"""

from __future__ import annotations

import itertools
import re
import threading
import time

CODE_PATTERN = re.compile(r"^[A-Z0-9_]{0,3}-\d{4,}$")

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

_counter = itertools.count()
_counter_lock = threading.Lock()


def to_base36(value: int) -> str:
    """Render a non-negative integer in lowercase base36.

    Examples:
        >>> to_base36(0)
        '0'
        >>> to_base36(35)
        'z'
        >>> to_base36(36)
        '10'
    """
    if value < 0:
        msg = f"Expected a non-negative integer, got {value}"
        raise ValueError(msg)
    digits: list[str] = []
    while True:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
        if value == 0:
            break
    return "".join(reversed(digits))


def generate_item_id() -> str:
    """Generate a process-unique item ID like ``m0x1y2z3-a``."""
    with _counter_lock:
        seq = next(_counter)
    return f"{to_base36(int(time.time() * 1000))}-{to_base36(seq)}"


def code_prefix(module: str) -> str:
    """Return the code prefix for *module* (first three letters, uppercased)."""
    return module.upper()[:3]


def format_code(module: str, sequence: int) -> str:
    """Format a module code, e.g. ``format_code("students", 7) == "STU-0007"``."""
    return f"{code_prefix(module)}-{sequence:04d}"


def validate_code(code: str) -> bool:
    """Check whether *code* has the generated ``XXX-NNNN`` shape."""
    return CODE_PATTERN.match(code) is not None


class CodeSequencer:
    """Per-module monotonically increasing code counters.

    Counters only move forward; ``clear`` on the store leaves them alone so
    a cleared module never hands out an old code again.
    """

    def __init__(self) -> None:
        self._counters: dict[str, int] = {}

    def next_code(self, module: str, taken: set[str] | None = None) -> str:
        """Claim the next code for *module*, skipping any value in *taken*."""
        while True:
            sequence = self._counters.get(module, 0) + 1
            self._counters[module] = sequence
            code = format_code(module, sequence)
            if taken is None or code not in taken:
                return code

    def advance(self, module: str, sequence: int) -> None:
        """Move the counter for *module* up to *sequence*; never moves it back."""
        if sequence > self._counters.get(module, 0):
            self._counters[module] = sequence

    def current(self, module: str) -> int:
        """Last sequence number handed out for *module* (0 if none)."""
        return self._counters.get(module, 0)
