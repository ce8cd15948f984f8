"""HistoryStack — append-only during forward operations, pop-only during undo."""

from __future__ import annotations

import copy

from modstore.domain.history import HistoryEntry


class HistoryStack:
    """LIFO log of committed mutations. Undoing an undo is not supported."""

    def __init__(self) -> None:
        self._entries: list[HistoryEntry] = []

    def push(self, entry: HistoryEntry) -> None:
        self._entries.append(entry)

    def pop(self) -> HistoryEntry | None:
        """Remove and return the newest entry, or None when empty."""
        if not self._entries:
            return None
        return self._entries.pop()

    def clear(self) -> None:
        self._entries.clear()

    def entries(self) -> list[HistoryEntry]:
        """Copies of every entry, oldest first."""
        return copy.deepcopy(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
