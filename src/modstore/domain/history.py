"""History entries — tagged records of committed mutations.

Each entry carries exactly the pre-image needed to reverse it once.
Entries are frozen; the store deep-copies item payloads on the way in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, ClassVar


class HistoryKind(StrEnum):
    """Tag of a history entry."""

    ADD = "add"
    UPDATE = "update"
    REMOVE = "remove"
    BULK_UPDATE = "bulkUpdate"
    BULK_REMOVE = "bulkRemove"


@dataclass(frozen=True)
class AddEntry:
    """An item was appended to *module*."""

    kind: ClassVar[HistoryKind] = HistoryKind.ADD

    module: str
    id: Any


@dataclass(frozen=True)
class UpdateEntry:
    """An item was patched; *before* is the full pre-image."""

    kind: ClassVar[HistoryKind] = HistoryKind.UPDATE

    module: str
    id: Any
    before: dict[str, Any]
    after: dict[str, Any]


@dataclass(frozen=True)
class RemoveEntry:
    """An item was spliced out of *module*."""

    kind: ClassVar[HistoryKind] = HistoryKind.REMOVE

    module: str
    removed: dict[str, Any]


@dataclass(frozen=True)
class Change:
    """One item's pre- and post-image within a bulk update."""

    before: dict[str, Any]
    after: dict[str, Any]


@dataclass(frozen=True)
class BulkUpdateEntry:
    """Several items were patched in one call."""

    kind: ClassVar[HistoryKind] = HistoryKind.BULK_UPDATE

    module: str
    changes: tuple[Change, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class BulkRemoveEntry:
    """Several items were removed; *before* is the whole pre-removal list."""

    kind: ClassVar[HistoryKind] = HistoryKind.BULK_REMOVE

    module: str
    before: tuple[dict[str, Any], ...] = field(default_factory=tuple)


HistoryEntry = AddEntry | UpdateEntry | RemoveEntry | BulkUpdateEntry | BulkRemoveEntry
