"""Relation descriptors between modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Relation:
    """Item X (source module) relates to item Y when ``X[key_from] == Y[key_to]``.

    *extra* holds any additional options given at registration.
    """

    key_from: str
    key_to: str
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"key_from": self.key_from, "key_to": self.key_to, **self.extra}
