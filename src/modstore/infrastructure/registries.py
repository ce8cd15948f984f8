"""Template, relation, and computed-field registries, keyed by module name."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from modstore.domain.items import Item, clone_item
from modstore.domain.relations import Relation


class TemplateRegistry:
    """Default item shapes applied at creation time."""

    def __init__(self) -> None:
        self._templates: dict[str, Item] = {}

    def register(self, module: str, template: Mapping[str, Any]) -> None:
        """Store a copy of *template*, replacing any earlier one."""
        self._templates[module] = clone_item(template)

    def get(self, module: str) -> Item:
        """Return a fresh copy of the template for *module* (``{}`` if none)."""
        return clone_item(self._templates.get(module, {}))

    def __contains__(self, module: object) -> bool:
        return module in self._templates


class RelationRegistry:
    """Foreign-key style links per ``(module_from, module_to)`` pair."""

    def __init__(self) -> None:
        self._relations: dict[str, dict[str, list[Relation]]] = {}

    def add(self, module_from: str, module_to: str, relation: Relation) -> None:
        targets = self._relations.setdefault(module_from, {})
        targets.setdefault(module_to, []).append(relation)

    def between(self, module_from: str, module_to: str) -> list[Relation]:
        """Relations declared from *module_from* to *module_to*, oldest first."""
        return list(self._relations.get(module_from, {}).get(module_to, ()))

    def targets(self, module_from: str) -> list[str]:
        """Modules that *module_from* has at least one relation to."""
        return list(self._relations.get(module_from, {}))


class ComputedRegistry:
    """Named derived-value functions per module."""

    def __init__(self) -> None:
        self._computed: dict[str, dict[str, Callable[[Item], Any]]] = {}

    def register(self, module: str, name: str, fn: Callable[[Item], Any]) -> None:
        self._computed.setdefault(module, {})[name] = fn

    def get(self, module: str, name: str) -> Callable[[Item], Any] | None:
        return self._computed.get(module, {}).get(name)

    def names(self, module: str) -> list[str]:
        return list(self._computed.get(module, {}))
