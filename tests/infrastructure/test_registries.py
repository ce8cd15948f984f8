"""Tests for the template, relation, and computed-field registries."""

from __future__ import annotations

from modstore.domain.relations import Relation
from modstore.infrastructure.registries import (
    ComputedRegistry,
    RelationRegistry,
    TemplateRegistry,
)


class TestTemplateRegistry:
    def test_register_replaces(self) -> None:
        reg = TemplateRegistry()
        reg.register("students", {"a": 1})
        reg.register("students", {"b": 2})
        assert reg.get("students") == {"b": 2}
        assert "students" in reg
        assert "tasks" not in reg

    def test_unknown_module_is_empty(self) -> None:
        assert TemplateRegistry().get("tasks") == {}


class TestRelationRegistry:
    def test_between_and_targets(self) -> None:
        reg = RelationRegistry()
        owns = Relation(key_from="id", key_to="studentId")
        reg.add("students", "tasks", owns)
        reg.add("students", "grades", Relation(key_from="id", key_to="sid"))
        assert reg.between("students", "tasks") == [owns]
        assert reg.between("tasks", "students") == []
        assert reg.targets("students") == ["tasks", "grades"]


class TestComputedRegistry:
    def test_register_and_get(self) -> None:
        reg = ComputedRegistry()
        reg.register("students", "upper", lambda item: item["name"].upper())
        fn = reg.get("students", "upper")
        assert fn is not None
        assert fn({"name": "ann"}) == "ANN"
        assert reg.get("students", "lower") is None
        assert reg.names("students") == ["upper"]
