"""Tests for history recording, bulk operations, and undo."""

from __future__ import annotations

import pytest

from modstore.domain.history import AddEntry, BulkRemoveEntry, BulkUpdateEntry, HistoryKind
from modstore.domain.hooks import HookEvent
from modstore.domain.predicates import FunctionPredicate, KeyPredicate
from modstore.infrastructure.history import HistoryStack
from modstore.infrastructure.store import Store


class TestHistoryStack:
    def test_push_pop(self) -> None:
        stack = HistoryStack()
        assert stack.pop() is None
        stack.push(AddEntry(module="m", id="a"))
        assert len(stack) == 1
        assert stack.pop() == AddEntry(module="m", id="a")
        assert len(stack) == 0

    def test_entries_are_copies(self) -> None:
        stack = HistoryStack()
        stack.push(BulkRemoveEntry(module="m", before=({"id": "a"},)))
        stack.entries()[0].before[0]["id"] = "changed"
        assert stack.entries()[0].before[0]["id"] == "a"


class TestUndo:
    def test_empty_history(self, store: Store) -> None:
        assert store.undo() is False

    def test_undo_add(self, store: Store) -> None:
        item = store.add("students", {"name": "Ann"})
        assert item is not None
        assert store.undo() is True
        assert store.get("students", item["id"]) is None
        assert [entry.kind for entry in store.history()] == [HistoryKind.REMOVE]

    def test_undo_add_runs_remove_hooks(self, store: Store) -> None:
        store.add("students", {})
        store.on("students", HookEvent.BEFORE_REMOVE, lambda item: False)
        assert store.undo() is True
        assert store.count("students") == 1

    def test_undo_update_restores_exact_pre_image(self, store: Store) -> None:
        item = store.add("students", {"name": "Ann", "age": 20})
        assert item is not None
        store.update("students", item["id"], {"age": 21, "major": "cs"})
        assert store.undo() is True
        assert store.get("students", item["id"]) == item

    def test_undo_remove_appends_at_end(self, store: Store) -> None:
        first = store.add("students", {"name": "Ann"})
        store.add("students", {"name": "Bo"})
        assert first is not None
        store.remove("students", first["id"])
        assert store.undo() is True
        assert [i["name"] for i in store.get_all("students")] == ["Bo", "Ann"]

    def test_undo_is_lifo(self, store: Store) -> None:
        item = store.add("students", {"age": 1})
        assert item is not None
        store.update("students", item["id"], {"age": 2})
        store.update("students", item["id"], {"age": 3})
        store.undo()
        assert store.get("students", item["id"])["age"] == 2
        store.undo()
        assert store.get("students", item["id"])["age"] == 1

    def test_clear_wipes_whole_history(self, store: Store) -> None:
        store.add("students", {})
        store.add("tasks", {})
        store.clear("tasks")
        assert store.history() == []
        assert store.undo() is False
        assert store.count("students") == 1


class TestBulkUpdate:
    def test_counts_and_single_entry(self, store: Store) -> None:
        for age in (17, 20, 25):
            store.add("students", {"age": age})
        adults = FunctionPredicate(lambda i: i["age"] >= 18)
        changed = store.bulk_update("students", adults, {"adult": True})
        assert changed == 2
        history = store.history()
        assert isinstance(history[-1], BulkUpdateEntry)
        assert len(history[-1].changes) == 2

    def test_skips_vetoed_items(self, store: Store) -> None:
        for name in ("Ann", "Bo"):
            store.add("students", {"name": name})
        store.on(
            "students",
            HookEvent.BEFORE_UPDATE,
            lambda change: change["before"]["name"] != "Bo",
        )
        assert store.bulk_update("students", FunctionPredicate(lambda i: True), {"x": 1}) == 1
        assert [i.get("x") for i in store.get_all("students")] == [1, None]

    def test_no_match_records_nothing(self, store: Store) -> None:
        store.add("students", {})
        assert store.bulk_update("students", KeyPredicate("nope"), {"x": 1}) == 0
        assert len(store.history()) == 1

    def test_undo_restores_every_item(self, store: Store) -> None:
        before = [store.add("students", {"age": age}) for age in (1, 2)]
        store.bulk_update("students", FunctionPredicate(lambda i: True), {"age": 9, "new": 1})
        assert store.undo() is True
        assert store.get_all("students") == before

    def test_predicate_sees_copies(self, store: Store) -> None:
        store.add("students", {"name": "Ann"})

        def sneaky(item: dict) -> bool:
            item["name"] = "changed"
            return False

        store.bulk_update("students", FunctionPredicate(sneaky), {})
        assert store.get_all("students")[0]["name"] == "Ann"

    @pytest.mark.parametrize("bad", ["STU-0001", lambda i: True, None])
    def test_rejects_bare_predicates(self, store: Store, bad: object) -> None:
        with pytest.raises(TypeError, match="KeyPredicate or FunctionPredicate"):
            store.bulk_update("students", bad, {"x": 1})  # type: ignore[arg-type]


class TestBulkRemove:
    def test_removes_matches(self, store: Store) -> None:
        for age in (17, 20, 25):
            store.add("students", {"age": age})
        removed = store.bulk_remove("students", FunctionPredicate(lambda i: i["age"] > 18))
        assert removed == 2
        assert [i["age"] for i in store.get_all("students")] == [17]

    def test_key_predicate(self, store: Store) -> None:
        item = store.add("students", {})
        store.add("students", {})
        assert item is not None
        assert store.bulk_remove("students", KeyPredicate(item["code"])) == 1
        assert store.count("students") == 1

    def test_undo_restores_original_order(self, store: Store) -> None:
        items = [store.add("students", {"n": n}) for n in range(4)]
        store.bulk_remove("students", FunctionPredicate(lambda i: i["n"] % 2 == 0))
        assert store.undo() is True
        assert store.get_all("students") == items

    def test_vetoed_items_stay(self, store: Store) -> None:
        for n in range(3):
            store.add("students", {"n": n})
        store.on("students", HookEvent.BEFORE_REMOVE, lambda item: item["n"] != 1)
        assert store.bulk_remove("students", FunctionPredicate(lambda i: True)) == 2
        assert [i["n"] for i in store.get_all("students")] == [1]

    def test_unknown_module(self, store: Store) -> None:
        assert store.bulk_remove("nothing", FunctionPredicate(lambda i: True)) == 0

    def test_rejects_bare_predicates(self, store: Store) -> None:
        with pytest.raises(TypeError):
            store.bulk_remove("students", "STU-0001")  # type: ignore[arg-type]
