"""Tests for pagination and field indexes."""

from __future__ import annotations

import pytest

from modstore.infrastructure.store import Store
from modstore.services.indexing import FieldIndex, paginate


@pytest.fixture
def filled(store: Store) -> Store:
    for n in range(7):
        store.add("tasks", {"n": n, "kind": "odd" if n % 2 else "even"})
    return store


class TestPaginate:
    def test_pages(self, filled: Store) -> None:
        page = paginate(filled, "tasks", 3, 3)
        assert page.total == 7
        assert page.pages == 3
        assert [i["n"] for i in page.items] == [6]

    def test_page_past_end_is_empty(self, filled: Store) -> None:
        assert paginate(filled, "tasks", 9, 3).items == []

    def test_empty_module(self, store: Store) -> None:
        page = paginate(store, "none")
        assert page.total == 0
        assert page.pages == 0

    @pytest.mark.parametrize(("page", "size"), [(0, 5), (1, 0)])
    def test_rejects_bad_bounds(self, filled: Store, page: int, size: int) -> None:
        with pytest.raises(ValueError, match=">= 1"):
            paginate(filled, "tasks", page, size)


class TestFieldIndex:
    def test_lookup(self, filled: Store) -> None:
        index = FieldIndex(filled, "tasks", "kind")
        assert sorted(index.keys()) == ["even", "odd"]
        assert [i["n"] for i in index.lookup("odd")] == [1, 3, 5]
        assert index.lookup("none") == []

    def test_survives_reorder_and_skips_removed(self, filled: Store) -> None:
        index = FieldIndex(filled, "tasks", "kind")
        filled.get_all("tasks", sort_by="n", reverse=True)
        filled.remove("tasks", "TAS-0002")
        assert [i["n"] for i in index.lookup("odd")] == [3, 5]

    def test_rebuild_and_unhashable_values(self, store: Store) -> None:
        store.add("tasks", {"labels": ["a"]})
        index = FieldIndex(store, "tasks", "labels")
        assert index.keys() == []
        assert index.lookup(["a"]) == []
        store.add("tasks", {"labels": "b"})
        index.rebuild()
        assert index.keys() == ["b"]
