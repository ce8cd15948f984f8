"""Tests for bulk-operation predicates."""

from __future__ import annotations

import dataclasses

import pytest

from modstore.domain.predicates import FunctionPredicate, KeyPredicate


class TestKeyPredicate:
    def test_matches_id_or_code(self) -> None:
        pred = KeyPredicate("STU-0001")
        assert pred.matches({"id": "x", "code": "STU-0001"})
        assert not pred.matches({"id": "y", "code": "STU-0002"})

    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            KeyPredicate("a").key = "b"  # type: ignore[misc]


class TestFunctionPredicate:
    def test_truthiness(self) -> None:
        pred = FunctionPredicate(lambda item: item.get("age", 0))
        assert pred.matches({"age": 3})
        assert not pred.matches({"age": 0})
        assert not pred.matches({})
