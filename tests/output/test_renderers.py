"""Tests for operation-specific Rich renderers."""

from modstore.output.renderers import render_quiet, render_result
from modstore.services.result import ServiceError, ServiceResult

# ── Helpers ───────────────────────────────────────────────────────────


def _ok(op: str, /, **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str, code: str, message: str, **detail: object) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=message, detail=dict(detail)),
    )


_ANN = {"id": "a1", "code": "STU-0001", "name": "Ann", "age": 20, "tags": ["x", "y"]}
_BOB = {"id": "b2", "code": "STU-0002", "name": "Bob", "tags": []}


# ── Error rendering ──────────────────────────────────────────────────


class TestErrorRenderer:
    def test_basic_error(self) -> None:
        output = render_result(_err("get_item", "NOT_FOUND", "No item 'zz' in students"))
        assert "ERROR" in output
        assert "get_item" in output
        assert "No item 'zz' in students" in output

    def test_lists_field_errors(self) -> None:
        result = _err(
            "add_item",
            "VALIDATION_FAILED",
            "Rejected",
            errors=[{"field": "name", "message": "name is required"}],
        )
        output = render_result(result)
        assert "name: name is required" in output

    def test_verbose_shows_detail(self) -> None:
        output = render_result(_err("filter", "INVALID", "Bad", module="students"), verbose=True)
        assert "detail" in output
        assert "module: students" in output

    def test_markup_in_message_is_literal(self) -> None:
        output = render_result(_err("search", "INVALID", "bad pattern [a-"))
        assert "[a-" in output

    def test_no_error_object(self) -> None:
        output = render_result(ServiceResult(ok=False, op="test"))
        assert "Unknown error" in output


# ── Item rendering ───────────────────────────────────────────────────


class TestItemRenderers:
    def test_mutation(self) -> None:
        output = render_result(_ok("add_item", item=_ANN))
        assert "OK" in output
        assert "add_item" in output
        assert "a1" in output
        assert "STU-0001" in output
        assert "x, y" in output

    def test_update_shows_fields_changed(self) -> None:
        output = render_result(_ok("update_item", item=_ANN, fields_changed=["age", "name"]))
        assert "fields_changed: age, name" in output

    def test_removed(self) -> None:
        output = render_result(_ok("remove_item", id="a1", code="STU-0001"))
        assert "remove_item" in output
        assert "STU-0001" in output

    def test_single_item_panel(self) -> None:
        output = render_result(_ok("get_item", item=_ANN))
        assert "a1 (STU-0001)" in output
        assert "name: Ann" in output
        assert "tags: x, y" in output

    def test_item_table(self) -> None:
        output = render_result(_ok("list_items", items=[_ANN, _BOB], count=2))
        assert "ID" in output
        assert "Name" in output
        assert "Age" in output
        assert "Bob" in output
        assert "2 items" in output

    def test_scalar_tags_rendered(self) -> None:
        item = {"id": "c3", "code": "STU-0003", "tags": 5}
        assert "tags: 5" in render_result(_ok("update_item", item=item))
        assert "tags: 5" in render_result(_ok("get_item", item=item))
        assert "c3" in render_result(_ok("list_items", items=[item], count=1))

    def test_empty_table(self) -> None:
        output = render_result(_ok("search", items=[], count=0))
        assert "0 items" in output

    def test_list_shows_pagination_meta(self) -> None:
        result = ServiceResult(
            ok=True,
            op="list_items",
            data={"items": [_ANN], "count": 1},
            meta={"page": 1, "pages": 3},
        )
        output = render_result(result)
        assert "pages: 3" in output


# ── Other renderers ──────────────────────────────────────────────────


class TestOtherRenderers:
    def test_stats(self) -> None:
        output = render_result(_ok("stats", module="students", op="avg", field="age", value=21.5))
        assert "avg(age) = 21.5" in output

    def test_module_counts(self) -> None:
        output = render_result(
            _ok("export_json", path="/tmp/out.json", modules={"students": 2, "tasks": 5})
        )
        assert "/tmp/out.json" in output
        assert "Module" in output
        assert "tasks" in output
        assert "5" in output

    def test_generic_fallback(self) -> None:
        output = render_result(_ok("mystery", answer=42))
        assert "OK" in output
        assert "answer: 42" in output


# ── Quiet rendering ──────────────────────────────────────────────────


class TestQuietRenderer:
    def test_items_print_ids(self) -> None:
        assert render_quiet(_ok("list_items", items=[_ANN, _BOB])) == "a1\nb2"

    def test_single_item_prints_id(self) -> None:
        assert render_quiet(_ok("add_item", item=_ANN)) == "a1"

    def test_other_ops(self) -> None:
        assert render_quiet(_ok("stats", value=3)) == "OK: stats"

    def test_error(self) -> None:
        result = _err("get_item", "NOT_FOUND", "missing")
        assert render_quiet(result) == "ERROR: get_item - missing"
