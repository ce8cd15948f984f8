"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from modstore.domain.items import normalize_tags
from modstore.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from modstore.services.result import ServiceResult

_FIXED_COLUMNS = ("id", "code", "tags")


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} - {msg}"

    items = result.data.get("items")
    if isinstance(items, list):
        return "\n".join(str(item["id"]) for item in items if "id" in item)
    item = result.data.get("item")
    if isinstance(item, dict) and "id" in item:
        return str(item["id"])

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _display(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), default=str)
    if value is None:
        return ""
    return str(value)


def _tag_list(tags: Any) -> str:
    return ", ".join(str(tag) for tag in normalize_tags(tags))


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    console.print(Text("OK", style="ms.ok"), Text(f"  {result.op}", style="ms.op"))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="ms.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="ms.id")
    elif key == "code":
        v = Text(str(value), style="ms.code")
    else:
        v = Text(_display(value))
    console.print(k, v)


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(f"    {k}: {v}")


def _extra_columns(items: list[dict[str, Any]]) -> list[str]:
    """Field names beyond id/code/tags, in first-seen order."""
    seen: dict[str, None] = {}
    for item in items:
        for key in item:
            if key not in _FIXED_COLUMNS:
                seen.setdefault(key, None)
    return list(seen)


def _item_table(items: list[dict[str, Any]]) -> Table:
    """Build a Rich Table for a list of store items."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="ms.id", no_wrap=True)
    table.add_column("Code", style="ms.code", no_wrap=True)
    columns = _extra_columns(items)
    for col in columns:
        table.add_column(col.replace("_", " ").title())
    table.add_column("Tags", style="ms.tag")

    for item in items:
        row = [Text(str(item.get("id", ""))), Text(_display(item.get("code")))]
        row.extend(Text(_display(item.get(col))) for col in columns)
        row.append(Text(_tag_list(item.get("tags"))))
        table.add_row(*row)

    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="ms.error")
    op = Text(f"  {result.op}", style="ms.op")
    console.print(label, op, Text(" - "), Text(msg))

    if err and err.detail.get("errors"):
        for entry in err.detail["errors"]:
            field = Text(f"    {entry.get('field', '?')}: ", style="ms.key")
            console.print(field, Text(str(entry.get("message", ""))))
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            if k != "errors":
                console.print(Text(f"    {k}: {v}"))


# ── Item renderers ────────────────────────────────────────────────────


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render add/update/tag results: status line plus the item's key fields."""
    _status_line(console, result)
    item = result.data.get("item", {})
    for key in ("id", "code"):
        if item.get(key) is not None:
            _field(console, key, item[key])
    if item.get("tags"):
        _field(console, "tags", _tag_list(item["tags"]))
    if "fields_changed" in result.data:
        _field(console, "fields_changed", ", ".join(result.data["fields_changed"]))
    if verbose:
        _render_meta(console, result)


def _render_removed(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "id", result.data.get("id"))
    if result.data.get("code") is not None:
        _field(console, "code", result.data["code"])


def _render_single_item(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render get_item as a panel of fields."""
    item = result.data.get("item", {})
    lines: list[str] = []
    for key, value in item.items():
        if key in ("id", "code"):
            continue
        if key == "tags":
            lines.append(f"tags: {_tag_list(value)}")
        else:
            lines.append(f"{key}: {_display(value)}")

    title = str(item.get("id", "?"))
    if item.get("code"):
        title = f"{title} ({item['code']})"
    body = Text("\n".join(lines) or "(no fields)")
    console.print(Panel(body, title=Text(title), expand=False))


def _render_item_table(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render list/search/filter/related results as a table."""
    items = result.data.get("items", [])
    if items:
        console.print(_item_table(items))
    console.print(f"{result.data.get('count', len(items))} items")
    if verbose or result.op == "list_items":
        _render_meta(console, result)


# ── Other renderers ───────────────────────────────────────────────────


def _render_stats(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    label = d.get("op", "count")
    if d.get("field"):
        label = f"{label}({d['field']})"
    console.print(
        Text(f"{d.get('module')} ", style="ms.op"),
        Text(f"{label} = ", style="ms.key"),
        Text(_display(d.get("value")), style="ms.value"),
    )


def _render_module_counts(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    """Render export/import/status results with a per-module count table."""
    _status_line(console, result)
    for key in ("path", "database"):
        if key in result.data:
            _field(console, key, result.data[key])
    if "saved" in result.data:
        _field(console, "saved", ", ".join(result.data["saved"]) or "(none)")
    modules: dict[str, int] = result.data.get("modules", {})
    if modules:
        table = Table(show_header=True, pad_edge=False, expand=False)
        table.add_column("Module", style="ms.op")
        table.add_column("Items", justify="right")
        for module, count in modules.items():
            table.add_row(module, str(count))
        console.print(table)


def _render_validation_errors(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    errors = result.data.get("errors", [])
    console.print(f"[bold]{result.data.get('count', len(errors))} validation failures[/bold]")
    for entry in errors:
        console.print(f"\n  [ms.op]{entry['module']}[/ms.op] [dim]{entry['timestamp']}[/dim]")
        for err in entry["errors"]:
            console.print(Text(f"    {err['field']}: ", style="ms.key"), Text(err["message"]))


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback: status line plus key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS: dict[str, Any] = {
    "add_item": _render_mutation,
    "update_item": _render_mutation,
    "tag_item": _render_mutation,
    "untag_item": _render_mutation,
    "remove_item": _render_removed,
    "get_item": _render_single_item,
    "list_items": _render_item_table,
    "search": _render_item_table,
    "filter": _render_item_table,
    "related": _render_item_table,
    "stats": _render_stats,
    "export_json": _render_module_counts,
    "import_json": _render_module_counts,
    "status": _render_module_counts,
    "validation_errors": _render_validation_errors,
}
