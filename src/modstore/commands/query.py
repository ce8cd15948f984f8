"""Command group: search, filters, relations, and statistics."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from modstore.commands._base import StoreGroup
from modstore.commands._params import parse_json_argument
from modstore.services.query import QueryService

if TYPE_CHECKING:
    from modstore.commands._context import AppContext

_QUERY_EXAMPLES = """\
  modstore query search students ann --field name
  modstore query filter students '{"field": "age", "op": "gte", "value": 18}'
  modstore query related students STU-0001 tasks --limit 5
  modstore query stats tasks --op avg --field points"""


@click.group(cls=StoreGroup, examples=_QUERY_EXAMPLES)
@click.pass_obj
def query(app: AppContext) -> None:
    """Search, filter, and summarize module items."""


@query.command(
    examples="""\
  modstore query search students ann
  modstore query search students ann --field name --field email"""
)
@click.argument("module")
@click.argument("text")
@click.option("--field", "fields", multiple=True, help="Field to search (default: all).")
@click.pass_obj
def search(app: AppContext, module: str, text: str, fields: tuple[str, ...]) -> None:
    """Case-insensitive substring search."""
    with app.session() as workspace:
        result = QueryService(workspace).search(module, text, list(fields) or None)
    app.emit(result)


@query.command(
    "filter",
    examples="""\
  modstore query filter students '{"major": "math"}'
  modstore query filter students '[{"field": "age", "op": "gt", "value": 20}, {"major": "cs"}]'
  modstore query filter students '{"op": "hasTag", "value": "honors"}'
  modstore query filter students \\
    '{"op": "related", "value": {"relationName": "tasks", "filter": {"done": false}}}'""",
)
@click.argument("module")
@click.argument("filters")
@click.pass_obj
def filter_cmd(app: AppContext, module: str, filters: str) -> None:
    """Evaluate a JSON filter tree against MODULE (all conditions must match)."""
    tree = parse_json_argument(filters, "FILTERS")
    with app.session() as workspace:
        result = QueryService(workspace).filter(module, tree)
    app.emit(result)


@query.command(examples="  modstore query related students STU-0001 tasks --limit 3")
@click.argument("module")
@click.argument("key")
@click.argument("target")
@click.option("--limit", default=None, type=int, help="Max results.")
@click.pass_obj
def related(app: AppContext, module: str, key: str, target: str, limit: int | None) -> None:
    """Items in TARGET linked to an item of MODULE by a registered relation."""
    with app.session() as workspace:
        result = QueryService(workspace).related(module, key, target, limit=limit)
    app.emit(result)


@query.command(
    examples="""\
  modstore query stats students
  modstore query stats tasks --op sum --field points"""
)
@click.argument("module")
@click.option(
    "--op",
    "stat",
    type=click.Choice(["count", "sum", "avg"]),
    default="count",
    help="Statistic to compute.",
)
@click.option("--field", default=None, help="Numeric field for sum/avg.")
@click.pass_obj
def stats(app: AppContext, module: str, stat: str, field: str | None) -> None:
    """Count items, or sum/average a field."""
    with app.session() as workspace:
        result = QueryService(workspace).stats(module, stat, field)
    app.emit(result)
