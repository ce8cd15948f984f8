"""Command group: create, read, update, delete, and tag items."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from modstore.commands._base import StoreGroup
from modstore.commands._params import parse_assignments
from modstore.services.items import ItemService
from modstore.services.query import QueryService

if TYPE_CHECKING:
    from modstore.commands._context import AppContext

_ITEM_EXAMPLES = """\
  modstore item add students --set name=Ann --set age=20 --tag honors
  modstore item get students STU-0001
  modstore item list students --sort age --page 1 --page-size 20
  modstore item update students STU-0001 --set age=21
  modstore item tag students STU-0001 alumni
  modstore item remove students STU-0001"""


@click.group(cls=StoreGroup, examples=_ITEM_EXAMPLES)
@click.pass_obj
def item(app: AppContext) -> None:
    """Create, read, update, and delete items."""


@item.command(
    examples="""\
  modstore item add students --set name=Ann
  modstore item add students --set name=Bo --set age=19 --tag new --tag transfer
  modstore item add tasks --set studentId='"k2x9"' --set points=5
  modstore item add students --set 'meta={"year": 2}'"""
)
@click.argument("module")
@click.option("--set", "assignments", multiple=True, help="Field as key=value (JSON values).")
@click.option("--tag", "tags", multiple=True, help="Tag to attach (repeatable).")
@click.pass_obj
def add(app: AppContext, module: str, assignments: tuple[str, ...], tags: tuple[str, ...]) -> None:
    """Add an item to MODULE; id and code are generated unless given."""
    fields = parse_assignments(assignments)
    if tags:
        fields["tags"] = list(tags)
    with app.session() as workspace:
        result = ItemService(workspace).add(module, fields)
    app.emit(result)


@item.command(
    examples="""\
  modstore item get students STU-0001
  modstore --json item get students lq7k3z0a0"""
)
@click.argument("module")
@click.argument("key")
@click.pass_obj
def get(app: AppContext, module: str, key: str) -> None:
    """Show one item by id or code."""
    with app.session() as workspace:
        result = ItemService(workspace).get(module, key)
    app.emit(result)


@item.command(
    "list",
    examples="""\
  modstore item list students
  modstore item list students --sort name
  modstore item list students --page 2 --page-size 25
  modstore -q item list students""",
)
@click.argument("module")
@click.option("--sort", "sort_by", default=None, help="Sort (and keep sorted) by this field.")
@click.option("--page", default=None, type=int, help="1-indexed page number.")
@click.option("--page-size", default=10, type=int, help="Items per page.")
@click.pass_obj
def list_cmd(
    app: AppContext,
    module: str,
    sort_by: str | None,
    page: int | None,
    page_size: int,
) -> None:
    """List the items of MODULE."""
    with app.session() as workspace:
        result = QueryService(workspace).list_items(
            module,
            sort_by=sort_by,
            page=page,
            page_size=page_size,
        )
    app.emit(result)


@item.command(
    examples="""\
  modstore item update students STU-0001 --set age=21
  modstore item update students STU-0001 --set nickname=null"""
)
@click.argument("module")
@click.argument("key")
@click.option("--set", "assignments", multiple=True, required=True, help="Field as key=value.")
@click.pass_obj
def update(app: AppContext, module: str, key: str, assignments: tuple[str, ...]) -> None:
    """Merge fields into an existing item. id and code cannot change."""
    patch = parse_assignments(assignments)
    with app.session() as workspace:
        result = ItemService(workspace).update(module, key, patch)
    app.emit(result)


@item.command(examples="  modstore item remove students STU-0001")
@click.argument("module")
@click.argument("key")
@click.pass_obj
def remove(app: AppContext, module: str, key: str) -> None:
    """Remove an item by id or code."""
    with app.session() as workspace:
        result = ItemService(workspace).remove(module, key)
    app.emit(result)


@item.command(examples="  modstore item tag students STU-0001 honors")
@click.argument("module")
@click.argument("key")
@click.argument("tag")
@click.pass_obj
def tag(app: AppContext, module: str, key: str, tag: str) -> None:
    """Attach TAG to an item (no-op if already present)."""
    with app.session() as workspace:
        result = ItemService(workspace).tag(module, key, tag)
    app.emit(result)


@item.command(examples="  modstore item untag students STU-0001 honors")
@click.argument("module")
@click.argument("key")
@click.argument("tag")
@click.pass_obj
def untag(app: AppContext, module: str, key: str, tag: str) -> None:
    """Detach TAG from an item."""
    with app.session() as workspace:
        result = ItemService(workspace).tag(module, key, tag, remove=True)
    app.emit(result)
