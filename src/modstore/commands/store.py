"""Command group: inspect and manage the snapshot database."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from modstore.commands._base import StoreGroup
from modstore.services.persistence import PersistenceService

if TYPE_CHECKING:
    from modstore.commands._context import AppContext

_STORE_EXAMPLES = """\
  modstore store status
  modstore store drop students"""


@click.group(cls=StoreGroup, examples=_STORE_EXAMPLES)
@click.pass_obj
def store(app: AppContext) -> None:
    """Inspect and manage saved modules."""


@store.command()
@click.pass_obj
def status(app: AppContext) -> None:
    """Show the database path, saved modules, and live item counts."""
    with app.session() as workspace:
        result = PersistenceService(workspace).status()
    app.emit(result)


@store.command()
@click.argument("module")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_obj
def drop(app: AppContext, module: str, yes: bool) -> None:
    """Delete every item of MODULE and its saved snapshot."""
    if not yes:
        click.confirm(f"Drop module {module!r}?", abort=True)
    with app.session() as workspace:
        result = PersistenceService(workspace).drop(module)
    app.emit(result)
