"""Standalone command: dry-run an item against its module schema."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from modstore.commands._base import StoreCommand
from modstore.commands._params import parse_assignments
from modstore.services.validation import ValidationService

if TYPE_CHECKING:
    from modstore.commands._context import AppContext


@click.command(
    cls=StoreCommand,
    examples="""\
  modstore validate students --set name=Ann --set age=20
  modstore --json validate students --set email=not-an-email""",
)
@click.argument("module")
@click.option("--set", "assignments", multiple=True, help="Field as key=value (JSON values).")
@click.pass_obj
def validate(app: AppContext, module: str, assignments: tuple[str, ...]) -> None:
    """Check fields against MODULE's schema without storing anything."""
    fields = parse_assignments(assignments)
    with app.session() as workspace:
        result = ValidationService(workspace).check(module, fields)
    app.emit(result)
