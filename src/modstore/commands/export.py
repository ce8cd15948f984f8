"""Command groups: JSON export and import of whole stores."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from modstore.commands._base import StoreGroup
from modstore.services.export import ExportService

if TYPE_CHECKING:
    from modstore.commands._context import AppContext

_EXPORT_EXAMPLES = """\
  modstore export json backup.json
  modstore --json export json exports/store.json"""

_IMPORT_EXAMPLES = """\
  modstore import json backup.json"""


@click.group(cls=StoreGroup, examples=_EXPORT_EXAMPLES)
@click.pass_obj
def export(app: AppContext) -> None:
    """Export the store to a file."""


@export.command("json", examples=_EXPORT_EXAMPLES)
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
def export_json(app: AppContext, path: Path) -> None:
    """Write every module to PATH as a JSON snapshot."""
    with app.session() as workspace:
        result = ExportService(workspace).export_file(path)
    app.emit(result)


@click.group("import", cls=StoreGroup, examples=_IMPORT_EXAMPLES)
@click.pass_obj
def import_group(app: AppContext) -> None:
    """Load a snapshot file into the store."""


@import_group.command("json", examples=_IMPORT_EXAMPLES)
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
def import_json(app: AppContext, path: Path) -> None:
    """Replace each module named in the JSON snapshot at PATH."""
    with app.session() as workspace:
        result = ExportService(workspace).import_file(path)
    app.emit(result)
