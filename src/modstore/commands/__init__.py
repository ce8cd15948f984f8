"""Subcommand modules for modstore.

Provides register_commands() which uses deferred imports to keep
``modstore --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from modstore.commands.export import export, import_group
    from modstore.commands.item import item
    from modstore.commands.query import query
    from modstore.commands.store import store

    cli.add_command(item)
    cli.add_command(query)
    cli.add_command(export)
    cli.add_command(import_group)
    cli.add_command(store)

    # --- Standalone commands ---
    from modstore.commands.validate import validate

    cli.add_command(validate)
