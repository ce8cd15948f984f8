"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Provides lazy Workspace initialization, the
load/save session around each command, and centralized result emission
(stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

import click

from modstore.output.formatters import format_result

if TYPE_CHECKING:
    from collections.abc import Iterator

    from modstore.config.settings import StoreSettings
    from modstore.infrastructure.workspace import Workspace
    from modstore.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The workspace is created on first use so ``--help`` and ``--version``
    never open the snapshot database.
    """

    def __init__(self, settings: StoreSettings) -> None:
        self.settings = settings
        self._workspace: Workspace | None = None

        from modstore.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def workspace(self) -> Workspace:
        """The workspace instance (created lazily on first access)."""
        if self._workspace is None:
            from modstore.infrastructure.workspace import Workspace

            self._workspace = Workspace(self.settings)
            self._workspace.init_event_bus()
        return self._workspace

    @contextmanager
    def session(self) -> Iterator[Workspace]:
        """Load saved modules, run the command body, save, then close the database."""
        workspace = self.workspace
        try:
            with workspace.session():
                yield workspace
        finally:
            workspace.close()

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout. Warnings go to stderr in human mode so
          they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        output = format_result(
            result,
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        if result.ok:
            click.echo(output)
            if not self.settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
