"""Route a ServiceResult to JSON, quiet, or rich human output."""

from __future__ import annotations

from typing import TYPE_CHECKING

from modstore.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from modstore.services.result import ServiceResult


def format_result(
    result: ServiceResult,
    *,
    json_output: bool = False,
    quiet: bool = False,
    verbose: bool = False,
) -> str:
    """Format a ServiceResult for display.

    ``json_output`` wins over ``quiet``; the default is the rich renderer.
    """
    if json_output:
        return result.model_dump_json(indent=2)
    if quiet:
        return render_quiet(result)
    return render_result(result, verbose=verbose)
