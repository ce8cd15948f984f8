"""Parsing helpers for ``--set key=value`` options and JSON arguments."""

from __future__ import annotations

import json
from typing import Any

import click


def parse_value(raw: str) -> Any:
    """Decode *raw* as JSON, falling back to the plain string.

    ``30`` becomes an int, ``true`` a bool, ``["a"]`` a list; ``Ann`` stays
    a string.
    """
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def parse_assignments(pairs: tuple[str, ...]) -> dict[str, Any]:
    """Turn repeated ``--set key=value`` options into a field mapping.

    Raises:
        click.BadParameter: If a pair has no ``=`` or an empty key.
    """
    fields: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {pair!r}", param_hint="--set")
        fields[key] = parse_value(raw)
    return fields


def parse_json_argument(raw: str, name: str) -> Any:
    """Decode a required JSON argument."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"invalid JSON: {exc.msg}", param_hint=name) from exc
