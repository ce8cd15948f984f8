"""Shared pytest fixtures for modstore tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from modstore.config.settings import StoreSettings
from modstore.infrastructure.store import Store
from modstore.infrastructure.workspace import Workspace


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer MODSTORE_* variables out of every test."""
    monkeypatch.delenv("MODSTORE_CONFIG", raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def store() -> Store:
    """A fresh store with no registrations."""
    return Store()


@pytest.fixture
def school(store: Store) -> Store:
    """Students and tasks linked by ``students.id == tasks.studentId``."""
    store.register_template("students", {"name": "", "age": 0})
    store.add_relation("students", "tasks", "id", "studentId")
    return store


@pytest.fixture
def settings(tmp_path: Path) -> StoreSettings:
    """Settings rooted at a temp directory (no config file)."""
    return StoreSettings.from_cli(root=tmp_path)


@pytest.fixture
def workspace(settings: StoreSettings) -> Workspace:
    """Workspace over a temp snapshot database."""
    ws = Workspace(settings)
    try:
        yield ws
    finally:
        ws.close()


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp directory so the CLI uses an isolated database.

    Use via ``@pytest.mark.usefixtures("_isolated_root")`` on command test
    classes.
    """
    monkeypatch.chdir(tmp_path)


def write_config(root: Path, body: str) -> Path:
    """Write a ``modstore.toml`` under *root* and return its path."""
    path = root / "modstore.toml"
    path.write_text(body, encoding="utf-8")
    return path
