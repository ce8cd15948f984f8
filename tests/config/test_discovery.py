"""Tests for config discovery and loading."""

from pathlib import Path

import pytest

from modstore.config.discovery import CONFIG_FILENAME, find_config, load_config
from modstore.config.models import StoreConfig


class TestFindConfig:
    def test_finds_in_current_dir(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("[storage]\nautosave = false\n")
        assert find_config(tmp_path) == config_file

    def test_walks_up(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("")
        child = tmp_path / "a" / "b" / "c"
        child.mkdir(parents=True)
        assert find_config(child) == config_file

    def test_returns_none_when_not_found(self, tmp_path: Path) -> None:
        child = tmp_path / "empty"
        child.mkdir()
        assert find_config(child) is None

    def test_env_var_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "custom.toml"
        config_file.write_text("")
        monkeypatch.setenv("MODSTORE_CONFIG", str(config_file))
        assert find_config(tmp_path / "nowhere") == config_file

    def test_env_var_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        monkeypatch.setenv("MODSTORE_CONFIG", str(tmp_path / "gone.toml"))
        assert find_config(tmp_path) is None


class TestLoadConfig:
    def test_loads_from_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text(
            '[storage]\ndatabase = "data/store.db"\n[modules.tasks.template]\ndone = false\n'
        )
        cfg = load_config(config_file)
        assert cfg.storage.database == "data/store.db"
        assert cfg.modules["tasks"].template == {"done": False}

    def test_defaults_when_missing(self, tmp_path: Path) -> None:
        empty = tmp_path / "empty"
        empty.mkdir()
        cfg = load_config(cwd=empty)
        assert cfg == StoreConfig()
