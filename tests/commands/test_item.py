"""Tests for item CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner, Result

from modstore.cli import cli


def _ok(result: Result) -> dict[str, Any]:
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["ok"] is True
    return data["data"]


def _add(runner: CliRunner, *args: str) -> dict[str, Any]:
    return _ok(runner.invoke(cli, ["--json", "item", "add", "students", *args]))["item"]


@pytest.mark.usefixtures("_isolated_root")
class TestAddCommand:
    def test_add_assigns_code(self, cli_runner: CliRunner) -> None:
        item = _add(cli_runner, "--set", "name=Ann", "--set", "age=20", "--tag", "honors")
        assert item["code"] == "STU-0001"
        assert item["name"] == "Ann"
        assert item["age"] == 20
        assert item["tags"] == ["honors"]

    def test_values_parsed_as_json(self, cli_runner: CliRunner) -> None:
        item = _add(cli_runner, "--set", 'meta={"year": 2}', "--set", "active=true")
        assert item["meta"] == {"year": 2}
        assert item["active"] is True

    def test_persists_between_invocations(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        _add(cli_runner, "--set", "name=Ann")
        second = _add(cli_runner, "--set", "name=Bob")
        assert second["code"] == "STU-0002"
        assert (tmp_path / ".modstore" / "modstore.db").is_file()

    def test_codes_not_reused_after_remove(self, cli_runner: CliRunner) -> None:
        _add(cli_runner)
        _add(cli_runner)
        cli_runner.invoke(cli, ["item", "remove", "students", "STU-0002"])
        assert _add(cli_runner)["code"] == "STU-0003"

    def test_duplicate_id_fails(self, cli_runner: CliRunner) -> None:
        _add(cli_runner, "--set", "id=k1")
        result = cli_runner.invoke(cli, ["--json", "item", "add", "students", "--set", "id=k1"])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "DUPLICATE_ID"

    def test_malformed_code_fails(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "item", "add", "students", "--set", "code=x"])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "INVALID_INPUT"

    def test_malformed_assignment(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["item", "add", "students", "--set", "oops"])
        assert result.exit_code == 2
        assert "--set" in result.output

    def test_human_output(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["item", "add", "students", "--set", "name=Ann"])
        assert result.exit_code == 0
        assert "OK" in result.stdout
        assert "STU-0001" in result.stdout

    def test_quiet_prints_id(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "item", "add", "students", "--set", "id=k9"])
        assert result.stdout.strip() == "k9"


@pytest.mark.usefixtures("_isolated_root")
class TestReadCommands:
    def test_get_by_code(self, cli_runner: CliRunner) -> None:
        added = _add(cli_runner, "--set", "name=Ann")
        data = _ok(cli_runner.invoke(cli, ["--json", "item", "get", "students", "STU-0001"]))
        assert data["item"]["id"] == added["id"]

    def test_get_missing(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "item", "get", "students", "nope"])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "NOT_FOUND"

    def test_list_sorted(self, cli_runner: CliRunner) -> None:
        for age in ("30", "10", "20"):
            _add(cli_runner, "--set", f"age={age}")
        data = _ok(cli_runner.invoke(cli, ["--json", "item", "list", "students", "--sort", "age"]))
        assert [item["age"] for item in data["items"]] == [10, 20, 30]

    def test_list_paginated(self, cli_runner: CliRunner) -> None:
        for _ in range(3):
            _add(cli_runner)
        result = cli_runner.invoke(
            cli, ["--json", "item", "list", "students", "--page", "2", "--page-size", "2"]
        )
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["data"]["count"] == 1
        assert payload["meta"]["pages"] == 2


@pytest.mark.usefixtures("_isolated_root")
class TestMutationCommands:
    def test_update(self, cli_runner: CliRunner) -> None:
        _add(cli_runner, "--set", "age=20")
        data = _ok(
            cli_runner.invoke(
                cli, ["--json", "item", "update", "students", "STU-0001", "--set", "age=21"]
            )
        )
        assert data["item"]["age"] == 21
        assert data["fields_changed"] == ["age"]

    def test_update_cannot_move_id_onto_another_item(self, cli_runner: CliRunner) -> None:
        _add(cli_runner, "--set", "id=a")
        _add(cli_runner, "--set", "id=b")
        result = cli_runner.invoke(
            cli, ["--json", "item", "update", "students", "b", "--set", "id=a"]
        )
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "INVALID_INPUT"

        listing = _ok(cli_runner.invoke(cli, ["--json", "item", "list", "students"]))
        assert [item["id"] for item in listing["items"]] == ["a", "b"]

    def test_update_requires_set(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["item", "update", "students", "STU-0001"])
        assert result.exit_code == 2

    def test_remove(self, cli_runner: CliRunner) -> None:
        _add(cli_runner)
        data = _ok(cli_runner.invoke(cli, ["--json", "item", "remove", "students", "STU-0001"]))
        assert data["code"] == "STU-0001"
        missing = cli_runner.invoke(cli, ["--json", "item", "get", "students", "STU-0001"])
        assert missing.exit_code == 1

    def test_tag_and_untag(self, cli_runner: CliRunner) -> None:
        _add(cli_runner, "--tag", "a")
        tagged = _ok(cli_runner.invoke(cli, ["--json", "item", "tag", "students", "STU-0001", "b"]))
        assert tagged["item"]["tags"] == ["a", "b"]
        untagged = _ok(
            cli_runner.invoke(cli, ["--json", "item", "untag", "students", "STU-0001", "a"])
        )
        assert untagged["item"]["tags"] == ["b"]

    def test_tag_after_scalar_tags_update(self, cli_runner: CliRunner) -> None:
        _add(cli_runner)
        cli_runner.invoke(cli, ["item", "update", "students", "STU-0001", "--set", "tags=5"])
        tagged = _ok(cli_runner.invoke(cli, ["--json", "item", "tag", "students", "STU-0001", "x"]))
        assert tagged["item"]["tags"] == [5, "x"]


@pytest.mark.usefixtures("_isolated_root")
class TestSchemaConfig:
    def test_invalid_item_vetoed(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "modstore.toml").write_text(
            "[modules.students.schema.name]\nrequired = true\nminLength = 2\n"
        )
        result = cli_runner.invoke(cli, ["--json", "item", "add", "students", "--set", "name=A"])
        assert result.exit_code == 1
        error = json.loads(result.stderr)["error"]
        assert error["code"] == "VETOED"
        assert error["detail"]["errors"][0]["field"] == "name"

    def test_template_applied(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "modstore.toml").write_text("[modules.students.template]\nage = 18\n")
        assert _add(cli_runner)["age"] == 18
