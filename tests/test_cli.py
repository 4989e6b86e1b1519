"""Tests for the root boardctl CLI."""

import pytest
from click.testing import CliRunner

from boardctl import __version__
from boardctl.cli import cli


def test_cli_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "boardctl" in result.output
    for group in ("card", "board", "env", "user", "events", "check", "upgrade"):
        assert group in result.output


def test_cli_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_no_args(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage" in result.output


@pytest.mark.parametrize(
    "flag", ["--json", "-q", "-v", "--log-json", "--sync", "-c/tmp/none.toml"]
)
def test_global_flags_accepted(cli_runner: CliRunner, flag: str) -> None:
    result = cli_runner.invoke(cli, [flag, "--version"])
    assert result.exit_code == 0


# (CLI args, expected text in output)
EXAMPLES_COMMANDS: list[tuple[list[str], str]] = [
    (["card", "--examples"], "boardctl card move"),
    (["card", "create", "--examples"], "--position 0"),
    (["card", "list", "--examples"], "boardctl card list"),
    (["card", "show", "--examples"], "boardctl card show"),
    (["card", "move", "--examples"], "--board brd_"),
    (["card", "delete", "--examples"], "boardctl card delete"),
    (["card", "update", "--examples"], "--done"),
    (["card", "log", "--examples"], "--cursor"),
    (["env", "--examples"], "add-member"),
    (["board", "--examples"], "boardctl board list"),
    (["board", "create", "--examples"], "boardctl board create"),
    (["board", "update", "--examples"], "--name Backlog"),
    (["board", "delete", "--examples"], "--yes"),
    (["env", "list", "--examples"], "boardctl env list"),
    (["user", "create", "--examples"], "--email"),
    (["events", "drain", "--examples"], "boardctl events drain"),
    (["check", "--examples"], "boardctl check --fix"),
    (["upgrade", "--examples"], "boardctl upgrade --check"),
]


@pytest.mark.parametrize(("args", "expected"), EXAMPLES_COMMANDS, ids=lambda a: str(a))
def test_examples(cli_runner: CliRunner, args: list[str], expected: str) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0, result.output
    assert "Examples for" in result.output
    assert expected in result.output


def test_examples_not_on_help_only_commands(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["events", "status", "--examples"])
    assert result.exit_code == 2
