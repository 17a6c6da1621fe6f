"""Tests for the archer entry point."""

from __future__ import annotations

from typer.testing import CliRunner

from archer.cli.main import app

runner = CliRunner()


def test_version_flag_exits_zero() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.startswith("archer ")


def test_version_command() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "archer" in result.output


def test_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("import", "list", "deps", "config", "remove"):
        assert command in result.output


def test_import_help_lists_sources() -> None:
    result = runner.invoke(app, ["import", "--help"])
    assert result.exit_code == 0
    assert "gradle" in result.output
    assert "mysql" in result.output
