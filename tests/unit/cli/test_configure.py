"""Tests for archer config set / get."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from archer.cli.main import app
from archer.db.connection import Database
from archer.db.repository import Repository
from archer.db.schema import initialize
from archer.model import Projects, ProjectType

runner = CliRunner()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    path = tmp_path / "graph.db"
    projects = Projects()
    app_proj = projects.get("shop", ":app")
    app_proj.type = ProjectType.CODE
    app_proj.add_dependency(projects.get("shop", ":core"))

    conn = Database(path).connect()
    initialize(conn)
    repo = Repository(conn)
    repo.write_basic_info(app_proj)
    repo.write_deps(app_proj)
    conn.close()
    return path


def _stored(db_path: Path) -> Projects:
    with Database(db_path) as conn:
        return Repository(conn).load_projects()


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


def test_set_project_value(db_path: Path) -> None:
    result = runner.invoke(app, ["config", "set", "shop", ":app", "ignore", "true", "--db", str(db_path)])
    assert result.exit_code == 0, result.output
    assert "ignore = true" in result.output
    assert _stored(db_path).get("shop", ":app").is_ignored()


def test_set_same_value_reports_unchanged(db_path: Path) -> None:
    args = ["config", "set", "shop", ":app", "owner", "web", "--db", str(db_path)]
    runner.invoke(app, args)
    result = runner.invoke(app, args)
    assert result.exit_code == 0
    assert "Unchanged" in result.output


def test_set_empty_value_removes(db_path: Path) -> None:
    runner.invoke(app, ["config", "set", "shop", ":app", "owner", "web", "--db", str(db_path)])
    result = runner.invoke(app, ["config", "set", "shop", ":app", "owner", "", "--db", str(db_path)])
    assert result.exit_code == 0
    assert "Removed owner" in result.output
    assert "owner" not in _stored(db_path).get("shop", ":app").config


def test_get_project_value(db_path: Path) -> None:
    runner.invoke(app, ["config", "set", "shop", ":app", "owner", "web", "--db", str(db_path)])
    result = runner.invoke(app, ["config", "get", "shop", ":app", "owner", "--db", str(db_path)])
    assert result.exit_code == 0
    assert result.output.strip() == "web"


def test_get_unset_value_is_empty(db_path: Path) -> None:
    result = runner.invoke(app, ["config", "get", "shop", ":app", "owner", "--db", str(db_path)])
    assert result.exit_code == 0
    assert result.output.strip() == ""


def test_set_unknown_project(db_path: Path) -> None:
    result = runner.invoke(app, ["config", "set", "shop", ":nope", "k", "v", "--db", str(db_path)])
    assert result.exit_code == 1
    assert "Project not found" in result.output


def test_set_missing_db(tmp_path: Path) -> None:
    result = runner.invoke(
        app, ["config", "set", "shop", ":app", "k", "v", "--db", str(tmp_path / "missing.db")]
    )
    assert result.exit_code == 1
    assert "No database found" in result.output
    assert not (tmp_path / "missing.db").exists()


# ---------------------------------------------------------------------------
# Dependency config
# ---------------------------------------------------------------------------


def test_set_dependency_value(db_path: Path) -> None:
    result = runner.invoke(
        app,
        ["config", "set", "shop", ":app", "scope", "api", "--dep", ":core", "--db", str(db_path)],
    )
    assert result.exit_code == 0, result.output

    projects = _stored(db_path)
    dep = projects.get("shop", ":app").list_dependencies()[0]
    assert dep.get_config("scope") == "api"
    assert projects.get("shop", ":app").get_config("scope") == ""


def test_get_dependency_value(db_path: Path) -> None:
    runner.invoke(
        app,
        ["config", "set", "shop", ":app", "scope", "api", "--dep", ":core", "--db", str(db_path)],
    )
    result = runner.invoke(
        app, ["config", "get", "shop", ":app", "scope", "--dep", ":core", "--db", str(db_path)]
    )
    assert result.output.strip() == "api"


def test_set_unknown_dependency(db_path: Path) -> None:
    result = runner.invoke(
        app,
        ["config", "set", "shop", ":app", "scope", "api", "--dep", ":db", "--db", str(db_path)],
    )
    assert result.exit_code == 1
    assert "Dependency not found" in result.output
