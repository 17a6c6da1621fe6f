"""archer config — read and write per-project and per-dependency configuration.

Commands:
  archer config set <root> <name> <key> <value> [--dep TARGET]
  archer config get <root> <name> <key>         [--dep TARGET]

Setting a value to the empty string removes the key.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from archer.cli.errors import (
    err_dependency_not_found,
    err_invalid_name,
    err_no_db,
    err_project_not_found,
)
from archer.config import resolve_db_path
from archer.db.repository import Repository
from archer.db.schema import open_database
from archer.model import Dependency, InvalidArgumentError, Project

console = Console()

config_app = typer.Typer(
    name="config",
    help="Read or change configuration of imported projects and dependencies.",
    add_completion=False,
)


@config_app.command("set")
def config_set_cmd(
    root: Annotated[str, typer.Argument(help="Root of the project.")],
    name: Annotated[str, typer.Argument(help="Project name.")],
    key: Annotated[str, typer.Argument(help="Config key (e.g. ignore).")],
    value: Annotated[str, typer.Argument(help="New value; empty string removes the key.")],
    dep: Annotated[
        str | None,
        typer.Option("--dep", help="Set the value on the edge to this dependency instead."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to .archer.db (default: storage.db from config)."),
    ] = None,
) -> None:
    """Set a configuration value on a project or one of its dependencies."""
    conn = _open_existing(resolve_db_path(db))
    repo = Repository(conn)

    try:
        proj = _find_project(repo, root, name)

        if dep is None:
            changed = proj.set_config(key, value)
            if changed:
                repo.write_basic_info(proj)
        else:
            edge = _find_dependency(proj, dep)
            changed = edge.set_config(key, value)
            if changed:
                repo.write_dependency_config(proj, dep)

        target = escape(proj.full_name()) + (f" → {escape(dep)}" if dep else "")
        if not changed:
            console.print(f"[dim]Unchanged:[/] {target} {escape(key)}")
        elif value == "":
            console.print(f"[green]✓[/] Removed {escape(key)} from {target}")
        else:
            console.print(f"[green]✓[/] {target}: {escape(key)} = {escape(value)}")
    finally:
        conn.close()


@config_app.command("get")
def config_get_cmd(
    root: Annotated[str, typer.Argument(help="Root of the project.")],
    name: Annotated[str, typer.Argument(help="Project name.")],
    key: Annotated[str, typer.Argument(help="Config key.")],
    dep: Annotated[
        str | None,
        typer.Option("--dep", help="Read the value from the edge to this dependency."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to .archer.db (default: storage.db from config)."),
    ] = None,
) -> None:
    """Print a configuration value (empty when unset)."""
    conn = _open_existing(resolve_db_path(db))
    repo = Repository(conn)

    try:
        proj = _find_project(repo, root, name)
        holder = proj if dep is None else _find_dependency(proj, dep)
        typer.echo(holder.get_config(key))
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _find_project(repo: Repository, root: str, name: str) -> Project:
    try:
        proj = repo.load_projects().get_or_none(root, name)
    except InvalidArgumentError as exc:
        console.print(err_invalid_name(str(exc)))
        raise typer.Exit(1)

    if proj is None:
        console.print(err_project_not_found(root, name))
        raise typer.Exit(1)
    return proj


def _find_dependency(proj: Project, target: str) -> Dependency:
    for d in proj.list_dependencies():
        if d.target.name == target:
            return d
    console.print(err_dependency_not_found(proj.name, target))
    raise typer.Exit(1)


def _open_existing(db_path: Path) -> sqlite3.Connection:
    if not db_path.exists():
        console.print(err_no_db(str(db_path)))
        raise typer.Exit(1)
    return open_database(db_path)
