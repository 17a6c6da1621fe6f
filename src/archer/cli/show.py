"""archer list / archer deps — inspect the imported project graph.

Both commands print in the graph's presentation order: first-party code
before external dependencies, then by name ignoring leading ``:``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.filesize import decimal
from rich.markup import escape
from rich.table import Table

from archer.cli.errors import err_invalid_name, err_no_db, err_project_not_found
from archer.config import resolve_db_path
from archer.db.repository import Repository
from archer.db.schema import open_database
from archer.model import FilterType, InvalidArgumentError, Projects

console = Console()


def list_cmd(
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to .archer.db (default: storage.db from config)."),
    ] = None,
    exclude_external: Annotated[
        bool,
        typer.Option("--exclude-external/--all", help="Hide external dependencies."),
    ] = False,
    root: Annotated[
        str | None,
        typer.Option("--root", "-r", help="Only show projects under this root."),
    ] = None,
    level: Annotated[
        int,
        typer.Option("--level", help="Keep at most this many name parts (0 = all)."),
    ] = 0,
) -> None:
    """List imported projects with their sizes and dependency counts."""
    projects = _load(resolve_db_path(db))
    filter = FilterType.EXCLUDE_EXTERNAL if exclude_external else FilterType.ALL

    rows = [
        p
        for p in projects.list_projects(filter)
        if (root is None or p.root == root) and not p.is_ignored()
    ]

    if not rows:
        console.print("[yellow]No projects found.[/]")
        raise typer.Exit(0)

    table = Table(title="Projects", show_header=True, header_style="bold")
    table.add_column("Root", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Type")
    table.add_column("Lines", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Deps", justify="right")

    for p in rows:
        size = p.get_size()
        table.add_row(
            escape(p.root),
            escape(p.level_simple_name(level)),
            p.type.value,
            f"{size.lines:,}" if size.lines else "",
            decimal(size.bytes) if size.bytes else "",
            str(len(p.list_dependencies(filter))),
        )

    console.print(table)
    console.print(f"\n  {len(rows)} projects")


def deps_cmd(
    root: Annotated[str, typer.Argument(help="Root of the project.")],
    name: Annotated[str, typer.Argument(help="Project name.")],
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to .archer.db (default: storage.db from config)."),
    ] = None,
    exclude_external: Annotated[
        bool,
        typer.Option("--exclude-external/--all", help="Hide external dependencies."),
    ] = False,
) -> None:
    """List the direct dependencies of one project."""
    projects = _load(resolve_db_path(db))

    try:
        proj = projects.get_or_none(root, name)
    except InvalidArgumentError as exc:
        console.print(err_invalid_name(str(exc)))
        raise typer.Exit(1)

    if proj is None:
        console.print(err_project_not_found(root, name))
        raise typer.Exit(1)

    filter = FilterType.EXCLUDE_EXTERNAL if exclude_external else FilterType.ALL
    deps = proj.list_dependencies(filter)

    if not deps:
        console.print(f"[dim]{escape(proj.full_name())} has no dependencies.[/]")
        raise typer.Exit(0)

    table = Table(title=escape(proj.full_name()), show_header=True, header_style="bold")
    table.add_column("Dependency", style="bold")
    table.add_column("Type")
    table.add_column("Config", style="dim")

    for dep in deps:
        config = ", ".join(f"{k}={v}" for k, v in sorted(dep.config.items()))
        table.add_row(escape(dep.target.simple_name()), dep.target.type.value, escape(config))

    console.print(table)


# ---------------------------------------------------------------------------
# DB helpers
# ---------------------------------------------------------------------------


def _load(db_path: Path) -> Projects:
    if not db_path.exists():
        console.print(err_no_db(str(db_path)))
        raise typer.Exit(1)

    conn = open_database(db_path)
    try:
        return Repository(conn).load_projects()
    finally:
        conn.close()
