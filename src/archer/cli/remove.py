"""archer remove — drop every project imported under one root.

Removes the root's projects together with their sizes and every dependency
edge that starts or ends in the root.

Usage:
  archer remove --root shop
  archer remove --root shop --yes
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from archer.cli.errors import err_no_db, err_root_not_found
from archer.config import resolve_db_path
from archer.db.repository import Repository
from archer.db.schema import open_database

console = Console()


def remove_cmd(
    root: Annotated[
        str,
        typer.Option("--root", "-r", help="Root whose projects are removed."),
    ],
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to .archer.db (default: storage.db from config)."),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Remove a root and all its projects from the database."""
    db_path = resolve_db_path(db)
    if not db_path.exists():
        console.print(err_no_db(str(db_path)))
        raise typer.Exit(1)

    conn = open_database(db_path)
    repo = Repository(conn)

    try:
        count = repo.count_projects(root)
        if count == 0:
            console.print(err_root_not_found(root, repo.list_roots()))
            raise typer.Exit(0)

        console.print(f"\nRemove root: [bold]{escape(root)}[/]  ({count} projects)")

        if not yes:
            if not typer.confirm("Confirm removal?", default=False):
                console.print("[dim]Cancelled.[/]")
                raise typer.Exit(0)

        removed = repo.delete_root(root)
        console.print(f"\n[green]✓[/] Removed {escape(root)}: {removed} projects deleted")
    finally:
        conn.close()
