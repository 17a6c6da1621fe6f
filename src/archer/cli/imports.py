"""archer import — populate the project database from external sources.

Commands:
  archer import gradle <build-dir>   modules + dependency trees of a Gradle build
  archer import mysql                tables, sizes, and foreign keys of a MySQL server

Projects already in the database are loaded first, so projects from other
roots stay untouched and configuration set on projects and on dependency
edges survives a re-import. Sizes and edges of re-imported projects are
replaced.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.filesize import decimal
from rich.progress import Progress, SpinnerColumn, TextColumn

from archer.cli.errors import (
    err_config,
    err_gradle_failed,
    err_gradle_parse,
    err_mysql_failed,
    err_no_mysql_url,
)
from archer.config import ArcherConfig, ConfigError, apply_project_overrides, load_config
from archer.db.repository import Repository
from archer.db.schema import open_database
from archer.gradle.importer import GradleError, GradleImporter, GradleRunner
from archer.gradle.parser import GradleParseError
from archer.model import Project
from archer.mysql.importer import SIZE_CATEGORY, MySqlImporter, MySqlImportError

console = Console()

import_app = typer.Typer(
    name="import",
    help="Import projects from a Gradle build or a MySQL server.",
    add_completion=False,
)


@import_app.command("gradle")
def import_gradle_cmd(
    build_dir: Annotated[
        Path,
        typer.Argument(help="Gradle build root (directory holding gradlew)."),
    ],
    root: Annotated[
        str | None,
        typer.Option("--root", "-r", help="Root name for the imported projects (default: directory name)."),
    ] = None,
    configuration: Annotated[
        str | None,
        typer.Option("--configuration", "-c", help="Gradle configuration to import."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to .archer.db (created if missing)."),
    ] = None,
) -> None:
    """Import the modules of a Gradle build and their dependency trees."""
    cfg = _load_cfg()
    db_path = db if db is not None else Path(cfg.storage.db)
    root_name = root or build_dir.resolve().name

    runner = GradleRunner(build_dir, command=cfg.gradle.command, timeout=cfg.gradle.timeout)
    importer = GradleImporter(
        runner, root_name, configuration=configuration or cfg.gradle.configuration
    )

    conn = open_database(db_path)
    repo = Repository(conn)

    try:
        projects = repo.load_projects()

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            console=console,
        ) as prog:
            prog.add_task(f"Running gradle in {build_dir}…", total=None)
            try:
                touched = importer.import_projects(projects)
            except GradleParseError as exc:
                console.print(err_gradle_parse(exc.module or root_name, exc.line))
                raise typer.Exit(1)
            except GradleError as exc:
                console.print(err_gradle_failed(str(exc)))
                raise typer.Exit(1)

        overridden = apply_project_overrides(cfg, projects)

        for proj in touched:
            repo.write_basic_info(proj)
            repo.write_deps(proj)
        _write_overrides(repo, overridden, already_written=touched)

        modules = sum(1 for p in touched if p.is_code())
        console.print(
            f"[green]✓[/] Imported [bold]{root_name}[/]: "
            f"{modules} modules, {len(touched) - modules} external dependencies"
        )
    finally:
        conn.close()


@import_app.command("mysql")
def import_mysql_cmd(
    url: Annotated[
        str | None,
        typer.Option("--url", help="SQLAlchemy URL (default: $ARCHER_MYSQL_URL or mysql.url)."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to .archer.db (created if missing)."),
    ] = None,
) -> None:
    """Import tables (with sizes) and foreign keys from a MySQL server."""
    cfg = _load_cfg()
    db_path = db if db is not None else Path(cfg.storage.db)
    mysql_url = url or cfg.mysql.url

    if not mysql_url:
        console.print(err_no_mysql_url())
        raise typer.Exit(1)

    importer = MySqlImporter(mysql_url)
    conn = open_database(db_path)
    repo = Repository(conn)

    try:
        projects = repo.load_projects()

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            console=console,
        ) as prog:
            prog.add_task(f"Reading schema from {importer.safe_url}…", total=None)
            try:
                tables, fk_sources = importer.import_projects(projects, repo)
            except MySqlImportError as exc:
                console.print(err_mysql_failed(str(exc)))
                raise typer.Exit(1)

        for proj in tables:
            size = proj.get_size_of(SIZE_CATEGORY)
            console.print(
                f"  {proj.root}.{proj.name} "
                f"[dim]({decimal(size.other.get('data', 0))} data, "
                f"{decimal(size.other.get('indexes', 0))} indexes)[/]"
            )

        _write_overrides(repo, apply_project_overrides(cfg, projects), already_written=[])

        edges = sum(len(p.list_dependencies()) for p in fk_sources)
        console.print(
            f"[green]✓[/] Imported {len(tables)} tables, {edges} foreign-key dependencies"
        )
    finally:
        conn.close()


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _load_cfg() -> ArcherConfig:
    try:
        return load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)


def _write_overrides(
    repo: Repository, overridden: list[Project], already_written: list[Project]
) -> None:
    written = {id(p) for p in already_written}
    for proj in overridden:
        if id(proj) not in written:
            repo.write_basic_info(proj)
