"""Archer CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from archer.cli.configure import config_app
from archer.cli.imports import import_app
from archer.cli.remove import remove_cmd
from archer.cli.show import deps_cmd, list_cmd


def _version() -> str:
    try:
        return importlib.metadata.version("archer")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"archer {_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="archer",
    help=(
        "Archer — dependency graph of build modules and database tables.\n\n"
        "  archer import gradle DIR   Import modules and dependency trees of a Gradle build.\n"
        "  archer import mysql        Import tables, sizes, and foreign keys.\n"
        "  archer list                Show the imported projects.\n"
        "  archer remove --root R     Drop everything imported under one root."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """Archer — dependency graph of build modules and database tables."""


app.add_typer(import_app, name="import")
app.add_typer(config_app, name="config")
app.command("list")(list_cmd)
app.command("deps")(deps_cmd)
app.command("remove")(remove_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed Archer version."""
    typer.echo(f"archer {_version()}")


if __name__ == "__main__":
    app()
