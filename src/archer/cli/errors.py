"""Archer rich error messages with actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from archer.cli.errors import err_no_db
    console.print(err_no_db(str(db)))
    raise typer.Exit(1)
"""

from __future__ import annotations

from rich.markup import escape


def err_no_db(db_path: str = ".archer.db") -> str:
    """No project database at *db_path*."""
    return (
        f"[red]Error:[/] No database found at '{escape(db_path)}'.\n"
        "  Run:  archer import gradle <build-dir>  or  archer import mysql"
    )


def err_gradle_parse(module: str, line: str) -> str:
    """A dependency report line could not be parsed."""
    return (
        f"[red]Error:[/] Could not parse the dependency report of '{escape(module)}'.\n"
        f"  Offending line:  {escape(line)!r}\n"
        "  Check that the report was produced by `gradlew dependencies` without extra logging."
    )


def err_gradle_failed(message: str) -> str:
    """The Gradle wrapper failed or is missing."""
    return (
        f"[red]Error:[/] {escape(message)}\n"
        "  Make sure the build directory contains an executable gradlew wrapper\n"
        "  and that `./gradlew projects` succeeds on its own."
    )


def err_no_mysql_url() -> str:
    """MySQL import requested without a connection URL."""
    return (
        "[red]Error:[/] No MySQL connection URL.\n"
        "  Pass --url or set:  export ARCHER_MYSQL_URL=mysql+pymysql://user:pw@host/db"
    )


def err_mysql_failed(message: str) -> str:
    """Connecting to or querying MySQL failed."""
    return (
        f"[red]Error:[/] {escape(message)}\n"
        "  Check the URL, credentials, and that the user can read information_schema."
    )


def err_invalid_name(message: str) -> str:
    """Empty root or project name."""
    return (
        f"[red]Error:[/] {escape(message)}.\n"
        "  Root and project name must both be non-empty."
    )


def err_project_not_found(root: str, name: str) -> str:
    """Project not present in storage."""
    return (
        f"[yellow]Project not found:[/] '{escape(root)}:{escape(name)}' is not in the database.\n"
        "  Run:  archer list  to see all imported projects."
    )


def err_dependency_not_found(source: str, target: str) -> str:
    """Dependency edge not present in storage."""
    return (
        f"[yellow]Dependency not found:[/] '{escape(source)}' does not depend on '{escape(target)}'.\n"
        f"  Run:  archer deps <root> {escape(source)}  to list its dependencies."
    )


def err_config(message: str) -> str:
    """Invalid archer.yaml or global config."""
    return f"[red]Config error:[/] {escape(message)}"


def err_root_not_found(root: str, roots: list[str]) -> str:
    """No project stored under *root*."""
    known = ", ".join(escape(r) for r in roots) or "none"
    return (
        f"[yellow]Root not found:[/] no projects under '{escape(root)}'.\n"
        f"  Known roots: {known}\n"
        "  Run:  archer list  to see all imported projects."
    )
