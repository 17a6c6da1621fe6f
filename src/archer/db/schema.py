"""Database schema initialization."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from archer.db.connection import Database
from archer.db.migrations import MIGRATIONS, run_migrations

CURRENT_VERSION = MIGRATIONS[-1][0]


def initialize(conn: sqlite3.Connection) -> None:
    """Initialize the database schema via the migration runner (idempotent)."""
    run_migrations(conn)


def open_database(db_path: Path | str) -> sqlite3.Connection:
    """Open *db_path* (created if missing) with its schema up to date."""
    conn = Database(db_path).connect()
    initialize(conn)
    return conn
