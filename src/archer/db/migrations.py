"""Forward-only migration runner for the project graph schema."""

from __future__ import annotations

import sqlite3

# schema_version is the bootstrap table, created before migrations run.
_CREATE_SCHEMA_VERSION = """
CREATE TABLE IF NOT EXISTS schema_version (
    version     INTEGER NOT NULL,
    applied_at  DATETIME NOT NULL DEFAULT (datetime('now'))
)
"""

_V1_SQL = """
CREATE TABLE IF NOT EXISTS projects (
    root            TEXT NOT NULL,
    name            TEXT NOT NULL,
    type            TEXT NOT NULL DEFAULT 'external',
    name_parts      TEXT NOT NULL DEFAULT '[]',
    root_dir        TEXT NOT NULL DEFAULT '',
    dir             TEXT NOT NULL DEFAULT '',
    project_file    TEXT NOT NULL DEFAULT '',
    config          TEXT NOT NULL DEFAULT '{}',
    updated_at      DATETIME NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (root, name)
);

CREATE TABLE IF NOT EXISTS sizes (
    root            TEXT NOT NULL,
    name            TEXT NOT NULL,
    category        TEXT NOT NULL,
    lines           INTEGER NOT NULL DEFAULT 0,
    files           INTEGER NOT NULL DEFAULT 0,
    bytes           INTEGER NOT NULL DEFAULT 0,
    other           TEXT NOT NULL DEFAULT '{}',
    PRIMARY KEY (root, name, category),
    FOREIGN KEY (root, name) REFERENCES projects(root, name) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS dependencies (
    source_root     TEXT NOT NULL,
    source_name     TEXT NOT NULL,
    target_root     TEXT NOT NULL,
    target_name     TEXT NOT NULL,
    config          TEXT NOT NULL DEFAULT '{}',
    PRIMARY KEY (source_root, source_name, target_name),
    FOREIGN KEY (source_root, source_name) REFERENCES projects(root, name) ON DELETE CASCADE,
    FOREIGN KEY (target_root, target_name) REFERENCES projects(root, name) ON DELETE CASCADE
);
"""

_V2_SQL = """
ALTER TABLE projects ADD COLUMN data_dir TEXT;
"""

# Append-only. Each entry: (version: int, sql: str).
# executescript() issues an implicit COMMIT before running.
MIGRATIONS: list[tuple[int, str]] = [
    (1, _V1_SQL),
    (2, _V2_SQL),
]


def run_migrations(conn: sqlite3.Connection) -> None:
    """Apply all pending migrations in ascending version order.

    Idempotent: safe to call on a database at any version.
    """
    conn.execute(_CREATE_SCHEMA_VERSION)
    conn.commit()

    row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
    current = row[0] if row[0] is not None else 0

    for version, sql in MIGRATIONS:
        if version > current:
            conn.executescript(sql)
            conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)", (version,)
            )
            conn.commit()
