"""Repository for persisting the project graph.

Each concern of a project is written by its own method, so an importer only
rewrites what it changed: basic info, size buckets, or outgoing dependencies.
"""

from __future__ import annotations

import json
import sqlite3

from archer.model import Project, Projects, ProjectType, Size


class Repository:
    """Data access layer for projects, sizes, and dependencies.

    Wraps an open sqlite3.Connection. The connection is owned by the caller
    and must be closed after use.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialise with an open database connection.

        Args:
            conn: An open sqlite3.Connection with the schema initialised
                (see archer.db.schema.initialize).
        """
        self._conn = conn

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def write_basic_info(self, project: Project) -> None:
        """Upsert the type, name parts, directories, data handle, and config of *project*."""
        self._upsert_project(project)
        self._conn.commit()

    def write_size(self, project: Project) -> None:
        """Replace every stored size bucket of *project*."""
        self._ensure_project(project)
        self._conn.execute(
            "DELETE FROM sizes WHERE root = ? AND name = ?",
            (project.root, project.name),
        )
        for category, size in project.list_sizes().items():
            self._conn.execute(
                """
                INSERT INTO sizes (root, name, category, lines, files, bytes, other)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    project.root,
                    project.name,
                    category,
                    size.lines,
                    size.files,
                    size.bytes,
                    json.dumps(size.other, sort_keys=True),
                ),
            )
        self._conn.commit()

    def write_deps(self, project: Project) -> None:
        """Replace the stored outgoing dependencies of *project*.

        Targets that were never written get a basic-info row so the edge
        has something to point to.
        """
        self._ensure_project(project)
        self._conn.execute(
            "DELETE FROM dependencies WHERE source_root = ? AND source_name = ?",
            (project.root, project.name),
        )
        for dep in project.list_dependencies():
            self._ensure_project(dep.target)
            self._conn.execute(
                """
                INSERT INTO dependencies (source_root, source_name, target_root, target_name, config)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    project.root,
                    project.name,
                    dep.target.root,
                    dep.target.name,
                    json.dumps(dep.config, sort_keys=True),
                ),
            )
        self._conn.commit()

    def write_dependency_config(self, project: Project, target_name: str) -> bool:
        """Store the config of a single edge. Returns False if the edge is not stored."""
        dep = next(
            (d for d in project.list_dependencies() if d.target.name == target_name),
            None,
        )
        if dep is None:
            return False
        cur = self._conn.execute(
            """
            UPDATE dependencies SET config = ?
            WHERE source_root = ? AND source_name = ? AND target_name = ?
            """,
            (json.dumps(dep.config, sort_keys=True), project.root, project.name, target_name),
        )
        self._conn.commit()
        return cur.rowcount > 0

    def delete_root(self, root: str) -> int:
        """Delete every project under *root*. Returns the number of projects removed."""
        cur = self._conn.execute("DELETE FROM projects WHERE root = ?", (root,))
        self._conn.commit()
        return cur.rowcount

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def count_projects(self, root: str | None = None) -> int:
        if root is None:
            return self._conn.execute("SELECT COUNT(*) FROM projects").fetchone()[0]
        return self._conn.execute(
            "SELECT COUNT(*) FROM projects WHERE root = ?", (root,)
        ).fetchone()[0]

    def list_roots(self) -> list[str]:
        rows = self._conn.execute(
            "SELECT DISTINCT root FROM projects ORDER BY root"
        ).fetchall()
        return [r["root"] for r in rows]

    def load_projects(self, projects: Projects | None = None) -> Projects:
        """Rebuild a registry from storage.

        Args:
            projects: Registry to load into. A new one is created if omitted.

        Returns:
            The populated registry.
        """
        result = projects if projects is not None else Projects()

        for row in self._conn.execute(
            """
            SELECT root, name, type, name_parts, root_dir, dir, project_file, data_dir, config
            FROM projects
            """
        ).fetchall():
            _apply_project_row(result.get(row["root"], row["name"]), row)

        for row in self._conn.execute(
            "SELECT root, name, category, lines, files, bytes, other FROM sizes"
        ).fetchall():
            result.get(row["root"], row["name"]).add_size(
                row["category"],
                Size(
                    lines=row["lines"],
                    files=row["files"],
                    bytes=row["bytes"],
                    other=json.loads(row["other"]),
                ),
            )

        for row in self._conn.execute(
            """
            SELECT source_root, source_name, target_root, target_name, config
            FROM dependencies
            """
        ).fetchall():
            source = result.get(row["source_root"], row["source_name"])
            target = result.get(row["target_root"], row["target_name"])
            dep = source.add_dependency(target)
            for key, value in json.loads(row["config"]).items():
                dep.set_config(key, value)

        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _upsert_project(self, project: Project) -> None:
        self._conn.execute(
            """
            INSERT INTO projects (root, name, type, name_parts, root_dir, dir, project_file, data_dir, config)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(root, name) DO UPDATE SET
                type = excluded.type,
                name_parts = excluded.name_parts,
                root_dir = excluded.root_dir,
                dir = excluded.dir,
                project_file = excluded.project_file,
                data_dir = excluded.data_dir,
                config = excluded.config,
                updated_at = datetime('now')
            """,
            (
                project.root,
                project.name,
                project.type.value,
                json.dumps(project.name_parts),
                project.root_dir,
                project.dir,
                project.project_file,
                project.data_dir,
                json.dumps(project.config, sort_keys=True),
            ),
        )

    def _ensure_project(self, project: Project) -> None:
        row = self._conn.execute(
            "SELECT 1 FROM projects WHERE root = ? AND name = ?",
            (project.root, project.name),
        ).fetchone()
        if row is None:
            self._upsert_project(project)


# ------------------------------------------------------------------
# Row → model helpers
# ------------------------------------------------------------------

def _apply_project_row(project: Project, row: sqlite3.Row) -> None:
    project.type = ProjectType(row["type"])
    project.name_parts = json.loads(row["name_parts"])
    project.root_dir = row["root_dir"]
    project.dir = row["dir"]
    project.project_file = row["project_file"]
    project.data_dir = row["data_dir"]
    for key, value in json.loads(row["config"]).items():
        project.set_config(key, value)
