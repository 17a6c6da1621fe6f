"""MySQL schema importer: tables become DATABASE projects, FKs become edges.

Each table is sized from ``information_schema.TABLES`` (rows, data and index
bytes); each foreign key in ``information_schema.REFERENTIAL_CONSTRAINTS``
adds a dependency from the referencing table to the referenced one.

The connection URL may carry a password. It is never shown unmasked in error
messages.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from archer.db.repository import Repository
from archer.model import Project, Projects, ProjectType, Size

_TABLES_SQL = """
SELECT TABLE_SCHEMA AS schema_name,
       TABLE_NAME   AS table_name,
       TABLE_ROWS   AS table_rows,
       DATA_LENGTH  AS data_size,
       INDEX_LENGTH AS index_size
FROM information_schema.TABLES
WHERE TABLE_TYPE = 'BASE TABLE'
  AND TABLE_SCHEMA <> 'information_schema'
"""

_FKS_SQL = """
SELECT CONSTRAINT_SCHEMA     AS schema_name,
       TABLE_NAME            AS table_name,
       REFERENCED_TABLE_NAME AS referenced_table_name
FROM information_schema.REFERENTIAL_CONSTRAINTS
"""

SIZE_CATEGORY = "table"


class MySqlImportError(RuntimeError):
    """Raised when the database cannot be reached or queried."""


@dataclass
class TableInfo:
    schema: str
    table: str
    rows: int
    data_size: int
    index_size: int


@dataclass
class ForeignKeyInfo:
    schema: str
    table: str
    referenced_table: str


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def fetch_tables(conn: Connection) -> list[TableInfo]:
    """Return every base table outside ``information_schema``.

    Counters MySQL reports as NULL (views, some engines) are read as 0.
    """
    rows = conn.execute(text(_TABLES_SQL)).fetchall()
    return [
        TableInfo(
            schema=r.schema_name,
            table=r.table_name,
            rows=int(r.table_rows or 0),
            data_size=int(r.data_size or 0),
            index_size=int(r.index_size or 0),
        )
        for r in rows
    ]


def fetch_foreign_keys(conn: Connection) -> list[ForeignKeyInfo]:
    rows = conn.execute(text(_FKS_SQL)).fetchall()
    return [
        ForeignKeyInfo(
            schema=r.schema_name,
            table=r.table_name,
            referenced_table=r.referenced_table_name,
        )
        for r in rows
    ]


# ---------------------------------------------------------------------------
# Registry updates
# ---------------------------------------------------------------------------


def import_tables(projects: Projects, tables: list[TableInfo]) -> list[Project]:
    """Create or update one DATABASE project per table and set its size.

    Returns:
        The changed projects, in input order.
    """
    changed: list[Project] = []

    for table in tables:
        proj = projects.get(table.schema, table.table)
        proj.type = ProjectType.DATABASE
        proj.add_size(
            SIZE_CATEGORY,
            Size(
                lines=table.rows,
                bytes=table.data_size + table.index_size,
                other={"data": table.data_size, "indexes": table.index_size},
            ),
        )
        changed.append(proj)

    create_table_name_parts(changed)
    return changed


def import_foreign_keys(projects: Projects, fks: list[ForeignKeyInfo]) -> list[Project]:
    """Add one edge per foreign key, referencing table → referenced table.

    Both ends live in the foreign key's schema. Configuration already set on an
    edge is carried over to its replacement.

    Returns:
        Distinct referencing projects, in first-seen order.
    """
    changed: dict[tuple[str, str], Project] = {}

    for fk in fks:
        proj = projects.get(fk.schema, fk.table)
        previous = {d.target.name: d.config for d in proj.list_dependencies()}
        dep = proj.add_dependency(projects.get(fk.schema, fk.referenced_table))
        for key, value in previous.get(fk.referenced_table, {}).items():
            dep.set_config(key, value)
        changed.setdefault((proj.root, proj.name), proj)

    return list(changed.values())


def create_table_name_parts(projects: list[Project]) -> None:
    """Group table names by the ``_``-separated prefixes they share.

    A prefix becomes a name part when at least two tables of the same root
    start with it; the full table name is always the last part. For tables
    ``order``, ``order_item`` and ``order_item_tax`` the parts of the last one
    are ``["order", "order_item", "order_item_tax"]``.
    """
    by_root: dict[str, list[Project]] = {}
    for p in projects:
        by_root.setdefault(p.root, []).append(p)

    for group in by_root.values():
        counts: Counter[str] = Counter()
        for p in group:
            for prefix in _prefixes(p.name):
                counts[prefix] += 1

        for p in group:
            shared = [prefix for prefix in _prefixes(p.name)[:-1] if counts[prefix] >= 2]
            p.name_parts = [*shared, p.name]


def _prefixes(name: str) -> list[str]:
    segments = name.split("_")
    return ["_".join(segments[: i + 1]) for i in range(len(segments))]


# ---------------------------------------------------------------------------
# Importer
# ---------------------------------------------------------------------------


class MySqlImporter:
    """Import tables and foreign keys from a MySQL server into a registry.

    Args:
        url: SQLAlchemy URL, e.g. ``mysql+pymysql://user:pw@host/db``.
    """

    def __init__(self, url: str) -> None:
        self.url = url

    @property
    def safe_url(self) -> str:
        """The URL with its password masked."""
        try:
            return make_url(self.url).render_as_string(hide_password=True)
        except ArgumentError:
            return "<invalid url>"

    def import_projects(
        self, projects: Projects, repo: Repository | None = None
    ) -> tuple[list[Project], list[Project]]:
        """Run both import passes and save the results through *repo*.

        Returns:
            ``(tables, fk_sources)``: projects changed by each pass.

        Raises:
            MySqlImportError: on connection or query failure.
        """
        try:
            engine = create_engine(self.url, pool_size=1, max_overflow=0, pool_recycle=60)
        except (ArgumentError, SQLAlchemyError, ImportError) as exc:
            raise MySqlImportError(
                f"error connecting to MySQL using {self.safe_url}: {exc}"
            ) from None

        try:
            with engine.connect() as conn:
                tables = fetch_tables(conn)
                fks = fetch_foreign_keys(conn)
        except SQLAlchemyError as exc:
            raise MySqlImportError(
                f"error querying MySQL at {self.safe_url}: {exc.__class__.__name__}"
            ) from None
        finally:
            engine.dispose()

        changed_tables = import_tables(projects, tables)
        fk_sources = import_foreign_keys(projects, fks)

        if repo is not None:
            for proj in changed_tables:
                repo.write_basic_info(proj)
                repo.write_size(proj)
            for proj in fk_sources:
                repo.write_deps(proj)

        return changed_tables, fk_sources
