"""Archer storage layer."""

from archer.db.connection import Database
from archer.db.migrations import MIGRATIONS, run_migrations
from archer.db.repository import Repository
from archer.db.schema import initialize

__all__ = [
    "Database",
    "initialize",
    "run_migrations",
    "MIGRATIONS",
    "Repository",
]
