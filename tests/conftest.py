"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from archer.db.connection import Database
from archer.db.schema import initialize
from archer.model import Projects


@pytest.fixture
def tmp_db(tmp_path):
    """File-based DB in tmp_path with schema initialized, closed after test."""
    db = Database(tmp_path / ".archer.db")
    conn = db.connect()
    initialize(conn)
    yield conn
    conn.close()


@pytest.fixture
def projects():
    return Projects()
