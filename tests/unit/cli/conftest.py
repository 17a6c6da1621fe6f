"""Fixtures shared by CLI tests."""

from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run every command in tmp_path with no global config and no ARCHER_* vars."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("archer.config._GLOBAL_CONFIG_PATH", tmp_path / "no-global.yaml")
    for var in ("ARCHER_DB", "ARCHER_MYSQL_URL", "ARCHER_GRADLE_CONFIGURATION"):
        monkeypatch.delenv(var, raising=False)
