"""
Shared fixtures: every test that touches the idea store gets its own SQLite file.
"""

import pytest

from sparkmap.core import config, dao
from sparkmap.core.db import init_db


@pytest.fixture
def idea_db(tmp_path, monkeypatch):
    """Point the store at a fresh temporary database."""
    db_path = tmp_path / "ideas.db"
    monkeypatch.setattr(config, "DB_PATH", str(db_path))
    monkeypatch.setattr(dao, "_insert_listeners", [])
    init_db()
    return db_path
