"""
SQLite storage for idea records.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from . import config
from .errors import StoreError


@contextmanager
def get_db() -> Generator[sqlite3.Connection, None, None]:
    """Get a SQLite database connection."""
    Path(config.DB_PATH).parent.mkdir(parents=True, exist_ok=True)
    try:
        conn = sqlite3.connect(config.DB_PATH)
    except sqlite3.Error as e:
        raise StoreError(f"Cannot open idea store at {config.DB_PATH}: {e}") from e
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def init_db():
    """Initialize the database with required tables."""
    with get_db() as conn:
        cursor = conn.cursor()

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS ideas (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                author TEXT NOT NULL,
                title TEXT,
                content TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                embedding TEXT,        -- JSON array of floats
                is_public BOOLEAN DEFAULT TRUE
            )
        ''')

        cursor.execute('CREATE INDEX IF NOT EXISTS idx_ideas_created_at ON ideas(created_at DESC)')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_ideas_author ON ideas(author)')

        conn.commit()


def health_check():
    """Check database health."""
    try:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM sqlite_master WHERE type='table';")
            table_names = [row[0] for row in cursor.fetchall()]
            return 'ideas' in table_names
    except (sqlite3.Error, StoreError):
        return False
