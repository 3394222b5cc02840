"""
Idea store access: inserts, reads, server-side similarity matching and insert notifications.
"""

import json
import sqlite3
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from . import config
from .db import get_db
from .errors import StoreError
from .schema import IdeaRecord, SimilarityQuery, SimilarityResult
from ..util.logging import logger

# Realtime insert listeners, called with the new IdeaRecord after commit
_insert_listeners: List[Callable[[IdeaRecord], None]] = []


def _row_to_record(row: sqlite3.Row) -> IdeaRecord:
    created_at = row["created_at"]
    if isinstance(created_at, str):
        created_at = datetime.fromisoformat(created_at)
    return IdeaRecord(
        id=row["id"],
        author=row["author"],
        title=row["title"],
        content=row["content"],
        created_at=created_at,
        embedding=row["embedding"],
        is_public=bool(row["is_public"])
    )


def subscribe_inserts(callback: Callable[[IdeaRecord], None]) -> None:
    """Register a callback for newly inserted ideas."""
    if not callable(callback):
        raise ValueError(f"Insert listener must be callable: {callback}")
    if callback not in _insert_listeners:
        _insert_listeners.append(callback)


def unsubscribe_inserts(callback: Callable[[IdeaRecord], None]) -> None:
    """Remove an insert listener; unknown callbacks are ignored."""
    if callback in _insert_listeners:
        _insert_listeners.remove(callback)


def _notify_insert(record: IdeaRecord) -> None:
    for listener in list(_insert_listeners):
        try:
            listener(record)
        except Exception as e:
            # A broken listener must not fail the insert that already committed
            logger.warning(f"Insert listener failed for idea {record.id}: {e}")


def insert_idea(author: str, content: str, embedding: Optional[Sequence[float]],
                title: Optional[str] = None, is_public: bool = True) -> IdeaRecord:
    """Insert an idea with its embedding and return the stored record."""
    created_at = datetime.now(timezone.utc)
    embedding_text = json.dumps([float(v) for v in embedding]) if embedding is not None else None

    try:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO ideas (author, title, content, created_at, embedding, is_public) VALUES (?, ?, ?, ?, ?, ?)",
                (author, title, content, created_at.isoformat(), embedding_text, is_public)
            )
            conn.commit()
            idea_id = cursor.lastrowid
    except sqlite3.Error as e:
        logger.log_idea_operation("insert", None, author, content, status="failed")
        raise StoreError(f"Failed to insert idea for author '{author}': {e}") from e

    record = IdeaRecord(
        id=idea_id,
        author=author,
        title=title,
        content=content,
        created_at=created_at,
        embedding=embedding_text,
        is_public=is_public
    )
    logger.log_idea_operation("insert", idea_id, author, content)
    _notify_insert(record)
    return record


def get_idea(idea_id: int) -> Optional[IdeaRecord]:
    """Get a single idea by id."""
    try:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM ideas WHERE id = ?", (idea_id,))
            row = cursor.fetchone()
    except sqlite3.Error as e:
        raise StoreError(f"Failed to read idea {idea_id}: {e}") from e

    return _row_to_record(row) if row else None


def list_ideas(limit: Optional[int] = None, newest_first: bool = True,
               public_only: Optional[bool] = None) -> List[IdeaRecord]:
    """
    List ideas ordered by creation time.

    Args:
        limit: Maximum number of ideas, or None for all
        newest_first: Order descending (feed) or ascending (graph)
        public_only: Exclude private ideas; defaults to not INCLUDE_PRIVATE_IDEAS
    """
    if public_only is None:
        public_only = not config.INCLUDE_PRIVATE_IDEAS

    order = "DESC" if newest_first else "ASC"
    query = "SELECT * FROM ideas"
    params = []
    if public_only:
        query += " WHERE is_public = 1"
    query += f" ORDER BY created_at {order}, id {order}"
    if limit is not None:
        query += " LIMIT ?"
        params.append(limit)

    try:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            rows = cursor.fetchall()
    except sqlite3.Error as e:
        raise StoreError(f"Failed to list ideas: {e}") from e

    return [_row_to_record(row) for row in rows]


def count_ideas() -> int:
    """Count stored ideas."""
    try:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM ideas")
            return cursor.fetchone()[0]
    except sqlite3.Error as e:
        logger.error(f"Failed to count ideas: {e}")
        return 0


def match_ideas(vector: Sequence[float], exclude_author: str, threshold: Optional[float] = None,
                limit: Optional[int] = None, matcher=None) -> SimilarityResult:
    """
    Nearest-neighbour query over stored ideas from other authors.

    Reads a snapshot of the candidate ideas and scores it with the similarity
    matcher. Returns an empty result when nothing clears the threshold.
    """
    from ..vector.matcher import SimilarityMatcher

    query = SimilarityQuery(
        vector=vector,
        exclude_author=exclude_author,
        threshold=config.MATCH_THRESHOLD if threshold is None else threshold,
        limit=config.MATCH_COUNT if limit is None else limit
    )
    candidates = list_ideas(limit=None)
    return (matcher or SimilarityMatcher()).match(query, candidates)
