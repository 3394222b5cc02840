"""
Similarity matching: find existing ideas from other authors close to a new one.

The answer is the top matches strictly above the threshold, or nothing. An
empty result means no relation was found; no stand-in match is ever produced.

The comparison is strict even at the top of the range: with threshold 1.0 no
candidate qualifies, an identical vector included, because similarity is
clamped to at most 1.0. Use a threshold below 1.0 to admit exact duplicates.
"""

from typing import Any, Callable, Iterable, Optional

import numpy as np

from ..core import config
from ..core.schema import SimilarityMatch, SimilarityQuery, SimilarityResult
from ..util.logging import logger
from .index import IVectorStore
from .ingestion import parse_embedding, record_field
from .types import VectorRecord


class SimilarityMatcher:
    """Cosine similarity matcher over a snapshot of candidate ideas."""

    def __init__(self, store_factory: Optional[Callable[[int], IVectorStore]] = None):
        """
        Args:
            store_factory: Builds an empty vector store for a given dimension.
                Defaults to the configured MATCH_BACKEND.
        """
        self.store_factory = store_factory or config.get_vector_store

    def match(self, query: SimilarityQuery, candidates: Iterable[Any]) -> SimilarityResult:
        """
        Match ``query`` against ``candidates``.

        Candidates are records with ``id``, ``author``, ``content`` and
        ``embedding``. Those by the excluded author, with a malformed embedding,
        a zero vector or a dimension different from the query are skipped.
        """
        if query.limit < 1:
            raise ValueError("limit must be >= 1")
        if not 0.0 <= query.threshold <= 1.0:
            raise ValueError("threshold must be within [0, 1]")

        try:
            query_vector = parse_embedding(query.vector)
        except ValueError:
            return SimilarityResult()
        if np.linalg.norm(query_vector) == 0:
            return SimilarityResult()

        dimension = query_vector.size
        records = []
        for candidate in candidates:
            author = record_field(candidate, "author")
            if author == query.exclude_author:
                continue
            try:
                vector = parse_embedding(record_field(candidate, "embedding"))
            except ValueError:
                continue
            if vector.size != dimension:
                continue
            records.append(VectorRecord(
                id=record_field(candidate, "id"),
                vector=vector,
                metadata={"author": author, "content": record_field(candidate, "content", "")}
            ))

        store = self.store_factory(dimension)
        store.batch_add(records)
        hits = store.search(query_vector, top_k=None)

        matches = []
        for hit in hits:
            similarity = min(max(float(hit.score), 0.0), 1.0)
            if similarity <= query.threshold:
                break
            matches.append(SimilarityMatch(
                id=hit.id,
                author=hit.metadata.get("author"),
                content=hit.metadata.get("content", ""),
                similarity=similarity
            ))
            if len(matches) >= query.limit:
                break

        logger.log_match(query.exclude_author, len(records), len(matches), query.threshold,
                         hits[0].score if hits else None)
        return SimilarityResult(matches=matches)
