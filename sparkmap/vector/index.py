"""
Vector store interface and the in-memory cosine similarity store.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
import numpy as np

from .types import VectorRecord, QueryResult


class IVectorStore(ABC):
    """Abstract interface for vector storage operations."""

    @abstractmethod
    def add(self, record: VectorRecord) -> None:
        """Add a single vector record to the store."""
        pass

    @abstractmethod
    def batch_add(self, records: List[VectorRecord]) -> None:
        """Add multiple vector records to the store."""
        pass

    @abstractmethod
    def search(self, query_vector: np.ndarray, top_k: Optional[int] = 5) -> List[QueryResult]:
        """Search for similar vectors and return ranked results.

        ``top_k=None`` returns every stored vector, ranked.
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear all records from the store."""
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass


class SimpleInMemoryVectorStore(IVectorStore):
    """Simple in-memory implementation of IVectorStore using cosine similarity."""

    def __init__(self):
        self._vectors = {}  # record_id -> VectorRecord
        self._index = {}    # record_id -> normalized vector

    def add(self, record: VectorRecord) -> None:
        """Add a single vector record to the store.

        Zero vectors have no direction and are skipped.
        """
        if record.vector is None or len(record.vector) == 0:
            return

        vector = np.asarray(record.vector, dtype=np.float64)
        norm = np.linalg.norm(vector)
        if norm == 0:
            return

        self._vectors[record.id] = record
        self._index[record.id] = vector / norm

    def batch_add(self, records: List[VectorRecord]) -> None:
        """Add multiple vector records to the store."""
        for record in records:
            self.add(record)

    def search(self, query_vector: np.ndarray, top_k: Optional[int] = 5) -> List[QueryResult]:
        """Search for similar vectors and return ranked results."""
        if not self._index:
            return []

        query = np.asarray(query_vector, dtype=np.float64)
        norm = np.linalg.norm(query)
        if norm == 0:
            return []

        normalized_query = query / norm

        similarities = {}
        for record_id, stored_vector in self._index.items():
            if stored_vector.shape != normalized_query.shape:
                continue
            similarities[record_id] = float(np.dot(normalized_query, stored_vector))

        sorted_results = sorted(similarities.items(), key=lambda x: x[1], reverse=True)
        if top_k is not None:
            sorted_results = sorted_results[:top_k]

        return [
            QueryResult(id=record_id, score=score, metadata=self._vectors[record_id].metadata)
            for record_id, score in sorted_results
        ]

    def clear(self) -> None:
        """Clear all records from the store."""
        self._vectors.clear()
        self._index.clear()

    def __len__(self) -> int:
        return len(self._index)
