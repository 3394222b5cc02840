"""
FAISS-backed vector store for similarity scoring over larger idea populations.
"""

from typing import List, Optional
import numpy as np

from .types import VectorRecord, QueryResult
from .index import IVectorStore


class FaissVectorStore(IVectorStore):
    """FAISS-backed implementation of IVectorStore."""

    def __init__(self, dimension: int = 384):
        """
        Initialize FAISS vector store.

        Args:
            dimension: Dimension of the vectors (default: 384)
        """
        try:
            import faiss
        except ImportError:
            raise ImportError("FAISS not installed. Please install faiss-cpu package.")

        self.faiss = faiss
        self.dimension = dimension

        # Inner product over unit vectors is cosine similarity
        self.index = faiss.IndexFlatIP(dimension)

        self.vector_id_map = {}  # vector index -> record ID
        self.id_to_metadata = {}
        self.next_vector_index = 0

    def _prepare(self, record: VectorRecord) -> Optional[np.ndarray]:
        if record.vector is None or len(record.vector) == 0:
            return None

        if len(record.vector) != self.dimension:
            raise ValueError(f"Vector dimension {len(record.vector)} does not match expected dimension {self.dimension}")

        vector = np.asarray(record.vector, dtype=np.float32)
        norm = np.linalg.norm(vector)
        if norm == 0:  # Handle zero vectors to prevent division by zero
            return None

        return vector / norm

    def add(self, record: VectorRecord) -> None:
        """Add a single vector record to the FAISS store."""
        self.batch_add([record])

    def batch_add(self, records: List[VectorRecord]) -> None:
        """Add multiple vector records to the FAISS store."""
        vectors_to_add = []
        valid_records = []

        for record in records:
            vector = self._prepare(record)
            if vector is None:
                continue
            vectors_to_add.append(vector)
            valid_records.append(record)

        if not vectors_to_add:
            return

        batch_vectors = np.vstack(vectors_to_add).astype(np.float32)
        self.index.add(batch_vectors)

        for i, record in enumerate(valid_records):
            self.vector_id_map[self.next_vector_index + i] = record.id
            self.id_to_metadata[record.id] = record.metadata

        self.next_vector_index += len(vectors_to_add)

    def search(self, query_vector: np.ndarray, top_k: Optional[int] = 5) -> List[QueryResult]:
        """Search for similar vectors and return ranked results."""
        if not self.index.ntotal:
            return []

        query = np.asarray(query_vector, dtype=np.float32)
        if query.shape != (self.dimension,):
            return []

        norm = np.linalg.norm(query)
        if norm == 0:
            return []

        query_array = (query / norm).reshape(1, -1)
        k = self.index.ntotal if top_k is None else min(top_k, self.index.ntotal)

        scores, indices = self.index.search(query_array, k)

        query_results = []
        for score, vector_index in zip(scores[0], indices[0]):
            # FAISS pads with -1 when fewer than k hits exist
            if vector_index < 0 or vector_index not in self.vector_id_map:
                continue
            record_id = self.vector_id_map[vector_index]
            query_results.append(QueryResult(
                id=record_id,
                score=float(score),
                metadata=self.id_to_metadata.get(record_id, {})
            ))

        return query_results

    def clear(self) -> None:
        """Clear all records from the FAISS store."""
        self.index = self.faiss.IndexFlatIP(self.dimension)
        self.vector_id_map.clear()
        self.id_to_metadata.clear()
        self.next_vector_index = 0

    def __len__(self) -> int:
        return int(self.index.ntotal)
