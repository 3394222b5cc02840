"""
Vector layer: embeddings, similarity matching and manifold projection of ideas.
"""

from .index import IVectorStore, SimpleInMemoryVectorStore
from .faiss_store import FaissVectorStore
from .types import VectorRecord, QueryResult
from .embeddings import IEmbeddingProvider, DeterministicHashEmbedding, SentenceTransformerEmbedding, RemoteEmbeddingProvider
from .ingestion import parse_embedding, ingest_records
from .normalizer import normalize_coordinates, map_to_viewport
from .edges import build_edges
from .matcher import SimilarityMatcher
from .projection import ProjectionEngine
from .worker import ProjectionWorker

__all__ = [
    'IVectorStore',
    'SimpleInMemoryVectorStore',
    'FaissVectorStore',
    'VectorRecord',
    'QueryResult',
    'IEmbeddingProvider',
    'DeterministicHashEmbedding',
    'SentenceTransformerEmbedding',
    'RemoteEmbeddingProvider',
    'parse_embedding',
    'ingest_records',
    'normalize_coordinates',
    'map_to_viewport',
    'build_edges',
    'SimilarityMatcher',
    'ProjectionEngine',
    'ProjectionWorker'
]
