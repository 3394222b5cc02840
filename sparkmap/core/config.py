"""
Runtime configuration for sparkmap, read from the environment.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# Database path configuration
DB_PATH = os.getenv("DB_PATH", "./data/sparkmap.db")

DEBUG = os.getenv("DEBUG", "true").lower() == "true"

# Embedding service
EMBED_PROVIDER = os.getenv("EMBED_PROVIDER", "hash")  # hash|sentence_transformers|remote
EMBED_MODEL_NAME = os.getenv("EMBED_MODEL_NAME", "BAAI/bge-m3")
EMBED_API_URL = os.getenv("EMBED_API_URL", "https://api.siliconflow.cn/v1/embeddings")
EMBED_API_TOKEN = os.getenv("EMBED_API_TOKEN", os.getenv("SILICON_TOKEN"))
EMBED_TIMEOUT_SEC = float(os.getenv("EMBED_TIMEOUT_SEC", "30"))
# Expected embedding dimension; 0 means infer it from each population
EMBED_DIM = int(os.getenv("EMBED_DIM", "0"))

# Similarity matching. Cosine scores of short free-text embeddings sit in a
# narrow band (roughly 0.2-0.6 for related text), so tune per model and corpus.
MATCH_BACKEND = os.getenv("MATCH_BACKEND", "memory")  # memory|faiss
MATCH_THRESHOLD = float(os.getenv("MATCH_THRESHOLD", "0.4"))
MATCH_COUNT = int(os.getenv("MATCH_COUNT", "1"))

# Manifold projection (fixed per deployment, not per request)
MIN_PROJECTION_POPULATION = 3
SPECTRAL_INIT_MIN_POPULATION = 15
UMAP_N_NEIGHBORS = int(os.getenv("UMAP_N_NEIGHBORS", "5"))
UMAP_MIN_DIST = float(os.getenv("UMAP_MIN_DIST", "0.1"))
UMAP_SPREAD = float(os.getenv("UMAP_SPREAD", "1.0"))
UMAP_METRIC = os.getenv("UMAP_METRIC", "euclidean")  # euclidean|cosine
UMAP_N_EPOCHS = int(os.getenv("UMAP_N_EPOCHS", "200"))

# Graph rendering
GRAPH_EDGE_THRESHOLD = float(os.getenv("GRAPH_EDGE_THRESHOLD", "150"))
GRAPH_EDGE_MIN_WIDTH = float(os.getenv("GRAPH_EDGE_MIN_WIDTH", "0.5"))
GRAPH_EDGE_WIDTH_SCALE = float(os.getenv("GRAPH_EDGE_WIDTH_SCALE", "2.0"))
GRAPH_VIEWPORT_MARGIN = float(os.getenv("GRAPH_VIEWPORT_MARGIN", "0.05"))
GRAPH_DEFAULT_WIDTH = int(os.getenv("GRAPH_DEFAULT_WIDTH", "800"))
GRAPH_DEFAULT_HEIGHT = int(os.getenv("GRAPH_DEFAULT_HEIGHT", "600"))
GRAPH_MAX_IDEAS = int(os.getenv("GRAPH_MAX_IDEAS", "100"))
GRAPH_SCATTER_FALLBACK = os.getenv("GRAPH_SCATTER_FALLBACK", "false").lower() == "true"
PREVIEW_LENGTH = 35

# Idea feed
INCLUDE_PRIVATE_IDEAS = os.getenv("INCLUDE_PRIVATE_IDEAS", "false").lower() == "true"
IDEA_LIST_LIMIT = int(os.getenv("IDEA_LIST_LIMIT", "50"))

# Version string
VERSION = "0.3.0"


def get_embedding_provider():
    """Get configured embedding provider implementation."""
    if EMBED_PROVIDER == "sentence_transformers":
        from ..vector.embeddings import SentenceTransformerEmbedding
        return SentenceTransformerEmbedding(EMBED_MODEL_NAME)
    elif EMBED_PROVIDER == "remote":
        from ..vector.embeddings import RemoteEmbeddingProvider
        return RemoteEmbeddingProvider(
            api_url=EMBED_API_URL,
            model_name=EMBED_MODEL_NAME,
            token=EMBED_API_TOKEN,
            timeout=EMBED_TIMEOUT_SEC
        )
    else:
        from ..vector.embeddings import DeterministicHashEmbedding
        return DeterministicHashEmbedding(dimension=EMBED_DIM or 384)


def get_vector_store(dimension: int):
    """Get the configured vector store used for similarity scoring."""
    if MATCH_BACKEND == "faiss":
        from ..vector.faiss_store import FaissVectorStore
        return FaissVectorStore(dimension=dimension)

    from ..vector.index import SimpleInMemoryVectorStore
    return SimpleInMemoryVectorStore()


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "true").lower() == "true"


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    if EMBED_PROVIDER not in ["hash", "sentence_transformers", "remote"]:
        issues.append(f"Invalid EMBED_PROVIDER: {EMBED_PROVIDER}")

    if EMBED_PROVIDER == "remote" and not EMBED_API_TOKEN:
        issues.append("EMBED_PROVIDER=remote requires EMBED_API_TOKEN")

    if MATCH_BACKEND not in ["memory", "faiss"]:
        issues.append(f"Invalid MATCH_BACKEND: {MATCH_BACKEND}")

    if not 0.0 <= MATCH_THRESHOLD <= 1.0:
        issues.append("MATCH_THRESHOLD must be within [0, 1]")

    if MATCH_COUNT < 1:
        issues.append("MATCH_COUNT must be >= 1")

    if UMAP_N_NEIGHBORS < 2:
        issues.append("UMAP_N_NEIGHBORS must be >= 2")

    if UMAP_METRIC not in ["euclidean", "cosine"]:
        issues.append(f"Invalid UMAP_METRIC: {UMAP_METRIC}")

    if not 0.0 <= GRAPH_VIEWPORT_MARGIN < 0.5:
        issues.append("GRAPH_VIEWPORT_MARGIN must be within [0, 0.5)")

    if GRAPH_EDGE_THRESHOLD <= 0:
        issues.append("GRAPH_EDGE_THRESHOLD must be > 0")

    return issues
