"""
Embedding providers: turn idea text into a fixed-length vector.
"""

from abc import ABC, abstractmethod
import hashlib
from typing import Optional

import requests

from ..core.errors import EmbeddingServiceError
from ..util.logging import logger


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    @abstractmethod
    def embed_text(self, text: str) -> list[float]:
        """Generate embedding vector for given text."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass


class DeterministicHashEmbedding(IEmbeddingProvider):
    """Deterministic hash-based embedding provider for testing purposes.

    The same text always yields the same vector, with no model download.
    Vectors carry no semantics beyond identity of the input text.
    """

    def __init__(self, dimension: int = 384):
        self.dimension = dimension

    def embed_text(self, text: str) -> list[float]:
        """Generate deterministic embedding vector using a chained hash."""
        vector = []
        counter = 0
        while len(vector) < self.dimension:
            hex_dig = hashlib.md5(f"{counter}:{text}".encode()).hexdigest()
            for i in range(0, len(hex_dig), 8):
                value = int(hex_dig[i:i + 8], 16)
                # Map to [-1, 1] so cosine similarity spans both signs
                vector.append((value / (2**32)) * 2 - 1)
            counter += 1

        return vector[:self.dimension]

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        return self.dimension


class SentenceTransformerEmbedding(IEmbeddingProvider):
    """Sentence transformers embedding provider using a local pre-trained model."""

    def __init__(self, model_name: str = "all-MiniLM-L6-v2"):
        self.model_name = model_name
        self._model = None
        self._dimension = None

    @property
    def model(self):
        if self._model is None:
            from sentence_transformers import SentenceTransformer
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def embed_text(self, text: str) -> list[float]:
        """Generate embedding vector using sentence transformers."""
        try:
            embedding = self.model.encode(text, convert_to_tensor=False)
        except Exception as e:
            logger.log_embedding_call("sentence_transformers", text, "failed", {"error": str(e)})
            raise EmbeddingServiceError(f"Local embedding model failed: {e}") from e
        return embedding.tolist()

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        if self._dimension is None:
            self._dimension = self.model.get_sentence_embedding_dimension()
        return self._dimension


class RemoteEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by an OpenAI-compatible ``/v1/embeddings`` endpoint.

    Defaults target SiliconFlow serving ``BAAI/bge-m3`` (1024 dimensions).
    Any transport error, non-2xx status or malformed body raises
    EmbeddingServiceError; no substitute vector is ever returned.
    """

    def __init__(self, api_url: str, model_name: str = "BAAI/bge-m3", token: Optional[str] = None,
                 timeout: float = 30.0, session: Optional[requests.Session] = None):
        self.api_url = api_url
        self.model_name = model_name
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()
        self._dimension = None

    def embed_text(self, text: str) -> list[float]:
        """Request an embedding for ``text`` from the remote service."""
        if not text or not text.strip():
            raise ValueError("text cannot be empty")

        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        payload = {
            "model": self.model_name,
            "input": text,
            "encoding_format": "float"
        }

        try:
            response = self.session.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.log_embedding_call("remote", text, "failed", {"error": str(e)})
            raise EmbeddingServiceError(f"Embedding service unreachable: {e}") from e

        if not response.ok:
            logger.log_embedding_call("remote", text, "failed", {"status_code": response.status_code})
            raise EmbeddingServiceError(
                f"Embedding service error: {response.status_code} - {response.text[:200]}"
            )

        try:
            embedding = response.json()["data"][0]["embedding"]
            vector = [float(v) for v in embedding]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise EmbeddingServiceError(f"Malformed embedding response: {e}") from e

        if not vector:
            raise EmbeddingServiceError("Embedding service returned an empty vector")

        self._dimension = len(vector)
        logger.log_embedding_call("remote", text, details={"dimension": len(vector)})
        return vector

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors, probing the service if needed."""
        if self._dimension is None:
            self._dimension = len(self.embed_text("dimension probe"))
        return self._dimension
