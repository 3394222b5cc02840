"""
Configuration validation and backend selection.
"""

from sparkmap.core import config
from sparkmap.vector.faiss_store import FaissVectorStore
from sparkmap.vector.index import SimpleInMemoryVectorStore


def test_default_config_is_valid(monkeypatch):
    """Test that the shipped defaults raise no issues."""
    monkeypatch.setattr(config, "EMBED_PROVIDER", "hash")
    monkeypatch.setattr(config, "MATCH_BACKEND", "memory")

    assert config.validate_config() == []


def test_invalid_values_are_reported(monkeypatch):
    """Test that out-of-range settings are listed, not raised."""
    monkeypatch.setattr(config, "EMBED_PROVIDER", "magic")
    monkeypatch.setattr(config, "MATCH_THRESHOLD", 1.5)
    monkeypatch.setattr(config, "MATCH_COUNT", 0)
    monkeypatch.setattr(config, "GRAPH_VIEWPORT_MARGIN", 0.5)

    issues = config.validate_config()

    assert "Invalid EMBED_PROVIDER: magic" in issues
    assert "MATCH_THRESHOLD must be within [0, 1]" in issues
    assert "MATCH_COUNT must be >= 1" in issues
    assert "GRAPH_VIEWPORT_MARGIN must be within [0, 0.5)" in issues


def test_remote_provider_requires_token(monkeypatch):
    """Test that the remote provider without a token is flagged."""
    monkeypatch.setattr(config, "EMBED_PROVIDER", "remote")
    monkeypatch.setattr(config, "EMBED_API_TOKEN", None)

    assert "EMBED_PROVIDER=remote requires EMBED_API_TOKEN" in config.validate_config()


def test_vector_store_backend_selection(monkeypatch):
    """Test that MATCH_BACKEND picks the similarity store."""
    monkeypatch.setattr(config, "MATCH_BACKEND", "memory")
    assert isinstance(config.get_vector_store(4), SimpleInMemoryVectorStore)

    monkeypatch.setattr(config, "MATCH_BACKEND", "faiss")
    store = config.get_vector_store(4)
    assert isinstance(store, FaissVectorStore)
    assert store.dimension == 4
