"""
Error types surfaced to callers of the idea store, embedding service and core engine.
"""


class SparkmapError(Exception):
    """Base class for sparkmap errors."""


class EmbeddingServiceError(SparkmapError):
    """The embedding service failed, timed out or returned an unusable response."""


class StoreError(SparkmapError):
    """The idea store could not be read or written."""


class InvalidIdeaError(SparkmapError):
    """A posted idea or query failed validation."""
