"""
Embedding ingestion: turn raw idea records into a validated vector population.

Records may carry their embedding as JSON text (the form the store returns) or as
a native numeric sequence. A bad embedding drops that record only.
"""

import json
from collections import Counter
from typing import Any, Iterable, List, Mapping, Optional, Tuple

import numpy as np

from ..core.schema import IngestedVector, IngestionResult
from ..util.logging import logger


def record_field(record: Any, name: str, default=None):
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def parse_embedding(raw: Any) -> np.ndarray:
    """Parse an embedding from JSON text or a numeric sequence.

    Raises:
        ValueError: if the embedding is missing, malformed, empty or non-finite,
            or holds anything but numbers (booleans and numeric strings included).
    """
    if raw is None:
        raise ValueError("missing embedding")

    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"unparsable embedding text: {e.msg}")

    if isinstance(raw, (str, Mapping)) or not hasattr(raw, "__len__"):
        raise ValueError(f"embedding is not a sequence: {type(raw).__name__}")

    if isinstance(raw, np.ndarray) and raw.ndim != 1:
        raise ValueError(f"embedding must be one-dimensional, got shape {raw.shape}")

    # Booleans and numeric strings would otherwise be coerced to floats
    if any(isinstance(v, (bool, np.bool_, str, bytes)) for v in raw):
        raise ValueError("embedding contains non-numeric values")

    try:
        vector = np.asarray(raw, dtype=np.float64)
    except (TypeError, ValueError):
        raise ValueError("embedding contains non-numeric values")

    if vector.ndim != 1:
        raise ValueError(f"embedding must be one-dimensional, got shape {vector.shape}")
    if vector.size == 0:
        raise ValueError("empty embedding")
    if not np.all(np.isfinite(vector)):
        raise ValueError("embedding contains non-finite values")

    return vector


def ingest_records(records: Iterable[Any], expected_dimension: Optional[int] = None) -> IngestionResult:
    """
    Validate the embeddings of a batch of records.

    Args:
        records: Mappings or objects with ``id``, ``content``, ``embedding`` and
            optionally ``author``
        expected_dimension: Required vector length. When omitted the most common
            length in the batch is used (ties go to the length seen first).

    Returns:
        IngestionResult with the surviving vectors in input order, the dropped
        ``(id, reason)`` pairs and the population dimension.
    """
    parsed: List[Tuple[Any, Any, Any, np.ndarray]] = []
    dropped: List[Tuple[Any, str]] = []

    for record in records:
        record_id = record_field(record, "id")
        try:
            vector = parse_embedding(record_field(record, "embedding"))
        except ValueError as e:
            dropped.append((record_id, str(e)))
            logger.log_ingestion_drop(record_id, str(e))
            continue
        parsed.append((record_id, record_field(record, "content", ""), record_field(record, "author"), vector))

    dimension = expected_dimension or None
    if dimension is None and parsed:
        lengths = Counter(vector.size for _, _, _, vector in parsed)
        top = max(lengths.values())
        dimension = next(vector.size for _, _, _, vector in parsed if lengths[vector.size] == top)

    vectors = []
    for record_id, content, author, vector in parsed:
        if vector.size != dimension:
            reason = f"dimension {vector.size} does not match population dimension {dimension}"
            dropped.append((record_id, reason))
            logger.log_ingestion_drop(record_id, reason)
            continue
        vectors.append(IngestedVector(id=record_id, content=content or "", author=author, embedding=vector))

    return IngestionResult(vectors=vectors, dropped=dropped, dimension=dimension if vectors else None)
