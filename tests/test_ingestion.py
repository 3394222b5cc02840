"""
Embedding ingestion: parsing stored embeddings and building a consistent population.
"""

import json

import numpy as np
import pytest

from sparkmap.core.schema import IdeaRecord
from sparkmap.vector.ingestion import parse_embedding, ingest_records


def test_parse_embedding_from_json_text():
    """Test that JSON text embeddings parse to a float vector."""
    vector = parse_embedding("[0.1, 0.2, 0.3]")

    assert isinstance(vector, np.ndarray)
    assert vector.dtype == np.float64
    assert np.allclose(vector, [0.1, 0.2, 0.3])


def test_parse_embedding_from_native_sequence():
    """Test that list, tuple and array embeddings are accepted."""
    assert np.allclose(parse_embedding([1, 2, 3]), [1.0, 2.0, 3.0])
    assert np.allclose(parse_embedding((1.5, -2.5)), [1.5, -2.5])
    assert np.allclose(parse_embedding(np.array([0.0, 1.0])), [0.0, 1.0])


def test_parse_embedding_from_bytes():
    """Test that UTF-8 encoded JSON is accepted."""
    assert np.allclose(parse_embedding(b"[1.0, 2.0]"), [1.0, 2.0])


@pytest.mark.parametrize("raw", [
    None,
    "not json",
    "{\"a\": 1}",
    "\"text\"",
    "42",
    "[]",
    "[[1, 2], [3, 4]]",
    "[1, \"x\", 3]",
    [True, False, True],
    [1.0, float("nan")],
    [1.0, float("inf")],
    np.array(3.0),
    np.zeros((2, 2)),
    ["1", "2"],
    "[\"1\", \"2\"]",
    np.array(["1.0", "2.0"]),
])
def test_parse_embedding_rejects_malformed_input(raw):
    """Test that malformed embeddings raise ValueError."""
    with pytest.raises(ValueError):
        parse_embedding(raw)


def test_ingest_keeps_consistent_population_in_order():
    """Test that valid records survive in input order with their metadata."""
    records = [
        {"id": 1, "content": "first", "author": "a", "embedding": "[1, 0, 0]"},
        {"id": 2, "content": "second", "author": "b", "embedding": [0, 1, 0]},
        {"id": 3, "content": "third", "author": "c", "embedding": "[0, 0, 1]"},
    ]

    result = ingest_records(records)

    assert [v.id for v in result.vectors] == [1, 2, 3]
    assert [v.content for v in result.vectors] == ["first", "second", "third"]
    assert result.vectors[1].author == "b"
    assert result.dropped == []
    assert result.dimension == 3


def test_ingest_drops_unparsable_record_only():
    """Test that a bad embedding drops that record and keeps the rest."""
    records = [
        {"id": 1, "content": "good", "embedding": "[1, 2, 3]"},
        {"id": 2, "content": "bad", "embedding": "[1, 2,"},
        {"id": 3, "content": "missing", "embedding": None},
        {"id": 4, "content": "good too", "embedding": "[4, 5, 6]"},
    ]

    result = ingest_records(records)

    assert [v.id for v in result.vectors] == [1, 4]
    assert [record_id for record_id, _ in result.dropped] == [2, 3]
    assert "missing embedding" in result.dropped[1][1]


def test_ingest_drops_minority_dimension():
    """Test that vectors outside the most common dimension are dropped."""
    records = [
        {"id": 1, "content": "x", "embedding": [1, 2, 3]},
        {"id": 2, "content": "y", "embedding": [1, 2]},
        {"id": 3, "content": "z", "embedding": [3, 2, 1]},
    ]

    result = ingest_records(records)

    assert [v.id for v in result.vectors] == [1, 3]
    assert result.dimension == 3
    assert result.dropped[0][0] == 2
    assert "dimension 2" in result.dropped[0][1]


def test_ingest_dimension_tie_goes_to_first_seen():
    """Test that equally common lengths resolve to the one seen first."""
    records = [
        {"id": 1, "content": "x", "embedding": [1, 2]},
        {"id": 2, "content": "y", "embedding": [1, 2, 3]},
    ]

    result = ingest_records(records)

    assert result.dimension == 2
    assert [v.id for v in result.vectors] == [1]


def test_ingest_with_expected_dimension():
    """Test that an expected dimension overrides the population majority."""
    records = [
        {"id": 1, "content": "x", "embedding": [1, 2]},
        {"id": 2, "content": "y", "embedding": [1, 2]},
        {"id": 3, "content": "z", "embedding": [1, 2, 3]},
    ]

    result = ingest_records(records, expected_dimension=3)

    assert [v.id for v in result.vectors] == [3]
    assert len(result.dropped) == 2


def test_ingest_accepts_idea_records():
    """Test that stored IdeaRecord objects ingest like mappings."""
    from datetime import datetime

    records = [
        IdeaRecord(id=7, author="dana", content="gene clustering", created_at=datetime.now(),
                   embedding=json.dumps([0.5, 0.5])),
    ]

    result = ingest_records(records)

    assert len(result.vectors) == 1
    assert result.vectors[0].id == 7
    assert result.vectors[0].author == "dana"


def test_ingest_empty_input():
    """Test that an empty batch yields an empty population."""
    result = ingest_records([])

    assert result.vectors == []
    assert result.dropped == []
    assert result.dimension is None


def test_ingest_survives_scalar_and_string_embeddings():
    """Test that a 0-d array or numeric strings drop only their own record."""
    records = [
        {"id": 1, "content": "strings", "embedding": ["1", "2"]},
        {"id": 2, "content": "scalar", "embedding": np.array(3.0)},
        {"id": 3, "content": "good", "embedding": np.array([1.0, 2.0])},
    ]

    result = ingest_records(records)

    assert [v.id for v in result.vectors] == [3]
    assert [record_id for record_id, _ in result.dropped] == [1, 2]
