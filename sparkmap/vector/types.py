"""
Vector records and scored results exchanged with the vector stores.
"""

from typing import Dict, Optional
import numpy as np
from dataclasses import dataclass


@dataclass
class VectorRecord:
    """An idea embedding with the metadata the matcher reports back."""

    id: str
    """Idea identifier"""

    vector: Optional[np.ndarray]
    """Embedding of the idea content"""

    metadata: Dict[str, object]
    """Author, content and any other fields returned with a match"""


@dataclass
class QueryResult:
    """A scored hit from a vector store search."""

    id: str
    """Identifier of the matching idea"""

    score: float
    """Cosine similarity between query and stored vector"""

    metadata: Dict[str, object]
    """Metadata stored alongside the matching vector"""
