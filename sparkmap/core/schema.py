"""
Record and result types shared by the idea store, the projection pipeline and the matcher.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional, Tuple

import numpy as np


@dataclass
class IdeaRecord:
    id: int
    author: str
    content: str
    created_at: datetime
    embedding: Any  # JSON text as stored, or a numeric sequence
    title: Optional[str] = None
    is_public: bool = True


@dataclass
class IngestedVector:
    id: Any
    content: str
    author: Optional[str]
    embedding: np.ndarray


@dataclass
class IngestionResult:
    vectors: List[IngestedVector]
    dropped: List[Tuple[Any, str]]
    dimension: Optional[int]


class ProjectionStatus(str, Enum):
    OK = "ok"
    INSUFFICIENT_DATA = "insufficient_data"
    FAILED = "failed"


@dataclass
class ProjectionOutcome:
    status: ProjectionStatus
    coordinates: Optional[np.ndarray] = None  # (N, 2), normalized to [0, 1]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == ProjectionStatus.OK


@dataclass
class ProjectedPoint:
    id: Any
    x: float
    y: float
    content: str = ""
    author: Optional[str] = None
    preview: str = ""
    cx: float = 0.0
    cy: float = 0.0


@dataclass
class GraphEdge:
    source: Any
    target: Any
    distance: float
    opacity: float
    width: float


@dataclass
class GraphLayout:
    status: str  # pending|ok|insufficient_data|failed
    nodes: List[ProjectedPoint] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)
    dropped: List[Tuple[Any, str]] = field(default_factory=list)
    error: Optional[str] = None
    width: int = 0
    height: int = 0
    generation: int = 0


@dataclass
class SimilarityQuery:
    vector: Any
    exclude_author: str
    threshold: float
    limit: int = 1


@dataclass
class SimilarityMatch:
    id: Any
    author: str
    content: str
    similarity: float


@dataclass
class SimilarityResult:
    matches: List[SimilarityMatch] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return bool(self.matches)

    @property
    def best(self) -> Optional[SimilarityMatch]:
        return self.matches[0] if self.matches else None
