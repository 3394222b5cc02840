"""
Request and response models for the sparkmap HTTP API.
"""

from pydantic import BaseModel, field_validator, model_validator
from typing import Optional, List, Tuple, Any
from datetime import datetime


class EmbedRequest(BaseModel):
    text: str


class EmbedResponse(BaseModel):
    embedding: List[float]
    dimension: int


class IdeaCreateRequest(BaseModel):
    author: str
    content: str
    title: Optional[str] = None
    is_public: bool = True

    @field_validator('author')
    @classmethod
    def author_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('author cannot be empty')
        return v.strip()

    @field_validator('content')
    @classmethod
    def content_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('content cannot be empty')
        return v


class IdeaResponse(BaseModel):
    id: int
    author: str
    title: Optional[str] = None
    content: str
    created_at: datetime
    is_public: bool


class IdeaListResponse(BaseModel):
    ideas: List[IdeaResponse]


class SimilarityAlertResponse(BaseModel):
    idea_id: int
    author: str
    content: str
    similarity: float
    reason: str


class IdeaCreateResponse(BaseModel):
    idea: IdeaResponse
    match_status: str
    alert: Optional[SimilarityAlertResponse] = None
    error: Optional[str] = None


class MatchRequest(BaseModel):
    text: Optional[str] = None
    embedding: Optional[List[float]] = None
    exclude_author: str
    threshold: Optional[float] = None
    limit: Optional[int] = None

    @field_validator('threshold')
    @classmethod
    def threshold_must_be_in_range(cls, v):
        if v is not None and not 0.0 <= v <= 1.0:
            raise ValueError('threshold must be within [0, 1]')
        return v

    @field_validator('limit')
    @classmethod
    def limit_must_be_positive(cls, v):
        if v is not None and v < 1:
            raise ValueError('limit must be >= 1')
        return v

    @model_validator(mode='after')
    def text_or_embedding(self):
        if not self.embedding and not (self.text and self.text.strip()):
            raise ValueError('either text or embedding is required')
        return self


class MatchItem(BaseModel):
    id: int
    author: str
    content: str
    similarity: float


class MatchResponse(BaseModel):
    found: bool
    matches: List[MatchItem]


class GraphNode(BaseModel):
    id: int
    x: float
    y: float
    cx: float
    cy: float
    content: str
    preview: str
    author: Optional[str] = None


class GraphEdgeResponse(BaseModel):
    source: int
    target: int
    distance: float
    opacity: float
    width: float


class GraphResponse(BaseModel):
    status: str
    generation: int
    width: int
    height: int
    nodes: List[GraphNode]
    edges: List[GraphEdgeResponse]
    dropped: List[Tuple[Any, str]]
    error: Optional[str] = None


class GraphRefreshResponse(BaseModel):
    generation: int
    status: str


class HealthResponse(BaseModel):
    status: str
    version: str
    db_health: bool
    idea_count: int
    config_issues: List[str]
