"""
HTTP API for posting ideas, similarity alerts and the idea map.
"""

from dataclasses import asdict
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from .schemas import (
    EmbedRequest,
    EmbedResponse,
    IdeaCreateRequest,
    IdeaCreateResponse,
    IdeaResponse,
    IdeaListResponse,
    SimilarityAlertResponse,
    MatchRequest,
    MatchItem,
    MatchResponse,
    GraphNode,
    GraphEdgeResponse,
    GraphResponse,
    GraphRefreshResponse,
    HealthResponse
)
from ..core import config, dao
from ..core.db import init_db, health_check
from ..core.errors import EmbeddingServiceError, InvalidIdeaError, StoreError
from ..core.layout import GraphLayoutService
from ..core.posting import post_idea
from ..util.logging import logger

app = FastAPI(
    title="sparkmap API",
    version=config.VERSION,
    description="Post ideas, get alerted to related ideas from others, and explore the idea map",
    docs_url="/docs" if config.debug_enabled() else None,
    redoc_url="/redoc" if config.debug_enabled() else None
)

# Allow the web UI dev servers
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

layout_service: Optional[GraphLayoutService] = None


@app.on_event("startup")
def startup():
    """Initialize the store and the background idea map."""
    global layout_service

    issues = config.validate_config()
    for issue in issues:
        logger.warning(f"Configuration issue: {issue}")

    init_db()
    layout_service = GraphLayoutService()
    dao.subscribe_inserts(layout_service.on_insert)
    layout_service.refresh()
    logger.info("sparkmap API started")


@app.on_event("shutdown")
def shutdown():
    """Tear down the idea map worker; late projections are dropped."""
    global layout_service

    if layout_service is not None:
        dao.unsubscribe_inserts(layout_service.on_insert)
        layout_service.close()
        layout_service = None


def _idea_response(idea) -> IdeaResponse:
    return IdeaResponse(
        id=idea.id,
        author=idea.author,
        title=idea.title,
        content=idea.content,
        created_at=idea.created_at,
        is_public=idea.is_public
    )


def _embed(text: str):
    try:
        return config.get_embedding_provider().embed_text(text)
    except EmbeddingServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint():
    """Check system health."""
    db_health = health_check()

    return HealthResponse(
        status="healthy" if db_health else "unhealthy",
        version=config.VERSION,
        db_health=db_health,
        idea_count=dao.count_ideas() if db_health else 0,
        config_issues=config.validate_config()
    )


@app.post("/embed", response_model=EmbedResponse)
def embed_endpoint(request: EmbedRequest):
    """Embed a piece of text with the configured provider."""
    if not request.text.strip():
        raise HTTPException(status_code=400, detail="text cannot be empty")

    embedding = _embed(request.text)
    return EmbedResponse(embedding=embedding, dimension=len(embedding))


@app.get("/ideas", response_model=IdeaListResponse)
def list_ideas_endpoint(limit: Optional[int] = Query(default=None, ge=1, le=500)):
    """List ideas, newest first."""
    try:
        ideas = dao.list_ideas(limit=limit or config.IDEA_LIST_LIMIT, newest_first=True)
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return IdeaListResponse(ideas=[_idea_response(idea) for idea in ideas])


@app.post("/ideas", response_model=IdeaCreateResponse)
def create_idea_endpoint(request: IdeaCreateRequest):
    """Post an idea; the response carries a similarity alert when a related idea exists."""
    try:
        result = post_idea(
            author=request.author,
            content=request.content,
            title=request.title,
            is_public=request.is_public
        )
    except InvalidIdeaError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EmbeddingServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return IdeaCreateResponse(
        idea=_idea_response(result.idea),
        match_status=result.match_status,
        alert=SimilarityAlertResponse(**asdict(result.alert)) if result.alert else None,
        error=result.error
    )


@app.post("/match", response_model=MatchResponse)
def match_endpoint(request: MatchRequest):
    """Find stored ideas from other authors similar to a text or embedding."""
    vector = request.embedding or _embed(request.text)

    try:
        result = dao.match_ideas(
            vector,
            exclude_author=request.exclude_author,
            threshold=request.threshold,
            limit=request.limit
        )
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return MatchResponse(
        found=result.found,
        matches=[MatchItem(**asdict(match)) for match in result.matches]
    )


def _require_layout_service() -> GraphLayoutService:
    if layout_service is None:
        raise HTTPException(status_code=503, detail="Idea map is not running")
    return layout_service


@app.get("/graph", response_model=GraphResponse)
def graph_endpoint(width: Optional[int] = Query(default=None, ge=100),
                   height: Optional[int] = Query(default=None, ge=100)):
    """Return the latest idea map; a new viewport size triggers a recompute."""
    service = _require_layout_service()
    if (width and width != service.width) or (height and height != service.height):
        try:
            service.refresh(width=width, height=height)
        except StoreError as e:
            raise HTTPException(status_code=503, detail=str(e))

    layout = service.layout
    return GraphResponse(
        status=layout.status,
        generation=layout.generation,
        width=layout.width,
        height=layout.height,
        nodes=[
            GraphNode(
                id=node.id, x=node.x, y=node.y, cx=node.cx, cy=node.cy,
                content=node.content, preview=node.preview, author=node.author
            )
            for node in layout.nodes
        ],
        edges=[GraphEdgeResponse(**asdict(edge)) for edge in layout.edges],
        dropped=layout.dropped,
        error=layout.error
    )


@app.post("/graph/refresh", response_model=GraphRefreshResponse)
def graph_refresh_endpoint():
    """Recompute the idea map from the current ideas; the latest request wins."""
    service = _require_layout_service()
    try:
        generation = service.refresh()
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return GraphRefreshResponse(generation=generation, status="pending")
