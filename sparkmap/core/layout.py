"""
Idea map composition: ingestion, projection, viewport mapping and proximity edges.

GraphLayoutService keeps the most recent layout and recomputes it in the
background whenever the idea population changes.
"""

import random
import threading
from typing import Any, Iterable, Optional

import numpy as np

from . import config
from .schema import (
    GraphLayout, IngestionResult, ProjectedPoint, ProjectionOutcome, ProjectionStatus
)
from ..util.logging import logger
from ..vector.edges import build_edges
from ..vector.ingestion import ingest_records
from ..vector.normalizer import map_to_viewport
from ..vector.projection import ProjectionEngine
from ..vector.worker import ProjectionWorker


def preview(content: str, length: int = None) -> str:
    """Shorten idea content for a node tooltip."""
    length = length or config.PREVIEW_LENGTH
    content = content or ""
    return content[:length] + "..." if len(content) > length else content


def _scatter(count: int, rng: random.Random = None) -> np.ndarray:
    rng = rng or random.Random()
    return np.array([[rng.random(), rng.random()] for _ in range(count)]).reshape(count, 2)


def compose_layout(ingested: IngestionResult, outcome: ProjectionOutcome, width: int, height: int,
                   scatter_fallback: bool = None) -> GraphLayout:
    """Turn a projection outcome into viewport nodes and proximity edges."""
    if scatter_fallback is None:
        scatter_fallback = config.GRAPH_SCATTER_FALLBACK

    layout = GraphLayout(
        status=outcome.status.value,
        dropped=list(ingested.dropped),
        error=outcome.error,
        width=width,
        height=height
    )

    if outcome.status == ProjectionStatus.OK:
        coordinates = outcome.coordinates
    elif outcome.status == ProjectionStatus.INSUFFICIENT_DATA and scatter_fallback and ingested.vectors:
        # Presentation-only placement so a near-empty map is not blank
        coordinates = _scatter(len(ingested.vectors))
    else:
        return layout

    viewport = map_to_viewport(coordinates, width, height, config.GRAPH_VIEWPORT_MARGIN)

    for vector, (x, y), (cx, cy) in zip(ingested.vectors, coordinates, viewport):
        layout.nodes.append(ProjectedPoint(
            id=vector.id,
            x=float(x),
            y=float(y),
            content=vector.content,
            author=vector.author,
            preview=preview(vector.content),
            cx=float(cx),
            cy=float(cy)
        ))

    if outcome.status == ProjectionStatus.OK:
        layout.edges = build_edges(
            [node.id for node in layout.nodes],
            viewport,
            threshold=config.GRAPH_EDGE_THRESHOLD,
            min_width=config.GRAPH_EDGE_MIN_WIDTH,
            width_scale=config.GRAPH_EDGE_WIDTH_SCALE
        )

    return layout


def build_layout(records: Iterable[Any], width: int = None, height: int = None,
                 engine: Optional[ProjectionEngine] = None) -> GraphLayout:
    """Synchronously compute the idea map for ``records``."""
    width = width or config.GRAPH_DEFAULT_WIDTH
    height = height or config.GRAPH_DEFAULT_HEIGHT

    ingested = ingest_records(records, expected_dimension=config.EMBED_DIM or None)
    outcome = (engine or ProjectionEngine()).project([v.embedding for v in ingested.vectors])
    return compose_layout(ingested, outcome, width, height)


class GraphLayoutService:
    """
    Holds the latest idea map and refreshes it off the request path.

    ``refresh()`` snapshots the current ideas and submits them to the
    projection worker; only the newest submission's response is applied.
    """

    def __init__(self, load_records=None, worker: Optional[ProjectionWorker] = None,
                 width: int = None, height: int = None):
        if load_records is None:
            from .dao import list_ideas

            def load_records():
                return list_ideas(limit=config.GRAPH_MAX_IDEAS, newest_first=True)

        self.load_records = load_records
        self.worker = worker or ProjectionWorker()
        self.width = width or config.GRAPH_DEFAULT_WIDTH
        self.height = height or config.GRAPH_DEFAULT_HEIGHT
        self._lock = threading.Lock()
        # Snapshot and generation must be taken together
        self._refresh_lock = threading.Lock()
        self._layout = GraphLayout(status="pending", width=self.width, height=self.height)

    @property
    def layout(self) -> GraphLayout:
        with self._lock:
            return self._layout

    def refresh(self, width: int = None, height: int = None) -> int:
        """Request a new layout of the current population. Returns its generation."""
        with self._refresh_lock:
            with self._lock:
                self.width = width or self.width
                self.height = height or self.height
                width, height = self.width, self.height

            ingested = ingest_records(self.load_records(), expected_dimension=config.EMBED_DIM or None)

            def apply(generation: int, outcome: ProjectionOutcome):
                self._apply(generation, outcome, ingested, width, height)

            # Not under self._lock: the worker delivers while holding its own lock
            generation = self.worker.submit([v.embedding for v in ingested.vectors], apply)

        with self._lock:
            if self._layout.generation < generation:
                self._layout = GraphLayout(
                    status="pending",
                    dropped=list(ingested.dropped),
                    width=width,
                    height=height,
                    generation=generation
                )
        return generation

    def on_insert(self, record) -> None:
        """Insert listener: any new idea invalidates the whole map."""
        self.refresh()

    def _apply(self, generation: int, outcome: ProjectionOutcome, ingested: IngestionResult,
               width: int, height: int) -> None:
        layout = compose_layout(ingested, outcome, width, height)
        layout.generation = generation

        with self._lock:
            if self._layout.generation > generation:
                return
            self._layout = layout

        logger.log_operation("graph.layout", layout.status, {
            "generation": generation,
            "nodes": len(layout.nodes),
            "edges": len(layout.edges)
        })

    def close(self) -> None:
        """Stop accepting responses; in-flight projections are discarded."""
        self.worker.close()
