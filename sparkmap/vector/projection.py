"""
Manifold projection: reduce a population of embeddings to 2-D points with UMAP.

Every call fits a fresh reducer without a fixed seed, so coordinates differ
between runs on the same input; only the neighbourhood structure is stable.
"""

import time
from typing import Optional, Sequence

import numpy as np
import umap

from ..core import config
from ..core.schema import ProjectionOutcome, ProjectionStatus
from ..util.logging import logger
from .normalizer import normalize_coordinates


class ProjectionEngine:
    """UMAP-based projection of N vectors (N >= 3) to N normalized 2-D points."""

    def __init__(self, n_neighbors: Optional[int] = None, min_dist: Optional[float] = None,
                 spread: Optional[float] = None, metric: Optional[str] = None,
                 n_epochs: Optional[int] = None):
        self.n_neighbors = n_neighbors or config.UMAP_N_NEIGHBORS
        self.min_dist = config.UMAP_MIN_DIST if min_dist is None else min_dist
        self.spread = config.UMAP_SPREAD if spread is None else spread
        self.metric = metric or config.UMAP_METRIC
        self.n_epochs = n_epochs or config.UMAP_N_EPOCHS

    def neighbor_count(self, population: int) -> int:
        """Neighbours requested for a population of ``population`` vectors."""
        return min(self.n_neighbors, population - 1)

    def _reducer(self, population: int):
        # The spectral initializer needs more points than it has eigenvectors
        init = "spectral" if population > config.SPECTRAL_INIT_MIN_POPULATION else "random"
        return umap.UMAP(
            n_components=2,
            n_neighbors=self.neighbor_count(population),
            min_dist=self.min_dist,
            spread=self.spread,
            metric=self.metric,
            n_epochs=self.n_epochs,
            init=init,
        )

    def project(self, vectors: Sequence[Sequence[float]]) -> ProjectionOutcome:
        """
        Project ``vectors`` to 2-D.

        Returns:
            ProjectionOutcome with status ``insufficient_data`` for fewer than
            three vectors (the reducer is never built), ``failed`` on ragged input
            or any reducer error, otherwise ``ok`` with (N, 2) coordinates in
            [0, 1], index-aligned with ``vectors``.
        """
        population = len(vectors)
        if population < config.MIN_PROJECTION_POPULATION:
            logger.log_operation("projection.run", "insufficient_data", {"population": population})
            return ProjectionOutcome(status=ProjectionStatus.INSUFFICIENT_DATA)

        try:
            data = np.asarray(vectors, dtype=np.float32)
        except (TypeError, ValueError) as e:
            return self._failed(population, f"inconsistent vector dimensions: {e}")

        if data.ndim != 2 or data.shape[1] == 0:
            return self._failed(population, f"expected an (N, D) population, got shape {data.shape}")

        start_time = time.monotonic()
        try:
            layout = self._reducer(population).fit_transform(data)
        except Exception as e:
            return self._failed(population, f"projection failed: {e}", start_time)

        layout = np.asarray(layout, dtype=np.float64)
        if layout.shape != (population, 2) or not np.all(np.isfinite(layout)):
            return self._failed(population, "projection produced non-finite coordinates", start_time)

        logger.log_projection_run(population, "success", start_time, time.monotonic(),
                                  {"n_neighbors": self.neighbor_count(population), "dimension": data.shape[1]})
        return ProjectionOutcome(status=ProjectionStatus.OK, coordinates=normalize_coordinates(layout))

    def _failed(self, population: int, message: str, start_time: Optional[float] = None) -> ProjectionOutcome:
        start_time = start_time if start_time is not None else time.monotonic()
        logger.log_projection_run(population, "failed", start_time, time.monotonic(), {"error": message})
        return ProjectionOutcome(status=ProjectionStatus.FAILED, error=message)
