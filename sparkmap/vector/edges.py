"""
Proximity graph over rendered points.

Every unordered pair closer than the threshold gets an edge whose opacity and
width fall off linearly with distance. This is an O(N^2) pass, sized for tens to
low hundreds of ideas.
"""

from typing import Any, List, Sequence

import numpy as np

from ..core.schema import GraphEdge


def build_edges(ids: Sequence[Any], coordinates, threshold: float = 150.0,
                min_width: float = 0.5, width_scale: float = 2.0) -> List[GraphEdge]:
    """
    Build edges between points whose Euclidean distance is below ``threshold``.

    Args:
        ids: Point identifiers, index-aligned with ``coordinates``
        coordinates: (N, 2) array in rendered (viewport) space
        threshold: Distance at or beyond which no edge is drawn
        min_width: Lower bound on edge width
        width_scale: Width of an edge between coincident points

    Returns:
        Edges ordered by (i, j) with i < j
    """
    if threshold <= 0:
        raise ValueError("threshold must be > 0")

    points = np.asarray(coordinates, dtype=np.float64)
    if len(ids) != len(points):
        raise ValueError("ids and coordinates must have the same length")

    edges = []
    for i in range(len(points)):
        for j in range(i + 1, len(points)):
            distance = float(np.linalg.norm(points[i] - points[j]))
            if distance >= threshold:
                continue
            closeness = 1 - distance / threshold
            edges.append(GraphEdge(
                source=ids[i],
                target=ids[j],
                distance=distance,
                opacity=closeness,
                width=max(min_width, width_scale * closeness)
            ))

    return edges
