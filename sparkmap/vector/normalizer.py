"""
Coordinate normalization: rescale raw projection output into [0, 1] and into a viewport.
"""

import numpy as np


def normalize_coordinates(raw) -> np.ndarray:
    """
    Min-max scale each axis of ``raw`` (shape (N, 2)) into [0, 1].

    An axis where every point has the same value maps to a constant 0: its
    range is replaced by 1 rather than dividing by zero.
    """
    points = np.asarray(raw, dtype=np.float64)
    if points.ndim != 2:
        raise ValueError(f"expected an (N, 2) array, got shape {points.shape}")
    if points.shape[0] == 0:
        return points.copy()

    mins = points.min(axis=0)
    spans = points.max(axis=0) - mins
    spans[spans == 0] = 1.0

    return (points - mins) / spans


def map_to_viewport(points, width: float, height: float, margin: float = 0.05) -> np.ndarray:
    """
    Map normalized points into a ``width`` x ``height`` viewport.

    ``margin`` is the fraction of each dimension kept empty on both sides, so a
    point at 0 lands at ``width * margin`` and a point at 1 at ``width * (1 - margin)``.
    """
    if not 0.0 <= margin < 0.5:
        raise ValueError(f"margin must be within [0, 0.5), got {margin}")

    normalized = np.asarray(points, dtype=np.float64)
    if normalized.shape[0] == 0:
        return normalized.reshape(0, 2)

    scale = np.array([width * (1 - 2 * margin), height * (1 - 2 * margin)])
    offset = np.array([width * margin, height * margin])
    return normalized * scale + offset
