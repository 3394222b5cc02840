"""
Proximity edge construction over rendered points.
"""

import numpy as np
import pytest

from sparkmap.vector.edges import build_edges


def test_close_pair_gets_edge():
    """Test that points closer than the threshold are connected."""
    edges = build_edges(["a", "b"], np.array([[0.0, 0.0], [30.0, 40.0]]), threshold=150.0)

    assert len(edges) == 1
    edge = edges[0]
    assert (edge.source, edge.target) == ("a", "b")
    assert edge.distance == pytest.approx(50.0)
    assert edge.opacity == pytest.approx(1 - 50.0 / 150.0)
    assert edge.width == pytest.approx(2.0 * (1 - 50.0 / 150.0))


def test_distant_pair_gets_no_edge():
    """Test that points at or beyond the threshold stay unconnected."""
    coords = np.array([[0.0, 0.0], [150.0, 0.0], [400.0, 0.0]])

    edges = build_edges([1, 2, 3], coords, threshold=150.0)

    assert edges == []


def test_width_has_lower_bound():
    """Test that nearly-threshold edges keep the minimum width."""
    edges = build_edges([1, 2], np.array([[0.0, 0.0], [149.0, 0.0]]), threshold=150.0, min_width=0.5)

    assert edges[0].width == pytest.approx(0.5)
    assert 0.0 < edges[0].opacity < 0.01


def test_coincident_points_full_weight():
    """Test that coincident points get full opacity and maximum width."""
    edges = build_edges([1, 2], np.array([[10.0, 10.0], [10.0, 10.0]]))

    assert edges[0].opacity == pytest.approx(1.0)
    assert edges[0].width == pytest.approx(2.0)


def test_each_unordered_pair_once():
    """Test that a tight cluster yields one edge per pair, ordered by index."""
    coords = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])

    edges = build_edges([0, 1, 2, 3], coords, threshold=150.0)

    pairs = [(e.source, e.target) for e in edges]
    assert pairs == [(0, 1), (0, 2), (0, 3), (1, 2), (1, 3), (2, 3)]


def test_empty_and_single_point():
    """Test that fewer than two points produce no edges."""
    assert build_edges([], np.empty((0, 2))) == []
    assert build_edges([1], np.array([[5.0, 5.0]])) == []


def test_invalid_arguments():
    """Test that a non-positive threshold or misaligned ids are rejected."""
    with pytest.raises(ValueError):
        build_edges([1, 2], np.zeros((2, 2)), threshold=0)

    with pytest.raises(ValueError):
        build_edges([1], np.zeros((2, 2)))
