import numpy as np
import pytest

from worldmap.mapping.geometry import max_edge_dx, point_in_polygon, points_in_polygon, polygon_to_shapely

SQUARE = np.array([[0.0, 0.0], [2.0, 0.0], [2.0, 2.0], [0.0, 2.0]])
# U shape: the notch between x=1..2 above y=1 is outside
U_SHAPE = np.array([[0, 0], [3, 0], [3, 3], [2, 3], [2, 1], [1, 1], [1, 3], [0, 3]], dtype=float)


def test_point_in_square():
    assert point_in_polygon(1.0, 1.0, SQUARE)
    assert not point_in_polygon(3.0, 1.0, SQUARE)
    assert not point_in_polygon(1.0, -0.5, SQUARE)


def test_point_in_concave_polygon():
    assert point_in_polygon(0.5, 2.5, U_SHAPE)
    assert point_in_polygon(2.5, 2.5, U_SHAPE)
    assert not point_in_polygon(1.5, 2.0, U_SHAPE)
    assert point_in_polygon(1.5, 0.5, U_SHAPE)


def test_closed_and_open_rings_agree():
    closed = np.vstack([SQUARE, SQUARE[:1]])
    for x, y in [(1.0, 1.0), (2.5, 1.0), (0.1, 1.9)]:
        assert point_in_polygon(x, y, closed) == point_in_polygon(x, y, SQUARE)


def test_vectorized_matches_scalar():
    rng = np.random.default_rng(0)
    pts = rng.uniform(-0.5, 3.5, size=(200, 2))
    mask = points_in_polygon(pts, U_SHAPE)
    expected = [point_in_polygon(x, y, U_SHAPE) for x, y in pts]
    assert mask.tolist() == expected


def test_matches_shapely():
    poly = polygon_to_shapely(U_SHAPE)
    from shapely.geometry import Point

    rng = np.random.default_rng(1)
    for x, y in rng.uniform(-0.5, 3.5, size=(100, 2)):
        assert point_in_polygon(x, y, U_SHAPE) == poly.contains(Point(x, y))


def test_degenerate_polygon_contains_nothing():
    assert not point_in_polygon(0.0, 0.0, np.array([[0.0, 0.0], [1.0, 1.0]]))
    assert points_in_polygon(np.zeros((3, 2)), np.zeros((2, 2))).tolist() == [False] * 3


def test_bad_polygon_shape():
    with pytest.raises(ValueError):
        point_in_polygon(0.0, 0.0, np.zeros((4, 3)))


def test_max_edge_dx():
    ring = np.array([[3.0, 0.0], [3.1, 1.0], [-3.1, 1.0]])
    assert max_edge_dx(ring) == pytest.approx(6.2)
    assert max_edge_dx(ring[:2], closed=False) == pytest.approx(0.1)
    assert polygon_to_shapely(None) is None
