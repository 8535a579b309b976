"""
geometry.py

Planar polygon helpers used on projected shapes.

- `point_in_polygon(x, y, polygon)` : even-odd (ray casting) containment
- `points_in_polygon(xy, polygon)` : the same test for many points at once
- `max_edge_dx(polygon)` : widest horizontal jump between consecutive vertices
- `polygon_to_shapely(polygon)` : shapely Polygon from an (N, 2) ring

Polygons are (N, 2) float arrays, implicitly closed: the edge from the last
vertex back to the first is always tested.
"""
from typing import Optional

import numpy as np


def _edge_arrays(polygon):
    poly = np.asarray(polygon, dtype=float)
    if poly.ndim != 2 or poly.shape[1] != 2:
        raise ValueError(f'polygon must be an (N, 2) array, got shape {poly.shape}')
    xi = poly[:, 0]
    yi = poly[:, 1]
    xj = np.roll(xi, 1)
    yj = np.roll(yi, 1)
    return xi, yi, xj, yj


def point_in_polygon(x: float, y: float, polygon: np.ndarray) -> bool:
    """Even-odd rule: cast a ray towards +x and count edge crossings.

    Points exactly on an edge may fall either way.
    """
    xi, yi, xj, yj = _edge_arrays(polygon)
    if xi.size < 3:
        return False
    straddles = (yi > y) != (yj > y)
    with np.errstate(divide='ignore', invalid='ignore'):
        x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
    hits = straddles & (x < x_cross)
    return bool(np.count_nonzero(hits) % 2)


def points_in_polygon(xy: np.ndarray, polygon: np.ndarray) -> np.ndarray:
    """Vectorized `point_in_polygon` for an (M, 2) array; returns a bool mask."""
    pts = np.asarray(xy, dtype=float).reshape(-1, 2)
    xi, yi, xj, yj = _edge_arrays(polygon)
    if xi.size < 3 or pts.shape[0] == 0:
        return np.zeros(pts.shape[0], dtype=bool)
    px = pts[:, 0:1]
    py = pts[:, 1:2]
    straddles = (yi[None, :] > py) != (yj[None, :] > py)
    with np.errstate(divide='ignore', invalid='ignore'):
        x_cross = (xj - xi)[None, :] * (py - yi[None, :]) / (yj - yi)[None, :] + xi[None, :]
    hits = straddles & (px < x_cross)
    return (np.count_nonzero(hits, axis=1) % 2).astype(bool)


def max_edge_dx(polygon: np.ndarray, closed: bool = True) -> float:
    """Largest |Δx| between consecutive vertices (including the closing edge)."""
    poly = np.asarray(polygon, dtype=float)
    if poly.shape[0] < 2:
        return 0.0
    dx = np.abs(np.diff(poly[:, 0]))
    if closed:
        dx = np.append(dx, abs(poly[0, 0] - poly[-1, 0]))
    return float(dx.max())


def polygon_to_shapely(polygon: Optional[np.ndarray]):
    """shapely Polygon for an (N, 2) ring, or None when there is no ring."""
    if polygon is None:
        return None
    from shapely.geometry import Polygon

    return Polygon(np.asarray(polygon, dtype=float))
