"""
graticule.py

Projected parallels and meridians.

Each line is sampled densely in geographic space and projected point by
point. The result is a list of polylines ((N, 2) arrays): a line is broken
wherever a sample is invisible or projects to an undefined point, and
wherever consecutive samples straddle the projection's seam. Pieces with
fewer than two points are dropped.
"""
import math
from typing import Iterable, List, Optional

import numpy as np

from worldmap.mapping.config import GRATICULE
from worldmap.mapping.coords import GeoPoint, HALF_PI
from worldmap.mapping.projections import Projection
from worldmap.mapping.utils import as_ring_array

# keeps floor() from landing exactly on the poles / antimeridian
_EDGE_EPS = 1e-9


def _polylines(points: Iterable[GeoPoint], projection: Projection) -> List[np.ndarray]:
    lines = []
    current = []
    prev_lam = None
    for p in points:
        xy = projection.forward(p) if projection.is_visible(p) else None
        if xy is None or not xy.is_defined():
            if len(current) >= 2:
                lines.append(as_ring_array(current))
            current = []
            prev_lam = None
            continue
        if prev_lam is not None and projection.crosses_seam(p.lam, prev_lam):
            if len(current) >= 2:
                lines.append(as_ring_array(current))
            current = []
        current.append((xy.x, xy.y))
        prev_lam = p.lam
    if len(current) >= 2:
        lines.append(as_ring_array(current))
    return lines


def _check_samples(samples: Optional[int]) -> int:
    if samples is None:
        samples = GRATICULE['samples']
    if int(samples) < 2:
        raise ValueError(f'samples must be >= 2, got {samples!r}')
    return int(samples)


def latitude_line(projection: Projection, phi: float, samples: Optional[int] = None) -> List[np.ndarray]:
    """Parallel at latitude `phi` (radians), sampled over all longitudes."""
    samples = _check_samples(samples)
    lams = np.linspace(-math.pi, math.pi, samples + 1)
    return _polylines((GeoPoint(float(lam), phi) for lam in lams), projection)


def longitude_line(projection: Projection, lam: float, samples: Optional[int] = None) -> List[np.ndarray]:
    """Meridian at longitude `lam` (radians), sampled pole to pole."""
    samples = _check_samples(samples)
    phis = np.linspace(-HALF_PI, HALF_PI, samples + 1)
    return _polylines((GeoPoint(lam, float(phi)) for phi in phis), projection)


def graticule(projection: Projection, lat_step_deg: Optional[float] = None,
              lon_step_deg: Optional[float] = None,
              samples: Optional[int] = None) -> List[np.ndarray]:
    """All parallels strictly between the poles and meridians in (-180°, 180°].

    Parallels and meridians are aligned on the equator and the prime meridian.
    """
    if lat_step_deg is None:
        lat_step_deg = GRATICULE['lat_step_deg']
    if lon_step_deg is None:
        lon_step_deg = GRATICULE['lon_step_deg']
    if not (lat_step_deg > 0 and lon_step_deg > 0):
        raise ValueError(f'graticule steps must be positive, got {lat_step_deg!r}, {lon_step_deg!r}')

    n_lat = math.floor((90.0 - _EDGE_EPS) / lat_step_deg)
    n_lon_west = math.floor((180.0 - _EDGE_EPS) / lon_step_deg)
    n_lon_east = math.floor((180.0 + _EDGE_EPS) / lon_step_deg)

    lines = []
    for k in range(-n_lat, n_lat + 1):
        lines.extend(latitude_line(projection, math.radians(k * lat_step_deg), samples))
    for k in range(-n_lon_west, n_lon_east + 1):
        lines.extend(longitude_line(projection, math.radians(k * lon_step_deg), samples))
    return lines
