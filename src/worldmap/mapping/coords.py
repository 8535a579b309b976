"""
coords.py

Coordinate value types and the small angle helpers every projection uses.

Geographic points are (λ, φ) in radians on the unit sphere; projected points
are (x, y) in projection-space ("world") units. The two are separate types so
they cannot be mixed by accident: the only way from one to the other is a
projection's `forward` / `inverse`.

Public helpers:
- `wrap_longitude(lam)` -> (-pi, pi]
- `clamp_latitude(phi)` -> [-pi/2, pi/2]

Both accept scalars or numpy arrays and return the same shape.
"""
import math
from typing import NamedTuple, Tuple

import numpy as np

HALF_PI = 0.5 * math.pi
TWO_PI = 2.0 * math.pi


def wrap_longitude(lam):
    """Wrap longitude (radians) to (-pi, pi].

    Scalars come back as float, arrays as ndarray.
    """
    lam_arr = np.asarray(lam, dtype=float)
    wrapped = np.mod(lam_arr + math.pi, TWO_PI) - math.pi
    # np.mod lands on -pi for odd multiples of pi; the canonical value is +pi
    wrapped = np.where(wrapped <= -math.pi, wrapped + TWO_PI, wrapped)
    if wrapped.ndim == 0:
        return float(wrapped)
    return wrapped


def clamp_latitude(phi):
    """Clamp latitude (radians) to [-pi/2, pi/2]."""
    clamped = np.clip(np.asarray(phi, dtype=float), -HALF_PI, HALF_PI)
    if clamped.ndim == 0:
        return float(clamped)
    return clamped


class GeoPoint(NamedTuple):
    """Geographic point: longitude `lam` and latitude `phi`, radians."""

    lam: float
    phi: float

    @classmethod
    def from_degrees(cls, lon_deg: float, lat_deg: float) -> "GeoPoint":
        return cls(math.radians(lon_deg), math.radians(lat_deg))

    def to_degrees(self) -> Tuple[float, float]:
        """Return (lon_deg, lat_deg)."""
        return math.degrees(self.lam), math.degrees(self.phi)

    def normalize(self) -> "GeoPoint":
        """Wrap longitude and clamp latitude."""
        return GeoPoint(wrap_longitude(self.lam), clamp_latitude(self.phi))

    def is_defined(self) -> bool:
        return math.isfinite(self.lam) and math.isfinite(self.phi)

    def __repr__(self) -> str:
        return f"GeoPoint(lam={self.lam:.6f}, phi={self.phi:.6f})"


class ProjPoint(NamedTuple):
    """Point in projection space."""

    x: float
    y: float

    def is_defined(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def __repr__(self) -> str:
        return f"ProjPoint(x={self.x:.6f}, y={self.y:.6f})"


# Sentinels returned for inputs outside a projection's domain.
UNDEFINED_GEO = GeoPoint(math.nan, math.nan)
UNDEFINED_XY = ProjPoint(math.nan, math.nan)


class Bounds(NamedTuple):
    """Axis-aligned rectangle in projection space."""

    xmin: float
    ymin: float
    xmax: float
    ymax: float

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    @property
    def center(self) -> ProjPoint:
        return ProjPoint(0.5 * (self.xmin + self.xmax), 0.5 * (self.ymin + self.ymax))

    def is_empty(self) -> bool:
        return not (self.width > 0.0 and self.height > 0.0)

    def contains(self, x: float, y: float) -> bool:
        """Closed-interval containment test."""
        return self.xmin <= x <= self.xmax and self.ymin <= y <= self.ymax

    @classmethod
    def from_points(cls, xy: np.ndarray) -> "Bounds":
        """Bounding box of an (N, 2) array of projected points."""
        pts = np.asarray(xy, dtype=float)
        if pts.ndim != 2 or pts.shape[1] != 2 or pts.shape[0] == 0:
            raise ValueError(f'points must be a non-empty (N, 2) array, got shape {pts.shape}')
        mn = pts.min(axis=0)
        mx = pts.max(axis=0)
        return cls(float(mn[0]), float(mn[1]), float(mx[0]), float(mx[1]))
