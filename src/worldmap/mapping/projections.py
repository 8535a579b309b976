"""
projections.py

Spherical (R = 1) map projections used by the world map views.

Conventions:
- geographic input is a `GeoPoint` (λ, φ) in radians;
- output is a `ProjPoint` in projection-space ("world") units;
- inputs outside a projection's domain never raise: `forward` returns
  `UNDEFINED_XY` and `inverse` returns `UNDEFINED_GEO` (NaN-bearing points).
  Callers check `is_visible` / `is_on_map` (or `is_defined()`) before using
  a result.

Four projections implement the `Projection` base class:

    MercatorProjection            cylindrical, conformal, cut at ±85°
    OrthographicProjection        azimuthal perspective, one hemisphere
    MollweideProjection           pseudocylindrical equal-area
    LambertEqualAreaProjection    azimuthal equal-area, whole globe

Parameter setters (`central_longitude`, `set_center`) mutate the projection
in place. Any `ShapeCache` built against that instance must be invalidated
afterwards; the cache does not watch for parameter changes.
"""
from abc import ABC, abstractmethod
from enum import Enum
import math
from typing import Optional, Tuple, Union

import numpy as np

from worldmap.mapping.config import MOLLWEIDE_SOLVER, OUTLINE, PROJECTION_LIMITS
from worldmap.mapping.coords import (
    Bounds,
    GeoPoint,
    HALF_PI,
    ProjPoint,
    UNDEFINED_GEO,
    UNDEFINED_XY,
    clamp_latitude,
    wrap_longitude,
)

SQRT2 = math.sqrt(2.0)


class ProjectionKind(Enum):
    """Supported projection types, valued by their display names."""

    MERCATOR = "Mercator"
    ORTHOGRAPHIC = "Orthographic"
    MOLLWEIDE = "Mollweide"
    LAMBERT_EQUAL_AREA = "Lambert Azimuthal Equal-Area"

    @classmethod
    def parse(cls, value: Union["ProjectionKind", str]) -> "ProjectionKind":
        """Accept an enum member, a member name (any case) or a display name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper().replace('-', '_').replace(' ', '_')
            if key in cls.__members__:
                return cls[key]
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        raise ValueError(f'Unsupported projection type: {value!r}')


def _require_finite(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f'{name} must be finite, got {value!r}')
    return value


def _clip(value: float, lo: float, hi: float) -> float:
    # np.clip keeps NaN as NaN, builtin min/max would not
    return float(np.clip(value, lo, hi))


def _ellipse_ring(a: float, b: float, samples: int) -> np.ndarray:
    t = np.linspace(0.0, 2.0 * math.pi, int(samples) + 1)
    ring = np.column_stack((a * np.cos(t), b * np.sin(t)))
    ring[-1] = ring[0]
    return ring


def _fmt_deg(rad: float) -> str:
    return f'{math.degrees(rad):.12g}'


class Projection(ABC):
    """Capability shared by every projection.

    Subclasses provide the forward / inverse transforms, the visibility and
    plane-domain tests and the projection-space bounds. `crosses_seam`
    defaults to "never"; only projections with a central meridian and a
    longitude discontinuity override it.

    Instances compare by identity. Two projections with the same parameters
    are still different keys for a `ShapeCache`.
    """

    kind: ProjectionKind

    @property
    def name(self) -> str:
        return self.kind.value

    @abstractmethod
    def forward(self, p: GeoPoint) -> ProjPoint:
        """Project (λ, φ) to (x, y); `UNDEFINED_XY` outside the domain."""

    @abstractmethod
    def inverse(self, xy: ProjPoint) -> GeoPoint:
        """Unproject (x, y) to (λ, φ); `UNDEFINED_GEO` outside the domain."""

    @abstractmethod
    def is_visible(self, p: GeoPoint) -> bool:
        """True if the geographic point is representable in this view."""

    @abstractmethod
    def is_on_map(self, xy: ProjPoint) -> bool:
        """True if the projected point lies inside the valid plane region."""

    @abstractmethod
    def bounds(self) -> Bounds:
        """Bounding rectangle of the valid plane region."""

    @abstractmethod
    def outline(self, samples: Optional[int] = None) -> np.ndarray:
        """Closed (N, 2) ring tracing the boundary of the valid plane region."""

    @abstractmethod
    def proj_string(self) -> str:
        """Equivalent PROJ definition on a sphere of radius 1."""

    def crosses_seam(self, lam1: float, lam2: float) -> bool:
        return False

    def to_crs(self):
        """Return the equivalent `pyproj.CRS`."""
        from pyproj import CRS

        return CRS.from_proj4(self.proj_string())

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.proj_string()!r})'


class _CentralMeridianMixin:
    """Central meridian λ₀ plus the seam test relative to it."""

    _lam0: float = 0.0

    @property
    def central_longitude(self) -> float:
        return self._lam0

    @central_longitude.setter
    def central_longitude(self, value: float) -> None:
        self._lam0 = wrap_longitude(_require_finite('central_longitude', value))

    def crosses_seam(self, lam1: float, lam2: float) -> bool:
        """True if going from lam1 to lam2 jumps across the meridian opposite λ₀."""
        d1 = wrap_longitude(lam1 - self._lam0)
        d2 = wrap_longitude(lam2 - self._lam0)
        return abs(d1 - d2) > math.pi


class _CenterMixin:
    """Projection centre (λ₀, φ₀) for the azimuthal projections."""

    _lam0: float = 0.0
    _phi0: float = 0.0

    @property
    def center(self) -> GeoPoint:
        return GeoPoint(self._lam0, self._phi0)

    def set_center(self, lam0: float, phi0: float) -> None:
        lam0 = _require_finite('center longitude', lam0)
        phi0 = _require_finite('center latitude', phi0)
        self._lam0 = wrap_longitude(lam0)
        self._phi0 = clamp_latitude(phi0)
        self._sin_phi0 = math.sin(self._phi0)
        self._cos_phi0 = math.cos(self._phi0)

    def _azimuthal_inverse(self, x: float, y: float, rho: float, c: float) -> GeoPoint:
        sin_c = math.sin(c)
        cos_c = math.cos(c)
        arg = cos_c * self._sin_phi0 + (y * sin_c * self._cos_phi0) / rho
        phi = math.asin(_clip(arg, -1.0, 1.0))
        lam = self._lam0 + math.atan2(
            x * sin_c, rho * self._cos_phi0 * cos_c - y * self._sin_phi0 * sin_c
        )
        return GeoPoint(wrap_longitude(lam), phi)


# ───────────────────────────────────────────────────────────────────────────────
# Mercator
# ───────────────────────────────────────────────────────────────────────────────
def mercator_y(phi: float) -> float:
    """Forward Mercator ordinate y = ln(tan(π/4 + φ/2))."""
    return math.log(math.tan(0.25 * math.pi + 0.5 * phi))


class MercatorProjection(_CentralMeridianMixin, Projection):
    """Spherical Mercator with a practical latitude cutoff.

    x = wrap(λ - λ₀)
    y = ln(tan(π/4 + φ/2)),  φ clamped to ±85°
    """

    kind = ProjectionKind.MERCATOR

    MAX_LAT = PROJECTION_LIMITS['mercator_max_lat']
    MIN_Y = mercator_y(-MAX_LAT)
    MAX_Y = mercator_y(MAX_LAT)

    def __init__(self, central_longitude: float = 0.0):
        self.central_longitude = central_longitude

    def forward(self, p: GeoPoint) -> ProjPoint:
        phi = _clip(p.phi, -self.MAX_LAT, self.MAX_LAT)
        return ProjPoint(wrap_longitude(p.lam - self._lam0), mercator_y(phi))

    def inverse(self, xy: ProjPoint) -> GeoPoint:
        lam = wrap_longitude(xy.x + self._lam0)
        phi = 2.0 * math.atan(math.exp(xy.y)) - HALF_PI
        return GeoPoint(lam, phi)

    def is_visible(self, p: GeoPoint) -> bool:
        return -self.MAX_LAT <= p.phi <= self.MAX_LAT

    def is_on_map(self, xy: ProjPoint) -> bool:
        return -math.pi <= xy.x <= math.pi and self.MIN_Y <= xy.y <= self.MAX_Y

    def bounds(self) -> Bounds:
        return Bounds(-math.pi, self.MIN_Y, math.pi, self.MAX_Y)

    def outline(self, samples: Optional[int] = None) -> np.ndarray:
        b = self.bounds()
        return np.array([
            [b.xmin, b.ymin],
            [b.xmax, b.ymin],
            [b.xmax, b.ymax],
            [b.xmin, b.ymax],
            [b.xmin, b.ymin],
        ], dtype=float)

    def proj_string(self) -> str:
        return f'+proj=merc +lon_0={_fmt_deg(self._lam0)} +R=1 +units=m +no_defs'


# ───────────────────────────────────────────────────────────────────────────────
# Orthographic
# ───────────────────────────────────────────────────────────────────────────────
class OrthographicProjection(_CenterMixin, Projection):
    """Orthographic view of the hemisphere facing (λ₀, φ₀).

    The image is the unit disk. Points on the far hemisphere are not visible
    and project to `UNDEFINED_XY`.
    """

    kind = ProjectionKind.ORTHOGRAPHIC

    RADIUS = PROJECTION_LIMITS['orthographic_radius']

    def __init__(self, center_lam: float = 0.0, center_phi: float = 0.0):
        self.set_center(center_lam, center_phi)

    def view_dot(self, p: GeoPoint) -> float:
        """Dot product of the surface normal at `p` with the view direction."""
        d_lam = p.lam - self._lam0
        return (self._sin_phi0 * math.sin(p.phi)
                + self._cos_phi0 * math.cos(p.phi) * math.cos(d_lam))

    def forward(self, p: GeoPoint) -> ProjPoint:
        phi = clamp_latitude(p.phi)
        d_lam = p.lam - self._lam0
        cos_phi = math.cos(phi)
        sin_phi = math.sin(phi)
        cos_d_lam = math.cos(d_lam)
        z = self._sin_phi0 * sin_phi + self._cos_phi0 * cos_phi * cos_d_lam
        if not z >= 0.0:
            return UNDEFINED_XY
        x = self.RADIUS * cos_phi * math.sin(d_lam)
        y = self.RADIUS * (self._cos_phi0 * sin_phi - self._sin_phi0 * cos_phi * cos_d_lam)
        return ProjPoint(x, y)

    def inverse(self, xy: ProjPoint) -> GeoPoint:
        rho2 = xy.x * xy.x + xy.y * xy.y
        if not rho2 <= self.RADIUS * self.RADIUS + PROJECTION_LIMITS['on_map_tol']:
            return UNDEFINED_GEO
        rho = math.sqrt(rho2)
        if rho == 0.0:
            return self.center
        c = math.asin(min(rho / self.RADIUS, 1.0))
        return self._azimuthal_inverse(xy.x, xy.y, rho, c)

    def is_visible(self, p: GeoPoint) -> bool:
        return self.view_dot(p) >= 0.0

    def is_on_map(self, xy: ProjPoint) -> bool:
        return xy.x * xy.x + xy.y * xy.y <= self.RADIUS * self.RADIUS + PROJECTION_LIMITS['on_map_tol']

    def bounds(self) -> Bounds:
        r = self.RADIUS
        return Bounds(-r, -r, r, r)

    def outline(self, samples: Optional[int] = None) -> np.ndarray:
        return _ellipse_ring(self.RADIUS, self.RADIUS, samples or OUTLINE['samples'])

    def proj_string(self) -> str:
        return (f'+proj=ortho +lat_0={_fmt_deg(self._phi0)} +lon_0={_fmt_deg(self._lam0)} '
                f'+R=1 +units=m +no_defs')


# ───────────────────────────────────────────────────────────────────────────────
# Mollweide
# ───────────────────────────────────────────────────────────────────────────────
def solve_mollweide_theta(phi: float, max_iter: Optional[int] = None,
                          tol: Optional[float] = None) -> Tuple[float, int, float]:
    """Solve 2θ + sin(2θ) = π sin(φ) for the auxiliary angle θ.

    Newton–Raphson from θ₀ = φ with derivative 2 + 2cos(2θ). The loop is
    bounded by `max_iter` and stops early once |update| < `tol` or the
    derivative has underflowed (θ at ±π/2, where the root is exact).

    Returns:
    - theta: the auxiliary angle (radians)
    - iterations: number of Newton updates applied
    - last_update: size of the final update (0.0 if none was applied)
    """
    if max_iter is None:
        max_iter = MOLLWEIDE_SOLVER['max_iter']
    if tol is None:
        tol = MOLLWEIDE_SOLVER['tol']
    min_derivative = MOLLWEIDE_SOLVER['min_derivative']

    phi = clamp_latitude(phi)
    target = math.pi * math.sin(phi)
    theta = phi
    update = 0.0
    iterations = 0
    for _ in range(int(max_iter)):
        two_theta = 2.0 * theta
        fp = 2.0 + 2.0 * math.cos(two_theta)
        if abs(fp) < min_derivative:
            break
        update = (two_theta + math.sin(two_theta) - target) / fp
        theta -= update
        iterations += 1
        if abs(update) < tol:
            break
    return theta, iterations, update


class MollweideProjection(_CentralMeridianMixin, Projection):
    """Mollweide equal-area projection (Snyder, spherical form).

    x = (2√2 / π) · wrap(λ - λ₀) · cos θ
    y = √2 · sin θ,   with 2θ + sin 2θ = π sin φ

    The image is the ellipse with semi-axes 2√2 (x) and √2 (y).
    """

    kind = ProjectionKind.MOLLWEIDE

    A = 2.0 * SQRT2
    B = SQRT2

    def __init__(self, central_longitude: float = 0.0):
        self.central_longitude = central_longitude

    def forward(self, p: GeoPoint) -> ProjPoint:
        theta, _, _ = solve_mollweide_theta(p.phi)
        d_lam = wrap_longitude(p.lam - self._lam0)
        x = self.A * d_lam * math.cos(theta) / math.pi
        y = self.B * math.sin(theta)
        return ProjPoint(x, y)

    def inverse(self, xy: ProjPoint) -> GeoPoint:
        if not self.is_on_map(xy):
            return UNDEFINED_GEO
        theta = math.asin(_clip(xy.y / SQRT2, -1.0, 1.0))
        arg = (2.0 * theta + math.sin(2.0 * theta)) / math.pi
        phi = math.asin(_clip(arg, -1.0, 1.0))
        cos_theta = math.cos(theta)
        lam = self._lam0
        if abs(cos_theta) > PROJECTION_LIMITS['mollweide_cos_eps']:
            lam += math.pi * xy.x / (2.0 * SQRT2 * cos_theta)
        return GeoPoint(wrap_longitude(lam), phi)

    def is_visible(self, p: GeoPoint) -> bool:
        return math.isfinite(p.lam) and -HALF_PI <= p.phi <= HALF_PI

    def is_on_map(self, xy: ProjPoint) -> bool:
        value = (xy.x * xy.x) / (self.A * self.A) + (xy.y * xy.y) / (self.B * self.B)
        return value <= 1.0 + PROJECTION_LIMITS['on_map_tol']

    def bounds(self) -> Bounds:
        return Bounds(-self.A, -self.B, self.A, self.B)

    def outline(self, samples: Optional[int] = None) -> np.ndarray:
        return _ellipse_ring(self.A, self.B, samples or OUTLINE['samples'])

    def proj_string(self) -> str:
        return f'+proj=moll +lon_0={_fmt_deg(self._lam0)} +R=1 +units=m +no_defs'


# ───────────────────────────────────────────────────────────────────────────────
# Lambert azimuthal equal-area
# ───────────────────────────────────────────────────────────────────────────────
class LambertEqualAreaProjection(_CenterMixin, Projection):
    """Lambert azimuthal equal-area projection centred on (λ₀, φ₀).

    The whole sphere maps into the disk of radius 2; the antipode of the
    centre is the disk boundary and is pinned to the point (2, 0).
    """

    kind = ProjectionKind.LAMBERT_EQUAL_AREA

    RHO_MAX = PROJECTION_LIMITS['lambert_radius']
    MAX_LAT = PROJECTION_LIMITS['near_pole_lat']

    def __init__(self, center_lam: float = 0.0, center_phi: float = 0.0):
        self.set_center(center_lam, center_phi)

    def forward(self, p: GeoPoint) -> ProjPoint:
        phi = _clip(p.phi, -self.MAX_LAT, self.MAX_LAT)
        d_lam = p.lam - self._lam0
        sin_phi = math.sin(phi)
        cos_phi = math.cos(phi)
        cos_d_lam = math.cos(d_lam)
        # 1 + cos c, with c the angular distance from the centre
        denom = 1.0 + self._sin_phi0 * sin_phi + self._cos_phi0 * cos_phi * cos_d_lam
        if denom <= PROJECTION_LIMITS['lambert_antipode_eps']:
            return ProjPoint(self.RHO_MAX, 0.0)
        k = math.sqrt(2.0 / denom)
        x = k * cos_phi * math.sin(d_lam)
        y = k * (self._cos_phi0 * sin_phi - self._sin_phi0 * cos_phi * cos_d_lam)
        return ProjPoint(x, y)

    def inverse(self, xy: ProjPoint) -> GeoPoint:
        rho = math.hypot(xy.x, xy.y)
        if not rho <= self.RHO_MAX + PROJECTION_LIMITS['on_map_tol']:
            return UNDEFINED_GEO
        if rho < PROJECTION_LIMITS['lambert_center_eps']:
            return self.center
        c = 2.0 * math.asin(min(rho / self.RHO_MAX, 1.0))
        return self._azimuthal_inverse(xy.x, xy.y, rho, c)

    def is_visible(self, p: GeoPoint) -> bool:
        return math.isfinite(p.lam) and -self.MAX_LAT <= p.phi <= self.MAX_LAT

    def is_on_map(self, xy: ProjPoint) -> bool:
        return xy.x * xy.x + xy.y * xy.y <= self.RHO_MAX * self.RHO_MAX + PROJECTION_LIMITS['on_map_tol']

    def bounds(self) -> Bounds:
        r = self.RHO_MAX
        return Bounds(-r, -r, r, r)

    def outline(self, samples: Optional[int] = None) -> np.ndarray:
        return _ellipse_ring(self.RHO_MAX, self.RHO_MAX, samples or OUTLINE['samples'])

    def proj_string(self) -> str:
        return (f'+proj=laea +lat_0={_fmt_deg(self._phi0)} +lon_0={_fmt_deg(self._lam0)} '
                f'+R=1 +units=m +no_defs')


# ───────────────────────────────────────────────────────────────────────────────
# Factory
# ───────────────────────────────────────────────────────────────────────────────
def create_projection(kind: Union[ProjectionKind, str],
                      center: Optional[GeoPoint] = None) -> Projection:
    """Create a projection by type.

    `center` defaults to (0, 0). Mercator and Mollweide only use its
    longitude, as the central meridian.

    Raises ValueError for an unknown type or a non-finite centre.
    """
    kind = ProjectionKind.parse(kind)
    if center is None:
        center = GeoPoint(0.0, 0.0)
    lam0, phi0 = center
    if kind is ProjectionKind.MERCATOR:
        return MercatorProjection(lam0)
    if kind is ProjectionKind.ORTHOGRAPHIC:
        return OrthographicProjection(lam0, phi0)
    if kind is ProjectionKind.MOLLWEIDE:
        return MollweideProjection(lam0)
    if kind is ProjectionKind.LAMBERT_EQUAL_AREA:
        return LambertEqualAreaProjection(lam0, phi0)
    raise ValueError(f'Unsupported projection type: {kind!r}')
