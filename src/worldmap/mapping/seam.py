"""
seam.py

Seam-aware projection of region rings.

Cylindrical and pseudocylindrical projections cut the globe along the
meridian opposite their central meridian (the "seam"). A ring that spans the
seam would otherwise project to a polygon with edges running across the
whole map. `split_ring` walks the ring once and routes each projected vertex
into one of two polygons, switching polygon every time consecutive visible
vertices lie on opposite sides of the seam.

No intersection vertices are inserted at the seam, and a ring that crosses
it more than twice is still folded into two polygons.
"""
from dataclasses import dataclass
import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from worldmap.mapping.coords import Bounds, GeoPoint
from worldmap.mapping.features import RegionFeature
from worldmap.mapping.geometry import point_in_polygon, polygon_to_shapely
from worldmap.mapping.projections import Projection
from worldmap.mapping.utils import as_ring_array

logger = logging.getLogger(__name__)

MIN_POLYGON_POINTS = 3


def _finish(points: List[Tuple[float, float]]) -> Optional[np.ndarray]:
    if len(points) < MIN_POLYGON_POINTS:
        return None
    arr = as_ring_array(points)
    arr.flags.writeable = False
    return arr


def split_ring(ring: Sequence[GeoPoint],
               projection: Projection) -> Tuple[Optional[np.ndarray], Optional[np.ndarray]]:
    """Project a ring into (primary, secondary) polygons.

    Points that are not visible, or whose forward projection is undefined,
    are skipped. The seam test compares each visible point with the previous
    visible one. Polygons with fewer than three vertices come back as None.
    """
    polys: Tuple[list, list] = ([], [])
    current = 0
    prev_lam = None
    for p in ring:
        if not projection.is_visible(p):
            continue
        xy = projection.forward(p)
        if not xy.is_defined():
            continue
        if prev_lam is not None and projection.crosses_seam(p.lam, prev_lam):
            current = 1 - current
        polys[current].append((xy.x, xy.y))
        prev_lam = p.lam
    return _finish(polys[0]), _finish(polys[1])


@dataclass(frozen=True, eq=False)
class ProjectedShape:
    """Projected geometry of one ring of a region.

    At least one of `primary` / `secondary` is present. Arrays are read-only
    (N, 2) float arrays in projection space.
    """
    feature: RegionFeature
    ring_index: int
    primary: Optional[np.ndarray]
    secondary: Optional[np.ndarray]
    primary_bounds: Optional[Bounds]
    secondary_bounds: Optional[Bounds]

    @property
    def polygons(self) -> List[np.ndarray]:
        return [p for p in (self.primary, self.secondary) if p is not None]

    @property
    def bounds(self) -> Bounds:
        """Union of the primary and secondary bounding boxes."""
        boxes = [b for b in (self.primary_bounds, self.secondary_bounds) if b is not None]
        return Bounds(min(b.xmin for b in boxes), min(b.ymin for b in boxes),
                      max(b.xmax for b in boxes), max(b.ymax for b in boxes))

    @property
    def is_split(self) -> bool:
        return self.primary is not None and self.secondary is not None

    def contains(self, x: float, y: float) -> bool:
        """Bounding-box reject, then even-odd test on primary then secondary."""
        for poly, box in ((self.primary, self.primary_bounds),
                          (self.secondary, self.secondary_bounds)):
            if poly is None or not box.contains(x, y):
                continue
            if point_in_polygon(x, y, poly):
                return True
        return False

    def to_shapely(self):
        """shapely Polygon, or MultiPolygon when the ring was split at the seam."""
        parts = [polygon_to_shapely(p) for p in self.polygons]
        if len(parts) == 1:
            return parts[0]
        from shapely.geometry import MultiPolygon

        return MultiPolygon(parts)


def build_shapes(feature: RegionFeature, projection: Projection) -> List[ProjectedShape]:
    """One `ProjectedShape` per ring of `feature` that keeps a polygon."""
    shapes = []
    for index, ring in enumerate(feature.rings):
        primary, secondary = split_ring(ring, projection)
        if primary is None and secondary is None:
            continue
        shapes.append(ProjectedShape(
            feature=feature,
            ring_index=index,
            primary=primary,
            secondary=secondary,
            primary_bounds=Bounds.from_points(primary) if primary is not None else None,
            secondary_bounds=Bounds.from_points(secondary) if secondary is not None else None,
        ))
    if not shapes and feature.rings:
        logger.debug('region %s has no visible ring under %s', feature.name, projection.name)
    return shapes
