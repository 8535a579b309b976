"""
shape_cache.py

Memoized projected geometry for a `MapContext`.

The cache remembers the projection *instance* it was built for and rebuilds
everything the first time it is asked for a different instance, or after
`invalidate()`. Equality of projection parameters is never consulted: a
projection mutated in place through its setters keeps its identity, so the
caller must invalidate after changing it.

Typical use during a drag:

    projection.set_center(lam, phi)   # any number of times
    cache.invalidate()                # once, when the frame is redrawn
    shapes = cache.get_shapes(projection)

Not thread safe; rebuilds run inline in the calling thread.
"""
import logging
import time
from typing import NamedTuple, Optional, Tuple

import numpy as np

from worldmap.mapping.features import CityFeature, MapContext
from worldmap.mapping.projections import Projection
from worldmap.mapping.seam import ProjectedShape, build_shapes
from worldmap.mapping.utils import safe_build_kdtree

logger = logging.getLogger(__name__)


class CityPoints(NamedTuple):
    """Visible cities with their projected coordinates (row i of `xy` is `cities[i]`)."""
    cities: Tuple[CityFeature, ...]
    xy: np.ndarray
    tree: Optional[object]


class ShapeCache:
    """Projected shapes and city points, keyed on projection identity."""

    def __init__(self, context: MapContext):
        if context is None:
            raise ValueError('ShapeCache requires a MapContext')
        self._context = context
        self._projection: Optional[Projection] = None
        self._shapes: Tuple[ProjectedShape, ...] = ()
        self._dirty = True
        self._city_projection: Optional[Projection] = None
        self._city_points: Optional[CityPoints] = None
        self.rebuild_count = 0

    @property
    def context(self) -> MapContext:
        return self._context

    def set_context(self, context: MapContext) -> None:
        """Swap the feature source; the next lookup rebuilds."""
        if context is None:
            raise ValueError('ShapeCache requires a MapContext')
        self._context = context
        self.invalidate()

    def is_current(self, projection: Projection) -> bool:
        return not self._dirty and self._projection is projection

    def invalidate(self) -> None:
        """Mark the cache stale and drop the remembered projection."""
        self._dirty = True
        self._projection = None
        self._city_projection = None
        self._city_points = None
        logger.debug('shape cache invalidated')

    def get_shapes(self, projection: Projection) -> Tuple[ProjectedShape, ...]:
        """Projected shapes for `projection`; the same tuple until stale."""
        if projection is None:
            raise TypeError('projection must not be None')
        if not self.is_current(projection):
            self._rebuild(projection)
        return self._shapes

    def _rebuild(self, projection: Projection) -> None:
        t0 = time.perf_counter()
        shapes = []
        for region in self._context.regions:
            shapes.extend(build_shapes(region, projection))
        self._shapes = tuple(shapes)
        self._projection = projection
        self._dirty = False
        self.rebuild_count += 1
        logger.debug('rebuilt %d shapes for %s in %.1f ms',
                     len(self._shapes), projection.name, (time.perf_counter() - t0) * 1000.0)

    def get_city_points(self, projection: Projection) -> CityPoints:
        """Visible, on-map cities projected under `projection`, with a KD-tree."""
        if projection is None:
            raise TypeError('projection must not be None')
        if self._city_points is not None and self._city_projection is projection:
            return self._city_points
        cities = []
        coords = []
        for city in self._context.cities:
            p = city.location
            if not projection.is_visible(p):
                continue
            xy = projection.forward(p)
            if not xy.is_defined() or not projection.is_on_map(xy):
                continue
            cities.append(city)
            coords.append((xy.x, xy.y))
        xy_arr = np.asarray(coords, dtype=float).reshape(-1, 2)
        xy_arr.flags.writeable = False
        self._city_points = CityPoints(tuple(cities), xy_arr,
                                       safe_build_kdtree(xy_arr, name='city points'))
        self._city_projection = projection
        logger.debug('projected %d of %d cities for %s',
                     len(cities), len(self._context.cities), projection.name)
        return self._city_points
