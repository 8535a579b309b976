"""Hover / click lookup against the shape cache."""
import logging
import math
from typing import Optional, Sequence

import numpy as np

from worldmap.mapping.config import CITY_PICK
from worldmap.mapping.coords import ProjPoint
from worldmap.mapping.features import CityFeature, RegionFeature
from worldmap.mapping.projections import Projection
from worldmap.mapping.shape_cache import ShapeCache
from worldmap.mapping.viewport import pixel_to_world

logger = logging.getLogger(__name__)


class Picker:
    """Resolve projection-space points to regions and cities.

    Every lookup first brings the cache up to date for `projection`, so a
    stale cache is rebuilt, never consulted.
    """

    def __init__(self, cache: ShapeCache):
        if cache is None:
            raise ValueError('Picker requires a ShapeCache')
        self.cache = cache

    def pick(self, world_point: Sequence[float], projection: Projection) -> Optional[RegionFeature]:
        """First region whose projected ring contains `world_point`, else None."""
        x, y = float(world_point[0]), float(world_point[1])
        shapes = self.cache.get_shapes(projection)
        if not (math.isfinite(x) and math.isfinite(y)):
            return None
        for shape in shapes:
            if shape.contains(x, y):
                return shape.feature
        return None

    def pick_pixel(self, col: float, row: float, transform, projection: Projection) -> Optional[RegionFeature]:
        """Pick at a device pixel, given the world-to-pixel `transform`."""
        x, y = pixel_to_world(transform, col, row)
        if not projection.is_on_map(ProjPoint(x, y)):
            return None
        return self.pick((x, y), projection)

    def pick_city(self, world_point: Sequence[float], projection: Projection,
                  radius: Optional[float] = None,
                  min_population: Optional[int] = None,
                  max_scalerank: Optional[int] = None) -> Optional[CityFeature]:
        """Nearest visible city within `radius` (world units) passing the filters.

        `min_population` <= 0 and a negative `max_scalerank` disable the
        respective filter.
        """
        if radius is None:
            radius = CITY_PICK['radius']
        if min_population is None:
            min_population = CITY_PICK['min_population']
        if max_scalerank is None:
            max_scalerank = CITY_PICK['max_scalerank']
        if not radius > 0:
            raise ValueError(f'radius must be positive, got {radius!r}')

        points = self.cache.get_city_points(projection)
        if points.tree is None:
            return None
        query = np.array([float(world_point[0]), float(world_point[1])])
        if not np.all(np.isfinite(query)):
            return None
        idx = points.tree.query_ball_point(query, r=radius)
        if not idx:
            return None
        idx = np.asarray(idx, dtype=int)
        dist = np.hypot(*(points.xy[idx] - query).T)
        for i in idx[np.argsort(dist, kind='stable')]:
            city = points.cities[i]
            if min_population > 0 and city.population < min_population:
                continue
            if max_scalerank >= 0 and city.scalerank > max_scalerank:
                continue
            return city
        return None
