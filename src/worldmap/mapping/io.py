"""
io.py

Feature loading from GeoJSON (or any vector format geopandas can read).

- `regions_from_geodataframe(gdf)` / `load_regions(path)` : Polygon and
  MultiPolygon features to `RegionFeature`s, interior rings kept
- `cities_from_geodataframe(gdf)` / `load_cities(path)` : Point features to
  `CityFeature`s
- `load_context(regions_path, cities_path=None)` : both, as a `MapContext`

Coordinates are converted to radians with wrapped longitudes. Frames with a
projected CRS are reprojected to EPSG:4326 first. Features that cannot be
used (wrong geometry type, missing name) are skipped with a warning.
"""
import logging
import math
from typing import List, Optional, Sequence

import geopandas as gpd

from worldmap.mapping.config import GEOJSON_PROPERTIES
from worldmap.mapping.coords import GeoPoint, wrap_longitude
from worldmap.mapping.features import CityFeature, MapContext, RegionFeature
from worldmap.mapping.utils import first_present, safe_log_exception

logger = logging.getLogger(__name__)


def _to_geographic(gdf: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    if gdf.crs is not None and not gdf.crs.is_geographic:
        logger.info('reprojecting %d features from %s to EPSG:4326', len(gdf), gdf.crs)
        return gdf.to_crs(epsg=4326)
    return gdf


def _ring_points(coords) -> List[GeoPoint]:
    pts = [GeoPoint(wrap_longitude(math.radians(c[0])), math.radians(c[1])) for c in coords]
    # GeoJSON rings repeat the first vertex; rings here are implicitly closed
    if len(pts) > 1 and pts[0] == pts[-1]:
        pts.pop()
    return pts


def _polygon_rings(geom) -> List[List[GeoPoint]]:
    if geom.geom_type == 'Polygon':
        polygons = [geom]
    else:
        polygons = list(geom.geoms)
    rings = []
    for poly in polygons:
        if poly.is_empty:
            continue
        rings.append(_ring_points(poly.exterior.coords))
        rings.extend(_ring_points(hole.coords) for hole in poly.interiors)
    return rings


def _as_int(value, default: int = 0) -> int:
    if value is None:
        return default
    try:
        f = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(f):
        return default
    return int(f)


def regions_from_geodataframe(gdf: gpd.GeoDataFrame,
                              name_keys: Optional[Sequence[str]] = None,
                              code_keys: Optional[Sequence[str]] = None) -> List[RegionFeature]:
    """Convert polygonal features of `gdf` into `RegionFeature`s."""
    name_keys = name_keys or GEOJSON_PROPERTIES['region_name']
    code_keys = code_keys or GEOJSON_PROPERTIES['region_code']
    gdf = _to_geographic(gdf)
    geom_col = gdf.geometry.name
    regions = []
    for idx, row in gdf.iterrows():
        geom = row[geom_col]
        if geom is None or geom.is_empty or geom.geom_type not in ('Polygon', 'MultiPolygon'):
            logger.warning('skipping feature %s: not a polygon (%s)', idx,
                           None if geom is None else geom.geom_type)
            continue
        name = first_present(row, name_keys)
        if name is None:
            logger.warning('skipping feature %s: no name under %s', idx, list(name_keys))
            continue
        try:
            rings = _polygon_rings(geom)
            regions.append(RegionFeature(name=str(name),
                                         code=str(first_present(row, code_keys, '')),
                                         rings=tuple(rings)))
        except (ValueError, TypeError, AttributeError) as e:
            safe_log_exception('failed to convert region feature', e, index=idx, name=name)
    logger.debug('loaded %d regions from %d features', len(regions), len(gdf))
    return regions


def cities_from_geodataframe(gdf: gpd.GeoDataFrame) -> List[CityFeature]:
    """Convert Point features of `gdf` into `CityFeature`s."""
    gdf = _to_geographic(gdf)
    geom_col = gdf.geometry.name
    cities = []
    for idx, row in gdf.iterrows():
        geom = row[geom_col]
        if geom is None or geom.is_empty or geom.geom_type != 'Point':
            logger.warning('skipping feature %s: not a point (%s)', idx,
                           None if geom is None else geom.geom_type)
            continue
        name = first_present(row, GEOJSON_PROPERTIES['city_name'])
        if name is None:
            logger.warning('skipping feature %s: no city name', idx)
            continue
        try:
            cities.append(CityFeature(
                name=str(name),
                country=str(first_present(row, GEOJSON_PROPERTIES['city_country'], '')),
                lam=wrap_longitude(math.radians(geom.x)),
                phi=math.radians(geom.y),
                population=_as_int(first_present(row, GEOJSON_PROPERTIES['city_population'])),
                scalerank=_as_int(first_present(row, GEOJSON_PROPERTIES['city_scalerank'])),
            ))
        except (ValueError, TypeError, AttributeError) as e:
            safe_log_exception('failed to convert city feature', e, index=idx, name=name)
    logger.debug('loaded %d cities from %d features', len(cities), len(gdf))
    return cities


def load_regions(path) -> List[RegionFeature]:
    return regions_from_geodataframe(gpd.read_file(path))


def load_cities(path) -> List[CityFeature]:
    return cities_from_geodataframe(gpd.read_file(path))


def load_context(regions_path, cities_path=None) -> MapContext:
    """Read regions (and optionally cities) into a `MapContext`."""
    regions = load_regions(regions_path)
    cities = load_cities(cities_path) if cities_path is not None else []
    return MapContext(regions=tuple(regions), cities=tuple(cities))
