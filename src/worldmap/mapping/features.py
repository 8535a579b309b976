"""Feature containers handed to the shape cache.

A `MapContext` is the explicit bundle of features a `ShapeCache` projects:
region polygons (countries, islands) and optional point features (cities).
All containers are frozen; sequences are stored as tuples.
"""
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from worldmap.mapping.coords import GeoPoint

Ring = Tuple[GeoPoint, ...]


def _as_ring(points: Iterable[Sequence[float]]) -> Ring:
    return tuple(p if isinstance(p, GeoPoint) else GeoPoint(float(p[0]), float(p[1])) for p in points)


@dataclass(frozen=True)
class RegionFeature:
    """Named polygonal region.

    `rings` holds every ring of the region in radians, exterior rings and
    holes alike; each ring is projected and hit-tested on its own.
    """
    name: str
    code: str = ''
    rings: Tuple[Ring, ...] = ()

    def __post_init__(self):
        if not self.name:
            raise ValueError('RegionFeature requires a non-empty name')
        object.__setattr__(self, 'rings', tuple(_as_ring(r) for r in self.rings))

    @classmethod
    def from_degrees(cls, name: str, rings_deg: Iterable[Iterable[Sequence[float]]],
                     code: str = '') -> "RegionFeature":
        """Build from rings of (lon_deg, lat_deg) pairs."""
        rings = [[GeoPoint.from_degrees(lon, lat) for lon, lat in ring] for ring in rings_deg]
        return cls(name=name, code=code, rings=tuple(rings))

    @property
    def point_count(self) -> int:
        return sum(len(r) for r in self.rings)


@dataclass(frozen=True)
class CityFeature:
    """Populated place. `scalerank` follows Natural Earth: lower is more prominent."""
    name: str
    country: str
    lam: float
    phi: float
    population: int = 0
    scalerank: int = 0

    @property
    def location(self) -> GeoPoint:
        return GeoPoint(self.lam, self.phi)


@dataclass(frozen=True)
class MapContext:
    """Features rendered and picked together."""
    regions: Tuple[RegionFeature, ...] = ()
    cities: Tuple[CityFeature, ...] = ()

    def __post_init__(self):
        if self.regions is None:
            raise ValueError('MapContext requires a regions sequence (may be empty)')
        object.__setattr__(self, 'regions', tuple(self.regions))
        object.__setattr__(self, 'cities', tuple(self.cities or ()))

    def find_region(self, name: str) -> Optional[RegionFeature]:
        for region in self.regions:
            if region.name == name:
                return region
        return None
