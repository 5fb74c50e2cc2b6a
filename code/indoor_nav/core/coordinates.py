import logging
import math
from typing import Iterable, Tuple

from .geometry import Point


EARTH_RADIUS_M = 6371008.8


class LocalProjection:
    """
    This class handles coordinate transformations between geographic (lon, lat) and local metres.

    Equirectangular projection around an origin; accurate to well under a metre
    over building-sized extents.
    """
    def __init__(self, origin_lon: float, origin_lat: float):
        self.origin_lon = origin_lon
        self.origin_lat = origin_lat
        self._cos_lat = math.cos(math.radians(origin_lat))
        self.logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_coordinates(cls, coordinates: Iterable[Tuple[float, float]]) -> 'LocalProjection':
        """Create a projection centred on the bounding box of (lon, lat) pairs"""
        lons, lats = zip(*coordinates)
        return cls((min(lons) + max(lons)) / 2.0, (min(lats) + max(lats)) / 2.0)

    def to_local(self, lon: float, lat: float) -> Point:
        """Convert geographic coordinates to local east/north metres"""
        x = math.radians(lon - self.origin_lon) * EARTH_RADIUS_M * self._cos_lat
        y = math.radians(lat - self.origin_lat) * EARTH_RADIUS_M
        return Point(x, y)

    def to_global(self, point: Tuple[float, float]) -> Tuple[float, float]:
        """Convert local metres back to (lon, lat)"""
        lon = self.origin_lon + math.degrees(point[0] / (EARTH_RADIUS_M * self._cos_lat))
        lat = self.origin_lat + math.degrees(point[1] / EARTH_RADIUS_M)
        return lon, lat
