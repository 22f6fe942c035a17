# core/geometry.py

"""Geographic helpers used by the survey planner.

All points are ``(lat, lon)`` tuples in degrees. Shapely works in ``(x, y)``
so coordinates are swapped to ``(lon, lat)`` only inside this module.
"""

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np
from pyproj import Geod
from shapely.geometry import LineString, Polygon
from shapely.geometry import Point as ShapelyPoint
from shapely.ops import split

Point = Tuple[float, float]  # lat, lon
Leg = List[Point]

EARTH_RADIUS_M = 6371008.8  # mean Earth radius
SQ_METERS_PER_ACRE = 4046.8564224

_GEOD = Geod(ellps="WGS84")


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    @property
    def center(self) -> Point:
        return ((self.min_lat + self.max_lat) / 2, (self.min_lon + self.max_lon) / 2)


def is_valid_ring(polygon) -> bool:
    """A ring needs at least 4 entries (3 distinct vertices plus closure)."""
    return polygon is not None and len(polygon) >= 4


def bounding_box(points: Sequence[Point]) -> BoundingBox:
    """Get bounding box of a point set."""
    arr = np.asarray(points, dtype=float)
    min_lat, min_lon = arr.min(axis=0)
    max_lat, max_lon = arr.max(axis=0)
    return BoundingBox(float(min_lat), float(min_lon), float(max_lat), float(max_lon))


def haversine_distance(a: Point, b: Point) -> float:
    """Great-circle distance between two points in meters."""
    lat1, lon1 = map(math.radians, a)
    lat2, lon2 = map(math.radians, b)
    d_lat = lat2 - lat1
    d_lon = lon2 - lon1

    h = (math.sin(d_lat / 2) ** 2 +
         math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2)
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def destination_point(point: Point, distance_m: float, bearing_deg: float) -> Point:
    """Point reached from ``point`` after ``distance_m`` along ``bearing_deg``.

    Negative distances travel in the opposite direction.
    """
    lat1 = math.radians(point[0])
    lon1 = math.radians(point[1])
    bearing = math.radians(bearing_deg)
    delta = distance_m / EARTH_RADIUS_M

    lat2 = math.asin(math.sin(lat1) * math.cos(delta) +
                     math.cos(lat1) * math.sin(delta) * math.cos(bearing))
    lon2 = lon1 + math.atan2(math.sin(bearing) * math.sin(delta) * math.cos(lat1),
                             math.cos(delta) - math.sin(lat1) * math.sin(lat2))
    return (math.degrees(lat2), math.degrees(lon2))


def translate_along_bearing(line: Sequence[Point], distance_m: float, bearing_deg: float) -> Leg:
    """Shift every vertex of ``line`` by the same distance and bearing."""
    return [destination_point(p, distance_m, bearing_deg) for p in line]


def midpoint(a: Point, b: Point) -> Point:
    """Great-circle midpoint of two points."""
    lat1, lon1 = map(math.radians, a)
    lat2, lon2 = map(math.radians, b)
    d_lon = lon2 - lon1

    bx = math.cos(lat2) * math.cos(d_lon)
    by = math.cos(lat2) * math.sin(d_lon)
    lat = math.atan2(math.sin(lat1) + math.sin(lat2),
                     math.sqrt((math.cos(lat1) + bx) ** 2 + by ** 2))
    lon = lon1 + math.atan2(by, math.cos(lat1) + bx)
    return (math.degrees(lat), math.degrees(lon))


def _to_shapely_polygon(polygon: Sequence[Point]) -> Polygon:
    return Polygon([(lon, lat) for lat, lon in polygon])


def split_line_by_polygon(line: Sequence[Point], polygon: Sequence[Point]) -> List[Leg]:
    """Split a polyline wherever it crosses the polygon boundary.

    Pieces inside and outside the polygon are both returned; callers decide
    which to keep. Shapely errors on malformed polygons propagate.
    """
    shp_line = LineString([(lon, lat) for lat, lon in line])
    result = split(shp_line, _to_shapely_polygon(polygon))

    pieces = []
    for geom in result.geoms:
        if isinstance(geom, LineString) and len(geom.coords) >= 2:
            pieces.append([(lat, lon) for lon, lat in geom.coords])
    return pieces


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """True when the point is inside the polygon or on its boundary."""
    lat, lon = point
    return bool(_to_shapely_polygon(polygon).covers(ShapelyPoint(lon, lat)))


def path_length(points: Sequence[Point]) -> float:
    """Cumulative great-circle length of a polyline in meters."""
    if len(points) < 2:
        return 0.0
    arr = np.radians(np.asarray(points, dtype=float))
    lat1, lon1 = arr[:-1, 0], arr[:-1, 1]
    lat2, lon2 = arr[1:, 0], arr[1:, 1]

    h = (np.sin((lat2 - lat1) / 2) ** 2 +
         np.cos(lat1) * np.cos(lat2) * np.sin((lon2 - lon1) / 2) ** 2)
    h = np.clip(h, 0.0, 1.0)
    return float(np.sum(EARTH_RADIUS_M * 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))))


def polygon_area(polygon: Sequence[Point]) -> float:
    """Geodesic area of the polygon in square meters (WGS84)."""
    if not is_valid_ring(polygon):
        return 0.0
    area, _ = _GEOD.geometry_area_perimeter(_to_shapely_polygon(polygon))
    return abs(area)
