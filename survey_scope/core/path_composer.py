# core/path_composer.py

from dataclasses import dataclass, field
from typing import List, Sequence

from survey_scope.core.geometry import Leg, Point, haversine_distance


@dataclass
class FlightPath:
    """Stitched survey route oriented toward home, with transit legs."""
    points: List[Point] = field(default_factory=list)
    entry: List[Point] = field(default_factory=list)      # home -> path start
    return_leg: List[Point] = field(default_factory=list)  # path end -> home

    @property
    def is_empty(self) -> bool:
        return len(self.points) < 2


def connect_legs(legs: Sequence[Leg]) -> List[Point]:
    """Join legs into one polyline.

    A leg's first point is added as a connector only when it differs from
    the running path's last point. Legs with fewer than 2 points are skipped.
    """
    out: List[Point] = []
    for leg in legs:
        if not leg or len(leg) < 2:
            continue
        if not out:
            out.extend(leg)
            continue
        if tuple(out[-1]) != tuple(leg[0]):
            out.append(leg[0])  # connector
        out.extend(leg[1:])
    return out


def orient_path(path: Sequence[Point], home: Point) -> List[Point]:
    """Reverse the path when its end is closer to home than its start."""
    if len(path) < 2:
        return []
    d_start = haversine_distance(home, path[0])
    d_end = haversine_distance(home, path[-1])
    return list(path) if d_start <= d_end else list(reversed(path))


def compose_path(legs: Sequence[Leg], home: Point) -> FlightPath:
    oriented = orient_path(connect_legs(legs), home)
    if len(oriented) < 2:
        return FlightPath()
    home = (home[0], home[1])
    return FlightPath(
        points=oriented,
        entry=[home, oriented[0]],
        return_leg=[oriented[-1], home],
    )
