# core/segmenter.py

import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from survey_scope.core.geometry import Leg, Point, path_length
from survey_scope.core.path_composer import connect_legs

BATTERY_RESERVE_S = 60.0
MIN_BUDGET_S = 60.0

logger = logging.getLogger("SurveyScope.Segmenter")


@dataclass
class Segment:
    """One battery's worth of consecutive legs."""
    legs: List[Leg] = field(default_factory=list)
    path: List[Point] = field(default_factory=list)
    distance_m: float = 0.0
    time_s: float = 0.0


def effective_budget_s(battery_cap_min: float) -> float:
    """Usable flight seconds per segment, keeping a one minute reserve."""
    return max(MIN_BUDGET_S, battery_cap_min * 60 - BATTERY_RESERVE_S)


def leg_time_and_distance(leg: Leg, groundspeed_mps: float) -> Tuple[float, float]:
    if not leg or len(leg) < 2:
        return 0.0, 0.0
    distance = path_length(leg)
    time_s = distance / groundspeed_mps if groundspeed_mps > 0 else 0.0
    return time_s, distance


def make_segment(legs: List[Leg], time_s: float) -> Segment:
    path = connect_legs(legs)
    return Segment(legs=legs, path=path, distance_m=path_length(path), time_s=time_s)


def segment_by_capacity(legs: Sequence[Leg], groundspeed_mps: float, turn_time_s: float,
                        battery_cap_min: float) -> List[Segment]:
    """
    Split legs into consecutive battery-feasible segments.

    Greedy and order preserving: a segment is closed when the next leg would
    push it past the budget. A leg that alone exceeds the budget still gets
    its own segment so every leg is flown.

    Args:
        legs: ordered survey legs
        groundspeed_mps: cruise speed, 0 disables time accounting
        turn_time_s: fixed overhead added per leg
        battery_cap_min: endurance per battery in minutes

    Returns: list of Segment in leg order
    """
    budget_s = effective_budget_s(battery_cap_min)
    segments: List[Segment] = []
    current: List[Leg] = []
    time_accum = 0.0

    for leg in legs:
        leg_time, _ = leg_time_and_distance(leg, groundspeed_mps)
        cost = leg_time + turn_time_s

        if current and time_accum + cost > budget_s:
            segments.append(make_segment(current, time_accum))
            current = []
            time_accum = 0.0

        current.append(leg)
        time_accum += cost

    if current:
        segments.append(make_segment(current, time_accum))

    logger.debug(f"{len(legs)} legs split into {len(segments)} segments (budget {budget_s:.0f}s)")
    return segments
