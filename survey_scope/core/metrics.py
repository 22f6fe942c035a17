# core/metrics.py

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from survey_scope.core.geometry import SQ_METERS_PER_ACRE, Point, path_length, polygon_area
from survey_scope.core.path_composer import FlightPath
from survey_scope.core.segmenter import Segment
from survey_scope.core.spacing import Spacing


@dataclass
class SurveyMetrics:
    along_track_m: float = 0.0
    across_track_m: float = 0.0
    main_path_m: float = 0.0
    transit_m: float = 0.0
    est_time_min: float = 0.0
    photo_count: int = 0
    aoi_area_m2: float = 0.0
    gsd_cm_px: float = 0.0
    leg_count: int = 0
    segment_count: int = 0
    segment_summaries: List[dict] = field(default_factory=list)

    @property
    def total_m(self) -> float:
        return self.main_path_m + self.transit_m

    @property
    def aoi_area_acres(self) -> float:
        return self.aoi_area_m2 / SQ_METERS_PER_ACRE

    @property
    def aoi_area_hectares(self) -> float:
        return self.aoi_area_m2 / 10000.0

    def to_dict(self) -> dict:
        return {
            'along_track_m': self.along_track_m,
            'across_track_m': self.across_track_m,
            'main_path_km': self.main_path_m / 1000.0,
            'transit_km': self.transit_m / 1000.0,
            'total_km': self.total_m / 1000.0,
            'est_time_min': self.est_time_min,
            'photo_count': self.photo_count,
            'aoi_area_acres': self.aoi_area_acres,
            'aoi_area_hectares': self.aoi_area_hectares,
            'gsd_cm_px': self.gsd_cm_px,
            'leg_count': self.leg_count,
            'segment_count': self.segment_count,
            'segments': list(self.segment_summaries),
        }


def transit_distance(path: FlightPath) -> float:
    """Entry plus return leg length; zero when the path is empty."""
    total = 0.0
    if len(path.entry) == 2:
        total += path_length(path.entry)
    if len(path.return_leg) == 2:
        total += path_length(path.return_leg)
    return total


def estimate_time_min(total_distance_m: float, groundspeed_mps: float, leg_count: int,
                      turn_time_s: float) -> float:
    """Flight time in minutes including a fixed overhead per turn."""
    if groundspeed_mps <= 0 or total_distance_m <= 0:
        return 0.0
    pure_secs = total_distance_m / groundspeed_mps
    turns = max(0, leg_count - 1)
    return (pure_secs + turns * turn_time_s) / 60.0


def photo_count(main_path_m: float, along_track_m: float) -> int:
    if not math.isfinite(along_track_m) or along_track_m <= 0 or main_path_m <= 0:
        return 0
    return math.ceil(main_path_m / along_track_m)


def compute_metrics(spacing: Spacing, path: FlightPath, leg_count: int, segments: Sequence[Segment],
                    groundspeed_mps: float, turn_time_s: float,
                    aoi: Optional[Sequence[Point]] = None, gsd_cm_px: float = 0.0) -> SurveyMetrics:
    """Calculate mission statistics for the composed path and its segments."""
    main_m = path_length(path.points)
    transit_m = transit_distance(path)

    return SurveyMetrics(
        along_track_m=spacing.along_m,
        across_track_m=spacing.across_m,
        main_path_m=main_m,
        transit_m=transit_m,
        est_time_min=estimate_time_min(main_m + transit_m, groundspeed_mps, leg_count, turn_time_s),
        photo_count=photo_count(main_m, spacing.along_m),
        aoi_area_m2=polygon_area(aoi) if aoi else 0.0,
        gsd_cm_px=gsd_cm_px,
        leg_count=leg_count,
        segment_count=len(segments),
        segment_summaries=[
            {'distance_km': s.distance_m / 1000.0, 'time_min': s.time_s / 60.0, 'legs': len(s.legs)}
            for s in segments
        ],
    )
