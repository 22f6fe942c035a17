# core/pipeline.py

"""Single entry point that runs every planning stage in order.

``plan()`` holds no state between calls; callers re-run it whenever the AOI,
home position or parameters change.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from survey_scope.core.geometry import Leg, Point, is_valid_ring, path_length
from survey_scope.core.grid_builder import build_survey_legs
from survey_scope.core.metrics import SurveyMetrics, compute_metrics, estimate_time_min
from survey_scope.core.mission_serializer import ExportOptions, make_plan
from survey_scope.core.parameters import SurveyParameters
from survey_scope.core.path_composer import FlightPath, compose_path, connect_legs
from survey_scope.core.segmenter import Segment, segment_by_capacity
from survey_scope.core.spacing import gsd_cm_per_px, spacing_from_overlap

MIN_TRIGGER_DISTANCE_M = 1.0

logger = logging.getLogger("SurveyScope.Pipeline")


@dataclass
class PlanResult:
    legs: List[Leg] = field(default_factory=list)
    path: FlightPath = field(default_factory=FlightPath)
    segments: List[Segment] = field(default_factory=list)
    metrics: SurveyMetrics = field(default_factory=SurveyMetrics)
    mission_plan: Optional[dict] = None
    segment_plans: List[dict] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def plan(aoi: Optional[Sequence[Point]], home: Point, parameters: SurveyParameters,
         export_options: Optional[ExportOptions] = None) -> PlanResult:
    """
    Run grid, path, segmentation, metrics and serialization for one survey.

    Invalid input never raises: a missing AOI, non-positive height or speed,
    or a camera producing non-finite spacing all lead to empty legs and
    zeroed distance metrics, with a message in ``warnings``.
    """
    p = parameters
    warnings: List[str] = []

    spacing = spacing_from_overlap(p.height_agl_m, p.camera, p.overlap, p.sidelap)
    gsd = gsd_cm_per_px(p.height_agl_m, p.camera)

    if not spacing.is_valid:
        msg = f"Camera '{p.camera.name}' gives non-finite spacing; check focal length and sensor size"
        logger.warning(msg)
        warnings.append(msg)
    if p.height_agl_m <= 0:
        warnings.append(f"Height AGL must be positive (got {p.height_agl_m})")
    if p.groundspeed_mps <= 0:
        warnings.append(f"Groundspeed must be positive for time estimates (got {p.groundspeed_mps})")
    if not is_valid_ring(aoi):
        warnings.append("No AOI: draw a polygon with at least 3 vertices")
        aoi = None

    legs: List[Leg] = []
    if aoi is not None and spacing.is_valid and p.height_agl_m > 0:
        legs = build_survey_legs(aoi, p.heading_deg, spacing.across_m, p.crosshatch)

    path = compose_path(legs, home)

    if p.auto_segment:
        segments = segment_by_capacity(legs, p.groundspeed_mps, p.turn_time_s, p.battery_cap_min)
    elif legs:
        segments = [_single_segment(legs, path, p)]
    else:
        segments = []

    metrics = compute_metrics(spacing, path, len(legs), segments, p.groundspeed_mps, p.turn_time_s,
                              aoi=aoi, gsd_cm_px=gsd)

    mission_plan = None
    segment_plans: List[dict] = []
    if legs:
        trigger_m = max(MIN_TRIGGER_DISTANCE_M, spacing.along_m)
        mission_plan = make_plan(legs, home, p.height_agl_m, trigger_m, p.groundspeed_mps, export_options)
        if p.auto_segment:
            segment_plans = [
                make_plan(s.legs, home, p.height_agl_m, trigger_m, p.groundspeed_mps, export_options)
                for s in segments
            ]

    logger.info(f"Planned {len(legs)} legs, {len(segments)} segments, "
                f"{metrics.total_m / 1000.0:.2f} km, {metrics.est_time_min:.1f} min, "
                f"{metrics.photo_count} photos")

    return PlanResult(
        legs=legs,
        path=path,
        segments=segments,
        metrics=metrics,
        mission_plan=mission_plan,
        segment_plans=segment_plans,
        warnings=warnings,
    )


def _single_segment(legs: List[Leg], path: FlightPath, p: SurveyParameters) -> Segment:
    """Whole survey as one segment when auto-segmentation is off."""
    main_m = path_length(path.points)
    transit_m = path_length(path.entry) + path_length(path.return_leg)
    time_min = estimate_time_min(main_m + transit_m, p.groundspeed_mps, len(legs), p.turn_time_s)
    return Segment(legs=list(legs), path=connect_legs(legs), distance_m=main_m, time_s=time_min * 60)
