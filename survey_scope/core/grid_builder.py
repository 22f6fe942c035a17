# core/grid_builder.py

import logging
import math
from typing import List, Optional, Sequence

from shapely.errors import ShapelyError

from survey_scope.core.geometry import (
    Leg,
    Point,
    bounding_box,
    destination_point,
    haversine_distance,
    is_valid_ring,
    midpoint,
    point_in_polygon,
    split_line_by_polygon,
    translate_along_bearing,
)

MIN_LINE_LENGTH_M = 500.0
COVER_MARGIN_STEPS = 4  # extra spacings added to the covered width

logger = logging.getLogger("SurveyScope.GridBuilder")


def build_grid(aoi: Optional[Sequence[Point]], heading_deg: float, spacing_m: float) -> List[Leg]:
    """
    Generate lawnmower legs inside the AOI.

    A baseline through the AOI center along ``heading_deg`` is shifted in
    steps of ``spacing_m`` along the orthogonal bearing. Every shifted line is
    split by the polygon boundary and only pieces whose midpoint lies inside
    the AOI are kept. Every second kept leg is reversed (zig-zag).

    Args:
        aoi: closed ring of (lat, lon) points
        heading_deg: flight line direction in degrees
        spacing_m: distance between adjacent lines

    Returns: list of legs, each a list of (lat, lon) points
    """
    if not is_valid_ring(aoi):
        return []
    if not math.isfinite(spacing_m) or spacing_m <= 0:
        logger.debug(f"Skipping grid, invalid line spacing: {spacing_m}")
        return []

    box = bounding_box(aoi)
    center_lat, center_lon = box.center

    diag_m = haversine_distance((box.min_lat, box.min_lon), (box.max_lat, box.max_lon))
    line_length_m = max(MIN_LINE_LENGTH_M, diag_m * 2)

    width_m = haversine_distance((center_lat, box.min_lon), (center_lat, box.max_lon))
    height_m = haversine_distance((box.min_lat, center_lon), (box.max_lat, center_lon))
    cover_m = max(width_m, height_m) + spacing_m * COVER_MARGIN_STEPS

    half_steps = math.ceil(cover_m / (2 * spacing_m))
    ortho = (heading_deg + 90) % 360

    center = (center_lat, center_lon)
    fwd = destination_point(center, line_length_m / 2, heading_deg)
    back = destination_point(center, line_length_m / 2, (heading_deg + 180) % 360)
    baseline = [back, fwd]

    legs: List[Leg] = []
    for i in range(-half_steps, half_steps + 1):
        shifted = translate_along_bearing(baseline, i * spacing_m, ortho)

        for piece in _inside_pieces(shifted, aoi):
            # Lawnmower pattern: alternate direction
            legs.append(piece if len(legs) % 2 == 0 else piece[::-1])

    logger.debug(f"Grid heading {heading_deg:.1f}: {len(legs)} legs from {2 * half_steps + 1} lines")
    return legs


def build_survey_legs(aoi: Optional[Sequence[Point]], heading_deg: float, spacing_m: float,
                      crosshatch: bool = False) -> List[Leg]:
    """Primary grid, followed by the orthogonal grid when crosshatching."""
    legs = build_grid(aoi, heading_deg, spacing_m)
    if crosshatch:
        legs = legs + build_grid(aoi, (heading_deg + 90) % 360, spacing_m)
    return legs


def _clip(line: Leg, aoi: Sequence[Point]) -> List[Leg]:
    try:
        pieces = split_line_by_polygon(line, aoi)
    except (ShapelyError, ValueError) as e:
        logger.warning(f"Line clipping failed, keeping unclipped line: {e}")
        return [line]
    return pieces or [line]


def _inside_pieces(line: Leg, aoi: Sequence[Point]) -> List[Leg]:
    """Pieces of ``line`` inside the AOI, or the whole line if containment fails."""
    try:
        return [piece for piece in _clip(line, aoi)
                if len(piece) >= 2 and point_in_polygon(midpoint(piece[0], piece[-1]), aoi)]
    except (ShapelyError, ValueError) as e:
        logger.warning(f"Point-in-polygon failed, keeping unclipped line: {e}")
        return [line]
