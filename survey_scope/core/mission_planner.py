# core/mission_planner.py

import logging
import os
from typing import List, Optional, Sequence, Tuple

from PySide6.QtCore import QObject, Signal

from survey_scope.core.cameras import get_camera
from survey_scope.core.geometry import Point, is_valid_ring
from survey_scope.core.mission_serializer import ExportOptions, plan_to_json, plan_to_waypoints
from survey_scope.core.parameters import SurveyParameters, clamp_fraction
from survey_scope.core.pipeline import PlanResult, plan

DEFAULT_HOME = (40.7608, -111.891)


class SurveyPlanner(QObject):
    # Planning signals
    plan_updated = Signal(dict)        # metrics summary
    home_changed = Signal(float, float)  # lat, lon
    aoi_changed = Signal(bool)         # has_aoi
    plan_saved = Signal(str, str)      # format, filepath

    def __init__(self, config: dict):
        super().__init__()
        self.config = config or {}
        self.logger = logging.getLogger("SurveyScope.SurveyPlanner")

        self.parameters = SurveyParameters.from_config(self.config)
        self.export_options = ExportOptions.from_config(self.config)

        home_cfg = self.config.get("home", {}) or {}
        self.home: Point = (float(home_cfg.get("lat", DEFAULT_HOME[0])),
                            float(home_cfg.get("lon", DEFAULT_HOME[1])))
        self.aoi: Optional[List[Point]] = None
        self.result: PlanResult = PlanResult()

        self.logger.info("Survey Planner initialized")

    # Inputs
    def set_aoi(self, polygon: Optional[Sequence[Tuple[float, float]]]) -> bool:
        """Set the survey polygon as (lat, lon) points. Invalid rings clear the AOI."""
        if not is_valid_ring(polygon):
            if polygon:
                self.logger.warning(f"AOI ignored, ring has {len(polygon)} points (need at least 4)")
            self.aoi = None
        else:
            self.aoi = [(float(lat), float(lon)) for lat, lon in polygon]
            self.logger.info(f"AOI set with {len(self.aoi) - 1} vertices")

        self.aoi_changed.emit(self.aoi is not None)
        self.recompute()
        return self.aoi is not None

    def clear_aoi(self):
        self.set_aoi(None)

    def set_home(self, lat: float, lon: float):
        self.home = (float(lat), float(lon))
        self.logger.info(f"Home set to {lat:.6f}, {lon:.6f}")
        self.home_changed.emit(self.home[0], self.home[1])
        self.recompute()

    def set_home_to_center(self, center: Tuple[float, float]):
        """Move home to the given map center."""
        self.set_home(center[0], center[1])

    def set_camera(self, camera_key: str) -> bool:
        camera = get_camera(camera_key)
        if camera is None:
            self.logger.warning(f"Unknown camera preset: {camera_key}")
            return False
        return self.update_parameters(camera=camera)

    def update_parameters(self, **changes) -> bool:
        """Replace one or more survey parameters and recompute."""
        try:
            if "overlap" in changes:
                changes["overlap"] = clamp_fraction(float(changes["overlap"]), "overlap")
            if "sidelap" in changes:
                changes["sidelap"] = clamp_fraction(float(changes["sidelap"]), "sidelap")
            if "heading_deg" in changes:
                changes["heading_deg"] = float(changes["heading_deg"]) % 360
            self.parameters = self.parameters.with_changes(**changes)
        except (TypeError, ValueError) as e:
            self.logger.error(f"Invalid survey parameters {changes}: {e}")
            return False

        self.recompute()
        return True

    # Planning
    def recompute(self) -> PlanResult:
        """Re-run the full planning pipeline with the current inputs."""
        self.result = plan(self.aoi, self.home, self.parameters, self.export_options)
        for warning in self.result.warnings:
            self.logger.debug(warning)
        self.plan_updated.emit(self.summary())
        return self.result

    def summary(self) -> dict:
        data = self.result.metrics.to_dict()
        data['camera'] = self.parameters.camera.name
        data['has_aoi'] = self.aoi is not None
        data['warnings'] = list(self.result.warnings)
        return data

    # Export
    def save_plan(self, filepath: str, segment_index: Optional[int] = None) -> bool:
        """Save the mission (or one battery segment) as a QGroundControl .plan file."""
        mission = self._mission_for(segment_index)
        if mission is None:
            return False
        try:
            self._write(filepath, plan_to_json(mission))
            self.plan_saved.emit("plan", filepath)
            self.logger.info(f"Plan saved to {filepath}")
            return True
        except Exception as e:
            self.logger.error(f"Failed to save plan to {filepath}: {e}")
            return False

    def save_segment_plans(self, directory: str, stem: str = "mission") -> List[str]:
        """Write one .plan per battery segment; returns the written paths."""
        written = []
        for idx in range(len(self.result.segment_plans)):
            filepath = os.path.join(directory, f"{stem}_seg{idx + 1}.plan")
            if self.save_plan(filepath, segment_index=idx):
                written.append(filepath)
        return written

    def save_waypoints(self, filepath: str) -> bool:
        """Save the mission in QGC WPL 110 (.waypoints) format."""
        mission = self._mission_for(None)
        if mission is None:
            return False
        try:
            self._write(filepath, plan_to_waypoints(mission))
            self.plan_saved.emit("waypoints", filepath)
            self.logger.info(f"Waypoints saved to {filepath}")
            return True
        except Exception as e:
            self.logger.error(f"Failed to save waypoints to {filepath}: {e}")
            return False

    # Private helper methods
    def _mission_for(self, segment_index: Optional[int]) -> Optional[dict]:
        if segment_index is None:
            if self.result.mission_plan is None:
                self.logger.warning("No survey legs to export")
            return self.result.mission_plan
        if not 0 <= segment_index < len(self.result.segment_plans):
            self.logger.warning(f"Segment {segment_index} not found for export")
            return None
        return self.result.segment_plans[segment_index]

    def _write(self, filepath: str, text: str):
        directory = os.path.dirname(filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(filepath, 'w') as f:
            f.write(text)
