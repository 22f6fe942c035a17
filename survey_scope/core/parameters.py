# core/parameters.py

import logging
from dataclasses import dataclass, field, replace

from survey_scope.core.cameras import DEFAULT_CAMERA, Camera, get_camera

MAX_OVERLAP = 0.95

logger = logging.getLogger("SurveyScope.Parameters")


@dataclass(frozen=True)
class SurveyParameters:
    """Flight parameters for one survey.

    Overlap and sidelap are fractions (0.75 == 75 %). Battery cap is the
    usable endurance in minutes.
    """
    height_agl_m: float = 100.0
    heading_deg: float = 0.0
    overlap: float = 0.75
    sidelap: float = 0.7
    groundspeed_mps: float = 8.0
    turn_time_s: float = 3.0
    battery_cap_min: float = 25.0
    crosshatch: bool = False
    auto_segment: bool = False
    camera: Camera = field(default=DEFAULT_CAMERA)

    @classmethod
    def from_config(cls, config: dict) -> "SurveyParameters":
        """Build parameters from the ``survey`` section of the YAML config."""
        survey = (config or {}).get("survey", {}) or {}
        defaults = cls()

        camera = defaults.camera
        camera_key = survey.get("camera")
        if camera_key:
            camera = get_camera(camera_key)
            if camera is None:
                logger.warning(f"Unknown camera '{camera_key}' in config, using {defaults.camera.name}")
                camera = defaults.camera

        return cls(
            height_agl_m=float(survey.get("height_agl_m", defaults.height_agl_m)),
            heading_deg=float(survey.get("heading_deg", defaults.heading_deg)) % 360,
            overlap=clamp_fraction(float(survey.get("overlap", defaults.overlap)), "overlap"),
            sidelap=clamp_fraction(float(survey.get("sidelap", defaults.sidelap)), "sidelap"),
            groundspeed_mps=float(survey.get("groundspeed_mps", defaults.groundspeed_mps)),
            turn_time_s=float(survey.get("turn_time_s", defaults.turn_time_s)),
            battery_cap_min=float(survey.get("battery_cap_min", defaults.battery_cap_min)),
            crosshatch=bool(survey.get("crosshatch", defaults.crosshatch)),
            auto_segment=bool(survey.get("auto_segment", defaults.auto_segment)),
            camera=camera,
        )

    def with_changes(self, **changes) -> "SurveyParameters":
        return replace(self, **changes)


def clamp_fraction(value: float, name: str = "fraction") -> float:
    """Clamp an overlap/sidelap fraction into [0, 0.95]."""
    clamped = min(max(value, 0.0), MAX_OVERLAP)
    if clamped != value:
        logger.warning(f"{name} {value} out of range, clamped to {clamped}")
    return clamped
