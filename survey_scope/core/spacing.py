# core/spacing.py

"""Camera footprint, GSD and overlap-derived line spacing.

Lengths are divided with numpy so a camera with a zero focal length or
sensor dimension yields ``inf``/``nan`` instead of raising. Callers must
treat non-finite spacing as an invalid configuration.
"""

from dataclasses import dataclass

import numpy as np

from survey_scope.core.cameras import Camera


@dataclass(frozen=True)
class Footprint:
    ground_width_m: float
    ground_height_m: float


@dataclass(frozen=True)
class Spacing:
    along_m: float   # trigger distance
    across_m: float  # line spacing
    footprint: Footprint

    @property
    def is_valid(self) -> bool:
        return bool(np.isfinite(self.along_m) and np.isfinite(self.across_m))


def _project(height_agl_m, numerator_m, focal_length_mm):
    with np.errstate(divide='ignore', invalid='ignore'):
        return float(np.float64(height_agl_m) * np.float64(numerator_m) /
                     (np.float64(focal_length_mm) / 1000.0))


def footprint_meters(height_agl_m: float, camera: Camera) -> Footprint:
    """
    Calculate camera ground footprint at given height.

    ground_dim = height * sensor_dim / focal_length
    """
    width = _project(height_agl_m, camera.sensor_width_mm / 1000.0, camera.focal_length_mm)
    height = _project(height_agl_m, camera.sensor_height_mm / 1000.0, camera.focal_length_mm)
    return Footprint(ground_width_m=width, ground_height_m=height)


def gsd_cm_per_px(height_agl_m: float, camera: Camera) -> float:
    """
    Calculate Ground Sampling Distance (GSD) in cm/pixel.

    Uses the pixel pitch when the camera defines one, otherwise the sensor
    width spread over the image width.
    """
    if camera.pixel_pitch_um:
        gsd_m = _project(height_agl_m, camera.pixel_pitch_um / 1e6, camera.focal_length_mm)
    else:
        ground_width = _project(height_agl_m, camera.sensor_width_mm / 1000.0, camera.focal_length_mm)
        with np.errstate(divide='ignore', invalid='ignore'):
            gsd_m = float(np.float64(ground_width) / np.float64(camera.image_width_px))
    return gsd_m * 100


def spacing_from_overlap(height_agl_m: float, camera: Camera, overlap: float, sidelap: float) -> Spacing:
    """
    Calculate photo trigger distance and survey line spacing.

    along  = footprint_height x (1 - overlap)
    across = footprint_width  x (1 - sidelap)
    """
    fp = footprint_meters(height_agl_m, camera)
    along = fp.ground_height_m * (1.0 - overlap)
    across = fp.ground_width_m * (1.0 - sidelap)
    return Spacing(along_m=along, across_m=across, footprint=fp)
