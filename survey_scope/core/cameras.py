# core/cameras.py

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class Camera:
    """Pinhole camera model used for footprint and GSD calculations."""
    name: str
    sensor_width_mm: float
    sensor_height_mm: float
    focal_length_mm: float
    image_width_px: int
    image_height_px: int
    pixel_pitch_um: Optional[float] = None


CAMERAS: Dict[str, Camera] = {
    'Mavic3T_Wide': Camera(
        name='Mavic 3T Wide',
        sensor_width_mm=6.3,
        sensor_height_mm=4.7,
        focal_length_mm=4.5,
        image_width_px=4000,
        image_height_px=3000,
    ),
    'Phantom4Pro': Camera(
        name='Phantom 4 Pro',
        sensor_width_mm=13.2,
        sensor_height_mm=8.8,
        focal_length_mm=8.8,
        image_width_px=5472,
        image_height_px=3648,
    ),
    'Mavic3T_Tele': Camera(
        name='Mavic 3T Tele',
        sensor_width_mm=4.5,
        sensor_height_mm=3.4,
        focal_length_mm=162,  # telephoto lens
        image_width_px=4000,
        image_height_px=3000,
    ),
}

DEFAULT_CAMERA_KEY = 'Mavic3T_Wide'
DEFAULT_CAMERA = CAMERAS[DEFAULT_CAMERA_KEY]


def get_camera(key: str) -> Optional[Camera]:
    """Look up a preset by key, None if unknown."""
    return CAMERAS.get(key)
