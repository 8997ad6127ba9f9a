"""Camera module for view and ray generation.

Components:
    camera: Thin-lens camera with depth of field

Camera responsibilities:
    - Derive the viewport from look-at positioning, field of view and focus
    - Apply anti-aliasing jitter for sub-pixel sampling
    - Randomize ray origins over a defocus disk for depth of field

Pixel coordinates run left to right (x) and top to bottom (y).
"""

from .camera import (
    Camera,
    CameraConfig,
    defocus_disk_sample,
    get_ray,
    sample_square,
    setup_camera,
)

__all__ = [
    "Camera",
    "CameraConfig",
    "setup_camera",
    "get_ray",
    "sample_square",
    "defocus_disk_sample",
]
