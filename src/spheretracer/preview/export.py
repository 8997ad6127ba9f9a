"""Image export utilities for rendered images.

The renderer already produces gamma-encoded 8-bit pixels, so export is a
plain handoff to Pillow with a shape and dtype check.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from src.spheretracer.camera.camera import Camera
    >>> from src.spheretracer.preview.export import save_png
    >>> from src.spheretracer.scene.demo_scenes import create_three_spheres_scene
    >>>
    >>> world, config = create_three_spheres_scene()
    >>> pixels = Camera(config).render(world)
    >>> save_png(pixels, "output.png")
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)


def _check_pixels(pixels: npt.NDArray[np.uint8]) -> None:
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected pixel array of shape (H, W, 3), got {pixels.shape}")
    if pixels.dtype != np.uint8:
        raise ValueError(f"Expected pixel array of dtype uint8, got {pixels.dtype}")


def pixels_to_image(pixels: npt.NDArray[np.uint8]) -> PILImage.Image:
    """Wrap a rendered pixel buffer in a Pillow image.

    Args:
        pixels: Array of shape (H, W, 3) with dtype uint8, row 0 at the top.

    Returns:
        An RGB Pillow image of size (W, H).

    Raises:
        ValueError: If the array has the wrong shape or dtype.
    """
    _check_pixels(pixels)
    return PILImage.fromarray(np.ascontiguousarray(pixels))


def save_png(pixels: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save a rendered pixel buffer as a PNG file.

    Args:
        pixels: Array of shape (H, W, 3) with dtype uint8.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the array has the wrong shape or dtype.
    """
    image = pixels_to_image(pixels)
    image.save(filepath, format="PNG")
    logger.info("Saved %dx%d image to %s", image.width, image.height, filepath)
