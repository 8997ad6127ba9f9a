"""Preview module for rendered output.

Components:
    export: PNG export of the 8-bit pixel buffer via Pillow

Example:
    >>> from src.spheretracer.preview import save_png
    >>> save_png(pixels, "output.png")
"""

from src.spheretracer.preview.export import pixels_to_image, save_png

__all__ = [
    "pixels_to_image",
    "save_png",
]
