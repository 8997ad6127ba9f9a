"""Color encoding for final output.

Colors are plain vec3 values in linear space and are never clamped while
light is being accumulated. Only when a pixel is finished is the color gamma
encoded and quantized to 8 bits.

Quantization clamps each channel to [0, 0.999] and scales by 256, so the
brightest representable input maps to 255 and the value 256 never appears.
"""

import taichi as ti

from src.spheretracer.core.interval import Interval, interval_clamp
from src.spheretracer.core.ray import Ray, normalize, vec3

# Upper clamp applied before scaling by 256
MAX_INTENSITY = 0.999

# Background gradient endpoints
HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
ZENITH_COLOR = vec3(0.5, 0.7, 1.0)


@ti.func
def linear_to_gamma(linear: ti.f32) -> ti.f32:
    """Square-root (gamma 2) encoding of one channel. Non-positive input maps to 0."""
    result = 0.0
    if linear > 0.0:
        result = ti.sqrt(linear)
    return result


@ti.func
def to_gamma(color: vec3) -> vec3:
    """Gamma encode each channel of a linear color."""
    return vec3(linear_to_gamma(color.x), linear_to_gamma(color.y), linear_to_gamma(color.z))


@ti.func
def to_rgb(color: vec3):
    """Quantize a gamma-encoded color to 8-bit RGB.

    Args:
        color: Gamma-encoded color. Channels outside [0, 0.999] are clamped.

    Returns:
        A 3-component u8 vector.
    """
    intensity = Interval(lo=0.0, hi=MAX_INTENSITY)
    r = interval_clamp(intensity, color.x)
    g = interval_clamp(intensity, color.y)
    b = interval_clamp(intensity, color.z)
    return ti.Vector(
        [
            ti.cast(r * 256.0, ti.u8),
            ti.cast(g * 256.0, ti.u8),
            ti.cast(b * 256.0, ti.u8),
        ]
    )


@ti.func
def background_color(ray: Ray) -> vec3:
    """Sky gradient seen by rays that escape the scene.

    Blends from white at the horizon to light blue overhead using
    0.5 * (unit_direction.y + 1).
    """
    unit_direction = normalize(ray.direction)
    a = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - a) * HORIZON_COLOR + a * ZENITH_COLOR
