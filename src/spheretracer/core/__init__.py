"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure, vector helpers and random sampling
    interval: Closed/open numeric ranges for hit windows and clamping
    color: Gamma encoding, 8-bit quantization and the sky background
    integrator: Path tracing loop and the row-band render kernel

All compute-intensive operations use Taichi kernels and run in parallel
over pixels.
"""

from .color import background_color, linear_to_gamma, to_gamma, to_rgb
from .interval import (
    Interval,
    empty_interval,
    interval_clamp,
    interval_contains,
    interval_size,
    interval_surrounds,
    make_interval,
    universe_interval,
)
from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_on_hemisphere,
    random_unit_vector,
    random_vec3,
    random_vec3_range,
    ray_at,
    reflect,
    refract,
    vec3,
)

# Note: integrator is NOT imported here to avoid circular imports.
# Import directly from src.spheretracer.core.integrator when needed.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "near_zero",
    "random_vec3",
    "random_vec3_range",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_on_hemisphere",
    "random_in_unit_disk",
    "Interval",
    "make_interval",
    "empty_interval",
    "universe_interval",
    "interval_size",
    "interval_contains",
    "interval_surrounds",
    "interval_clamp",
    "linear_to_gamma",
    "to_gamma",
    "to_rgb",
    "background_color",
]
