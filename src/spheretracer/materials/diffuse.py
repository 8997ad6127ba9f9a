"""Diffuse (Lambertian) scattering.

A diffuse surface scatters light around its normal: the new direction is the
normal plus a random unit vector, which yields a cos(theta) weighted
distribution over the hemisphere. The ray is never absorbed; the albedo is
used as attenuation.

Example:
    >>> # Inside a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_diffuse(albedo, normal)
"""

import taichi as ti

from src.spheretracer.core.ray import near_zero, random_unit_vector, vec3


@ti.func
def scatter_diffuse(albedo: vec3, normal: vec3):
    """Scatter a ray off a diffuse surface.

    If the random unit vector nearly cancels the normal, the bare normal is
    used instead so the scattered ray never has a zero direction.

    Args:
        albedo: The diffuse reflectance color (RGB).
        normal: The unit surface normal, facing the incoming ray.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        did_scatter is always 1.
    """
    scatter_direction = normal + random_unit_vector()

    if near_zero(scatter_direction):
        scatter_direction = normal

    return scatter_direction, albedo, 1
