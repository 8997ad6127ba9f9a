"""Metallic (specular reflective) scattering.

The incoming direction is mirrored about the normal. For fuzzy metals a random
unit vector scaled by the fuzz factor is added to the unit-length mirror
direction, so fuzz directly controls the angular spread of the reflection.

Reflections that end up pointing into the surface are absorbed.

Example:
    >>> # Inside a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_metallic(
    >>> #     albedo, fuzz, incident_dir, normal
    >>> # )
"""

import taichi as ti

from src.spheretracer.core.ray import dot, normalize, random_unit_vector, reflect, vec3


@ti.func
def scatter_metallic(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
):
    """Scatter a ray off a metallic surface.

    Args:
        albedo: The reflective color (RGB).
        fuzz: Perturbation radius in [0, 1]. 0 = perfect mirror.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incoming ray.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        did_scatter is 0 when the fuzzed reflection points into the surface.
    """
    reflected = normalize(reflect(incident_direction, normal))
    scattered_direction = reflected + fuzz * random_unit_vector()

    did_scatter = 0
    if dot(scattered_direction, normal) > 0.0:
        did_scatter = 1

    return scattered_direction, albedo, did_scatter
