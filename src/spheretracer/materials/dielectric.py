"""Dielectric (glass/water) scattering.

This module implements transparent materials that either refract or reflect
each incoming ray.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Total internal reflection when ratio * sin(theta) > 1
    - Schlick's approximation for the angle-dependent reflectance

Reflection versus refraction is a random choice weighted by the Schlick
reflectance, so averaging many samples converges to the Fresnel blend.
Dielectrics never tint or absorb light: attenuation is always white.

Example:
    >>> # Inside a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_dielectric(
    >>> #     refractive_index, incident_dir, normal, front_face
    >>> # )
"""

import taichi as ti

from src.spheretracer.core.ray import dot, normalize, reflect, refract, vec3


@ti.func
def schlick_reflectance(cosine: ti.f32, refractive_index: ti.f32) -> ti.f32:
    """Approximate Fresnel reflectance using Schlick's polynomial.

    Args:
        cosine: Cosine of the angle between the incoming ray and the normal.
        refractive_index: Index of refraction of the material.

    Returns:
        r0 + (1 - r0) * (1 - cosine)^5 with r0 = ((1 - n) / (1 + n))^2.
    """
    r0 = (1.0 - refractive_index) / (1.0 + refractive_index)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def must_reflect(ratio: ti.f32, sin_theta: ti.f32) -> ti.i32:
    """Whether Snell's law has no solution (total internal reflection)."""
    return ratio * sin_theta > 1.0


@ti.func
def scatter_dielectric(
    refractive_index: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Scatter a ray through a dielectric surface.

    Args:
        refractive_index: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if the ray enters the material, 0 if it leaves.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        attenuation is white and did_scatter is always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)

    ratio = refractive_index
    if front_face == 1:
        ratio = 1.0 / refractive_index

    unit_direction = normalize(incident_direction)
    cos_theta = ti.min(dot(-unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)

    direction = vec3(0.0, 0.0, 0.0)
    if must_reflect(ratio, sin_theta) or schlick_reflectance(
        cos_theta, refractive_index
    ) > ti.random(ti.f32):
        direction = reflect(unit_direction, normal)
    else:
        direction = refract(unit_direction, normal, ratio)

    return direction, attenuation, 1
