"""Sphere primitive and ray-sphere intersection.

Substituting the ray P(t) = Q + t*d into the sphere equation
(C - P) . (C - P) = r^2 gives the quadratic

    a*t^2 - 2*h*t + c = 0

with a = d.d, h = d.(C - Q) and c = (C - Q).(C - Q) - r^2. The discriminant
h^2 - a*c decides whether the ray meets the sphere, and the roots are
(h -/+ sqrt(discriminant)) / a.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretracer.geometry.sphere import Sphere, HitRecord, hit_sphere
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti

from src.spheretracer.core.interval import Interval, interval_surrounds
from src.spheretracer.core.ray import Ray, dot, length_squared, ray_at, vec3
from src.spheretracer.materials.material import Material, default_material


@ti.dataclass
class Sphere:
    """A sphere with its own material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        material: The material of the sphere's surface.
    """

    center: vec3
    radius: ti.f32
    material: Material


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: 1 if the ray intersected a surface, 0 if it missed.
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: Unit surface normal, always facing against the incoming ray.
            Only valid if hit == 1.
        front_face: 1 if the geometric (outward) normal already faced against
            the ray, i.e. the ray came from outside. Only valid if hit == 1.
        material: Material of the surface that was hit. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material: Material


@ti.func
def make_hit_record(
    ray: Ray,
    t: ti.f32,
    point: vec3,
    outward_normal: vec3,
    material: Material,
) -> HitRecord:
    """Build a hit record, orienting the normal against the ray.

    Args:
        ray: The ray that produced the hit.
        t: Ray parameter of the hit.
        point: The hit point.
        outward_normal: The geometric normal. Must be unit length.
        material: Material at the hit point.

    Returns:
        A HitRecord with hit == 1.
    """
    front_face = 0
    normal = -outward_normal
    if dot(ray.direction, outward_normal) < 0.0:
        front_face = 1
        normal = outward_normal

    return HitRecord(
        hit=1,
        t=t,
        point=point,
        normal=normal,
        front_face=front_face,
        material=material,
    )


@ti.func
def miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material=default_material(),
    )


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, ray_t: Interval) -> HitRecord:
    """Test for ray-sphere intersection within an open parameter window.

    The nearer root is preferred. A root only counts if it lies strictly
    inside ray_t, which also rejects hits at the ray origin when ray_t
    starts slightly above zero.

    Args:
        ray: The ray to test.
        sphere: The sphere to test against.
        ray_t: Admissible ray parameters (endpoints excluded).

    Returns:
        A HitRecord; check its hit field to determine if an intersection
        occurred.
    """
    oc = sphere.center - ray.origin
    a = length_squared(ray.direction)
    h = dot(ray.direction, oc)
    c = length_squared(oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    result = miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        root = (h - sqrt_d) / a
        valid = interval_surrounds(ray_t, root)

        if not valid:
            root = (h + sqrt_d) / a
            valid = interval_surrounds(ray_t, root)

        if valid:
            point = ray_at(ray, root)
            outward_normal = (point - sphere.center) / sphere.radius
            result = make_hit_record(ray, root, point, outward_normal, sphere.material)

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32, material: Material) -> Sphere:
    """Create a sphere from center, radius and material."""
    return Sphere(center=center, radius=radius, material=material)
