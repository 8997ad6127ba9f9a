"""Ray data structure and vector utilities for the path tracer.

This module provides the Ray dataclass together with the vector arithmetic and
random sampling helpers used by every other part of the renderer. Points,
directions and colors all share the same three-component vector type.

All functions are Taichi functions (@ti.func) and must be called from inside a
Taichi kernel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> @ti.kernel
    ... def probe() -> vec3:
    ...     return ray_at(Ray(origin=vec3(0, 0, 0), direction=vec3(0, 0, -2)), 1.5)
    >>> probe()  # (0, 0, -3)
"""

import taichi as ti
import taichi.math as tm

# Vec3, Point3 and Color are all the same underlying vector type
vec3 = tm.vec3

# Components smaller than this are treated as zero
NEAR_ZERO_EPSILON = 1e-6


@ti.dataclass
class Ray:
    """Half-line P(t) = origin + t * direction.

    Attributes:
        origin: Where the ray starts.
        direction: Direction of travel, not required to be unit length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Point reached after travelling t units of the (unnormalized) direction."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector."""
    return v.x * v.x + v.y * v.y + v.z * v.z


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale a vector to unit length.

    A zero-length input produces NaN components. Callers must not normalize
    zero vectors.
    """
    return v / length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return a.x * b.x + a.y * b.y + a.z * b.z


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return vec3(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


@ti.func
def reflect(v: vec3, normal: vec3) -> vec3:
    """Reflect a vector about a surface normal.

    Args:
        v: The incoming direction (pointing toward the surface).
        normal: The unit surface normal.

    Returns:
        v - 2 * dot(v, normal) * normal.
    """
    return v - 2.0 * dot(v, normal) * normal


@ti.func
def refract(uv: vec3, normal: vec3, ratio: ti.f32) -> vec3:
    """Refract a unit vector through a surface using Snell's law.

    The refracted direction is split into a component perpendicular to the
    normal and one parallel to it:

        r_perp = ratio * (uv + cos_theta * n)
        r_par = -sqrt(|1 - |r_perp|^2|) * n

    Args:
        uv: The unit incoming direction, pointing into the surface.
        normal: The unit surface normal on the incoming side.
        ratio: Refractive index of the incoming medium divided by that of the
            medium being entered.

    Returns:
        The refracted direction.
    """
    cos_theta = ti.min(dot(-uv, normal), 1.0)
    r_perp = ratio * (uv + cos_theta * normal)
    r_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_perp))) * normal
    return r_perp + r_parallel


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check whether every component of a vector is close to zero.

    Used to catch degenerate scatter directions.

    Returns:
        1 if all components are below NEAR_ZERO_EPSILON in magnitude, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_vec3() -> vec3:
    """Generate a vector with each component uniform in [0, 1)."""
    return vec3(ti.random(ti.f32), ti.random(ti.f32), ti.random(ti.f32))


@ti.func
def random_vec3_range(lo: ti.f32, hi: ti.f32) -> vec3:
    """Generate a vector with each component uniform in [lo, hi)."""
    return lo + (hi - lo) * random_vec3()


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point strictly inside the unit ball.

    Samples the enclosing cube until a point lands inside the sphere. About
    52% of samples are accepted, so the loop ends after two tries on average.
    """
    p = random_vec3_range(-1.0, 1.0)
    while length_squared(p) >= 1.0:
        p = random_vec3_range(-1.0, 1.0)
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Generate a random unit vector uniformly distributed on the sphere."""
    return normalize(random_in_unit_sphere())


@ti.func
def random_on_hemisphere(normal: vec3) -> vec3:
    """Generate a random unit vector in the hemisphere around a normal.

    Args:
        normal: The surface normal defining the hemisphere orientation.

    Returns:
        A random unit vector whose dot product with normal is non-negative.
    """
    on_sphere = random_unit_vector()
    result = on_sphere
    if dot(on_sphere, normal) <= 0.0:
        result = -on_sphere
    return result


@ti.func
def random_in_unit_disk() -> vec3:
    """Generate a random point inside the unit disk in the xy-plane.

    Used for depth-of-field lens sampling.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(ti.random(ti.f32) * 2.0 - 1.0, ti.random(ti.f32) * 2.0 - 1.0, 0.0)
    while p.x * p.x + p.y * p.y >= 1.0:
        p = vec3(ti.random(ti.f32) * 2.0 - 1.0, ti.random(ti.f32) * 2.0 - 1.0, 0.0)
    return p
