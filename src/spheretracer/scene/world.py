"""The world: an ordered collection of spheres behaving like one surface.

Scene construction happens on the host. A World holds SphereInfo records in
insertion order and can be pushed to or cleared freely until a render starts.
Before the render kernel launches, upload() copies the spheres into Taichi
fields that kernels treat as a read-only snapshot, and the world is frozen so
that no mutation can overlap the render.

Inside kernels, hit_world() scans every sphere and keeps the closest hit by
shrinking the upper end of the search window as hits are found.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretracer.materials.material import Diffuse
    >>> from src.spheretracer.scene.world import SphereInfo, World
    >>> world = World()
    >>> world.push(SphereInfo(center=(0, 0, -1), radius=0.5, material=Diffuse((0.5, 0.5, 0.5))))
    >>> world.upload()
    1
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

import numpy as np
import taichi as ti

from src.spheretracer.core.interval import Interval
from src.spheretracer.core.ray import Ray
from src.spheretracer.geometry.sphere import HitRecord, Sphere, hit_sphere, miss_record
from src.spheretracer.materials.material import Material, MaterialSpec, material_from_dict

logger = logging.getLogger(__name__)

# Maximum number of spheres a world snapshot can hold
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout, one material per sphere
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_kinds = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
sphere_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_fuzz = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_refractive_indices = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


@dataclass(frozen=True)
class SphereInfo:
    """A sphere in the scene, as built on the host.

    Attributes:
        center: The center of the sphere (x, y, z).
        radius: The radius of the sphere.
        material: The material attached to this sphere.
    """

    center: tuple[float, float, float]
    radius: float
    material: MaterialSpec

    def to_dict(self) -> dict[str, Any]:
        return {
            "center": list(self.center),
            "radius": self.radius,
            "material": self.material.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SphereInfo":
        center_list = data.get("center", [0.0, 0.0, 0.0])
        return cls(
            center=(center_list[0], center_list[1], center_list[2]),
            radius=data.get("radius", 1.0),
            material=material_from_dict(data["material"]),
        )


def clear_world_storage() -> None:
    """Reset the kernel-side sphere count to zero."""
    num_spheres[None] = 0


def get_sphere_count() -> int:
    """Get the number of spheres in the uploaded snapshot."""
    return int(num_spheres[None])


class World:
    """Ordered collection of spheres, mutable until frozen for a render.

    Attributes:
        spheres: The spheres in insertion order. Ties between equally distant
            hits go to the sphere pushed first.
    """

    def __init__(self, spheres: list[SphereInfo] | None = None) -> None:
        self.spheres: list[SphereInfo] = list(spheres) if spheres else []
        self._frozen = False

    def __len__(self) -> int:
        return len(self.spheres)

    def __iter__(self) -> Iterator[SphereInfo]:
        return iter(self.spheres)

    @property
    def is_frozen(self) -> bool:
        """Whether the world is currently locked for rendering."""
        return self._frozen

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError("World cannot be modified while a render is in progress")

    def push(self, sphere: SphereInfo) -> int:
        """Append a sphere to the world.

        Args:
            sphere: The sphere to add.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the world is frozen or already at capacity.
        """
        self._check_mutable()
        if len(self.spheres) >= MAX_SPHERES:
            raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
        self.spheres.append(sphere)
        return len(self.spheres) - 1

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material: MaterialSpec,
    ) -> int:
        """Convenience wrapper around push()."""
        return self.push(SphereInfo(center=center, radius=radius, material=material))

    def clear(self) -> None:
        """Remove every sphere.

        Raises:
            RuntimeError: If the world is frozen.
        """
        self._check_mutable()
        self.spheres.clear()

    @contextmanager
    def frozen(self) -> Iterator["World"]:
        """Lock the world against mutation for the duration of a render."""
        if self._frozen:
            raise RuntimeError("World is already frozen")
        self._frozen = True
        try:
            yield self
        finally:
            self._frozen = False

    def upload(self) -> int:
        """Copy the spheres into the kernel-side snapshot fields.

        Returns:
            The number of spheres uploaded.
        """
        count = len(self.spheres)
        centers = np.zeros((MAX_SPHERES, 3), dtype=np.float32)
        radii = np.zeros(MAX_SPHERES, dtype=np.float32)
        kinds = np.zeros(MAX_SPHERES, dtype=np.int32)
        albedos = np.zeros((MAX_SPHERES, 3), dtype=np.float32)
        fuzz = np.zeros(MAX_SPHERES, dtype=np.float32)
        refractive_indices = np.ones(MAX_SPHERES, dtype=np.float32)

        for i, sphere in enumerate(self.spheres):
            kind, albedo, sphere_fuzz_value, refractive_index = sphere.material.to_fields()
            centers[i] = sphere.center
            radii[i] = sphere.radius
            kinds[i] = kind
            albedos[i] = albedo
            fuzz[i] = sphere_fuzz_value
            refractive_indices[i] = refractive_index

        sphere_centers.from_numpy(centers)
        sphere_radii.from_numpy(radii)
        sphere_material_kinds.from_numpy(kinds)
        sphere_albedos.from_numpy(albedos)
        sphere_fuzz.from_numpy(fuzz)
        sphere_refractive_indices.from_numpy(refractive_indices)
        num_spheres[None] = count

        logger.debug("Uploaded %d spheres to the render snapshot", count)
        return count

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Export the world to a dictionary (for JSON serialization)."""
        return {"spheres": [sphere.to_dict() for sphere in self.spheres]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "World":
        """Build a world from a dictionary produced by to_dict().

        Raises:
            ValueError: If a material entry is invalid.
        """
        world = cls()
        for sphere_data in data.get("spheres", []):
            world.push(SphereInfo.from_dict(sphere_data))
        return world


# =============================================================================
# Kernel-side Queries
# =============================================================================


@ti.func
def get_sphere(i: ti.i32) -> Sphere:
    """Assemble sphere i from the snapshot fields."""
    material = Material(
        kind=sphere_material_kinds[i],
        albedo=sphere_albedos[i],
        fuzz=sphere_fuzz[i],
        refractive_index=sphere_refractive_indices[i],
    )
    return Sphere(center=sphere_centers[i], radius=sphere_radii[i], material=material)


@ti.func
def hit_world(ray: Ray, ray_t: Interval) -> HitRecord:
    """Find the closest sphere hit within ray_t.

    Every sphere is tested against a window whose upper end is the closest
    hit found so far, so the final record is the nearest hit along the ray.
    Only reads the snapshot fields.

    Args:
        ray: The ray to test.
        ray_t: Admissible ray parameters (endpoints excluded).

    Returns:
        The closest HitRecord, or a miss record.
    """
    closest_t = ray_t.hi
    result = miss_record()

    for i in range(num_spheres[None]):
        rec = hit_sphere(ray, get_sphere(i), Interval(lo=ray_t.lo, hi=closest_t))
        if rec.hit == 1:
            closest_t = rec.t
            result = rec

    return result
