"""Material variants and their kernel-side representation.

The set of materials is closed: diffuse (Lambertian), metallic and dielectric.
On the host each variant is a small frozen dataclass. Inside kernels every
variant is packed into the same Material struct, tagged by its MaterialType,
and the integrator dispatches on that tag.

Example:
    >>> from src.spheretracer.materials.material import Diffuse, Metallic, Dielectric
    >>> ground = Diffuse(albedo=(0.8, 0.8, 0.0))
    >>> mirror = Metallic(albedo=(0.8, 0.6, 0.2), fuzz=0.0)
    >>> glass = Dielectric(refractive_index=1.5)
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, ClassVar, Union

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


class MaterialType(IntEnum):
    """Tag identifying which scatter function handles a Material."""

    DIFFUSE = 0
    METALLIC = 1
    DIELECTRIC = 2


@ti.dataclass
class Material:
    """Kernel-side material record.

    Only the fields relevant to the variant named by kind are meaningful.

    Attributes:
        kind: The MaterialType of this material.
        albedo: Attenuation color for diffuse and metallic materials.
        fuzz: Reflection perturbation radius for metallic materials, in [0, 1].
        refractive_index: Index of refraction for dielectric materials.
    """

    kind: ti.i32
    albedo: vec3
    fuzz: ti.f32
    refractive_index: ti.f32


def _validate_albedo(albedo: tuple[float, float, float]) -> tuple[float, float, float]:
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}")
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
    return (float(albedo[0]), float(albedo[1]), float(albedo[2]))


@dataclass(frozen=True)
class Diffuse:
    """Lambertian material: scatters around the surface normal.

    Attributes:
        albedo: Reflectance color (R, G, B), each component in [0, 1].
    """

    albedo: tuple[float, float, float]

    kind: ClassVar[MaterialType] = MaterialType.DIFFUSE

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", _validate_albedo(self.albedo))

    def to_fields(self) -> tuple[int, tuple[float, float, float], float, float]:
        """Pack into (kind, albedo, fuzz, refractive_index) for upload."""
        return int(self.kind), self.albedo, 0.0, 1.0

    def to_dict(self) -> dict[str, Any]:
        return {"type": "diffuse", "albedo": list(self.albedo)}


@dataclass(frozen=True)
class Metallic:
    """Reflective material with optional fuzz.

    Attributes:
        albedo: Reflection tint (R, G, B), each component in [0, 1].
        fuzz: Radius of the random perturbation added to the mirror
            direction. Values are clamped into [0, 1]; 0 is a perfect mirror.
    """

    albedo: tuple[float, float, float]
    fuzz: float = 0.0

    kind: ClassVar[MaterialType] = MaterialType.METALLIC

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", _validate_albedo(self.albedo))
        object.__setattr__(self, "fuzz", min(max(float(self.fuzz), 0.0), 1.0))

    def to_fields(self) -> tuple[int, tuple[float, float, float], float, float]:
        """Pack into (kind, albedo, fuzz, refractive_index) for upload."""
        return int(self.kind), self.albedo, self.fuzz, 1.0

    def to_dict(self) -> dict[str, Any]:
        return {"type": "metallic", "albedo": list(self.albedo), "fuzz": self.fuzz}


@dataclass(frozen=True)
class Dielectric:
    """Transparent material that refracts or reflects.

    Attributes:
        refractive_index: Index of refraction relative to the surrounding
            medium. Common values: glass 1.5, water 1.33. Values below 1
            model a bubble of air inside a denser medium.
    """

    refractive_index: float = 1.5

    kind: ClassVar[MaterialType] = MaterialType.DIELECTRIC

    def __post_init__(self) -> None:
        if self.refractive_index <= 0.0:
            raise ValueError(
                f"Refractive index must be positive, got {self.refractive_index}"
            )
        object.__setattr__(self, "refractive_index", float(self.refractive_index))

    def to_fields(self) -> tuple[int, tuple[float, float, float], float, float]:
        """Pack into (kind, albedo, fuzz, refractive_index) for upload."""
        return int(self.kind), (1.0, 1.0, 1.0), 0.0, self.refractive_index

    def to_dict(self) -> dict[str, Any]:
        return {"type": "dielectric", "refractive_index": self.refractive_index}


MaterialSpec = Union[Diffuse, Metallic, Dielectric]


def material_from_dict(data: dict[str, Any]) -> MaterialSpec:
    """Build a host-side material from its dictionary form.

    Args:
        data: Dictionary produced by a material's to_dict().

    Returns:
        The corresponding Diffuse, Metallic or Dielectric material.

    Raises:
        ValueError: If the material type is unknown.
    """
    mat_type = data.get("type", "").lower()
    if mat_type == "diffuse":
        albedo_list = data.get("albedo", [0.5, 0.5, 0.5])
        return Diffuse(albedo=(albedo_list[0], albedo_list[1], albedo_list[2]))
    if mat_type == "metallic":
        albedo_list = data.get("albedo", [0.8, 0.8, 0.8])
        return Metallic(
            albedo=(albedo_list[0], albedo_list[1], albedo_list[2]),
            fuzz=data.get("fuzz", 0.0),
        )
    if mat_type == "dielectric":
        return Dielectric(refractive_index=data.get("refractive_index", 1.5))
    raise ValueError(f"Unknown material type: {mat_type}")


@ti.func
def default_material() -> Material:
    """Placeholder material carried by miss records."""
    return Material(
        kind=int(MaterialType.DIFFUSE),
        albedo=vec3(0.0, 0.0, 0.0),
        fuzz=0.0,
        refractive_index=1.0,
    )
