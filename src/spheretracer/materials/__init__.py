"""Materials module for light scattering.

Components:
    material: Material tags, kernel-side record and host-side descriptors
    diffuse: Ideal diffuse (Lambertian) reflection
    metallic: Mirror reflection with optional fuzz
    dielectric: Glass-like materials with refraction (Schlick reflectance)

Every scatter function returns (scattered_direction, attenuation,
did_scatter) and is implemented as a Taichi function.
"""

from .dielectric import must_reflect, scatter_dielectric, schlick_reflectance
from .diffuse import scatter_diffuse
from .material import (
    Dielectric,
    Diffuse,
    Material,
    MaterialSpec,
    MaterialType,
    Metallic,
    default_material,
    material_from_dict,
)
from .metallic import scatter_metallic

__all__ = [
    "Material",
    "MaterialType",
    "MaterialSpec",
    "Diffuse",
    "Metallic",
    "Dielectric",
    "material_from_dict",
    "default_material",
    "scatter_diffuse",
    "scatter_metallic",
    "scatter_dielectric",
    "schlick_reflectance",
    "must_reflect",
]
