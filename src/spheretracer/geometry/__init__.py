"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection and hit records

All intersection routines are implemented as Taichi functions (@ti.func)
so they can run inside the parallel render kernel.
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_hit_record, make_sphere, miss_record

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_hit_record",
    "miss_record",
]
