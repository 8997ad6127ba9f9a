"""Scene module for scene management and demo scenes.

Components:
    world: Ordered sphere collection, its kernel-side snapshot and the
        closest-hit query
    demo_scenes: Ready-made scenes with matching camera configurations

Scene data is organized for parallel kernel access:
    - Structure-of-Arrays layout for sphere data
    - One material record per sphere
"""

from .demo_scenes import create_random_spheres_scene, create_three_spheres_scene
from .world import (
    MAX_SPHERES,
    SphereInfo,
    World,
    clear_world_storage,
    get_sphere,
    get_sphere_count,
    hit_world,
)

__all__ = [
    "MAX_SPHERES",
    "SphereInfo",
    "World",
    "clear_world_storage",
    "get_sphere",
    "get_sphere_count",
    "hit_world",
    "create_three_spheres_scene",
    "create_random_spheres_scene",
]
