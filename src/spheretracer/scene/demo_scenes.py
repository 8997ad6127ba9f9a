"""Demo scene configurations.

This module provides factory functions for two ready-made scenes:

- Three spheres: a diffuse sphere between a hollow glass sphere and a
  polished metal sphere, resting on a large yellowish ground sphere.
- Random spheres: a ground plane covered with a grid of small spheres of
  random material, plus three large spheres (glass, diffuse, metal).

Both return the world together with a matching camera configuration.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretracer.camera.camera import Camera
    >>> from src.spheretracer.scene.demo_scenes import create_three_spheres_scene
    >>>
    >>> world, config = create_three_spheres_scene(image_width=200)
    >>> pixels = Camera(config).render(world)
"""

import numpy as np

from src.spheretracer.camera.camera import CameraConfig
from src.spheretracer.materials.material import Dielectric, Diffuse, Metallic, MaterialSpec
from src.spheretracer.scene.world import World

# =============================================================================
# Three Spheres Scene Constants
# =============================================================================

GROUND_ALBEDO = (0.8, 0.8, 0.0)
CENTER_ALBEDO = (0.1, 0.2, 0.5)
RIGHT_METAL_ALBEDO = (0.8, 0.6, 0.2)
GLASS_IOR = 1.5

# =============================================================================
# Random Spheres Scene Constants
# =============================================================================

FLOOR_ALBEDO = (0.5, 0.5, 0.5)
SMALL_SPHERE_RADIUS = 0.2
LARGE_DIFFUSE_ALBEDO = (0.4, 0.3, 0.2)
LARGE_METAL_ALBEDO = (0.7, 0.6, 0.5)

# Material mix of the small spheres
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.1
MAX_SMALL_METAL_FUZZ = 0.5


def create_three_spheres_scene(
    image_width: int = 400,
    num_samples: int = 32,
    max_bounce_depth: int = 16,
) -> tuple[World, CameraConfig]:
    """Create the three-spheres scene.

    The left sphere is a glass shell: a glass sphere containing a smaller
    sphere with the inverse refractive index, which acts as an air bubble.

    Args:
        image_width: Image width in pixels.
        num_samples: Samples per pixel.
        max_bounce_depth: Maximum number of scatter events per path.

    Returns:
        A tuple of (World, CameraConfig).
    """
    world = World()
    world.add_sphere((0.0, -100.5, -1.0), 100.0, Diffuse(GROUND_ALBEDO))
    world.add_sphere((0.0, 0.0, -1.2), 0.5, Diffuse(CENTER_ALBEDO))
    world.add_sphere((-1.0, 0.0, -1.0), 0.5, Dielectric(GLASS_IOR))
    world.add_sphere((-1.0, 0.0, -1.0), 0.4, Dielectric(1.0 / GLASS_IOR))
    world.add_sphere((1.0, 0.0, -1.0), 0.5, Metallic(RIGHT_METAL_ALBEDO, fuzz=0.0))

    config = CameraConfig(
        aspect_ratio=16.0 / 9.0,
        image_width=image_width,
        vfov=65.0,
        num_samples=num_samples,
        max_bounce_depth=max_bounce_depth,
        look_from=(-2.0, 2.0, 1.0),
        look_at=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        focus_distance=3.4,
        depth_of_field_angle=10.0,
    )
    return world, config


def _random_material(rng: np.random.Generator) -> MaterialSpec:
    choice = rng.random()
    if choice < DIFFUSE_PROBABILITY:
        albedo = rng.random(3) * rng.random(3)
        return Diffuse(tuple(float(c) for c in albedo))
    if choice < DIFFUSE_PROBABILITY + METAL_PROBABILITY:
        albedo = rng.random(3) * rng.random(3)
        fuzz = float(rng.uniform(0.0, MAX_SMALL_METAL_FUZZ))
        return Metallic(tuple(float(c) for c in albedo), fuzz=fuzz)
    return Dielectric(GLASS_IOR)


def create_random_spheres_scene(
    seed: int | None = None,
    grid: int = 11,
    image_width: int = 400,
    num_samples: int = 32,
    max_bounce_depth: int = 16,
) -> tuple[World, CameraConfig]:
    """Create the random-spheres scene.

    Small spheres are placed on a (2 * grid) x (2 * grid) lattice, each
    jittered within its cell. The same seed always produces the same world.

    Args:
        seed: Seed for the host-side scene generator. None picks a fresh one.
        grid: Half extent of the lattice of small spheres.
        image_width: Image width in pixels.
        num_samples: Samples per pixel.
        max_bounce_depth: Maximum number of scatter events per path.

    Returns:
        A tuple of (World, CameraConfig).

    Raises:
        ValueError: If grid is negative.
        RuntimeError: If the lattice holds more spheres than a world can.
    """
    if grid < 0:
        raise ValueError(f"grid must be non-negative, got {grid}")

    rng = np.random.default_rng(seed)
    world = World()

    world.add_sphere((0.0, -1000.0, 0.0), 1000.0, Diffuse(FLOOR_ALBEDO))

    for a in range(-grid, grid):
        for b in range(-grid, grid):
            center = (
                a + 0.9 * float(rng.random()),
                SMALL_SPHERE_RADIUS,
                b + 0.9 * float(rng.random()),
            )
            world.add_sphere(center, SMALL_SPHERE_RADIUS, _random_material(rng))

    world.add_sphere((0.0, 1.0, 0.0), 1.0, Dielectric(GLASS_IOR))
    world.add_sphere((4.0, 1.0, 0.0), 1.0, Metallic(LARGE_METAL_ALBEDO, fuzz=0.0))
    world.add_sphere((-4.0, 1.0, 0.0), 1.0, Diffuse(LARGE_DIFFUSE_ALBEDO))

    config = CameraConfig(
        aspect_ratio=16.0 / 9.0,
        image_width=image_width,
        vfov=25.0,
        num_samples=num_samples,
        max_bounce_depth=max_bounce_depth,
        look_from=(13.0, 2.0, 3.0),
        look_at=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        focus_distance=10.0,
        depth_of_field_angle=0.5,
    )
    return world, config
