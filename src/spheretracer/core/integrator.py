"""Path tracing integrator for Monte Carlo light transport.

This module implements the main rendering kernel. Rays leave the camera,
bounce off spheres according to their materials, and pick up the sky
gradient once they escape the scene.

Each path carries an attenuation (the product of the albedos met so far):
    - A ray that escapes contributes attenuation * background.
    - A ray that is absorbed contributes black.
    - A ray that hits a surface after the bounce budget is spent contributes
      black.

The image is rendered in horizontal bands of rows. Within a band every pixel
is traced in parallel; between bands the host reports progress.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretracer.camera.camera import Camera
    >>> from src.spheretracer.core.integrator import render_image
    >>> from src.spheretracer.scene.demo_scenes import create_three_spheres_scene
    >>>
    >>> world, config = create_three_spheres_scene()
    >>> pixels = render_image(Camera(config), world)
    >>> pixels.shape
    (225, 400, 3)
"""

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.spheretracer.camera.camera import get_ray, setup_camera
from src.spheretracer.core.color import background_color, to_gamma, to_rgb
from src.spheretracer.core.interval import Interval
from src.spheretracer.core.ray import Ray, vec3
from src.spheretracer.geometry.sphere import HitRecord
from src.spheretracer.materials.dielectric import scatter_dielectric
from src.spheretracer.materials.diffuse import scatter_diffuse
from src.spheretracer.materials.material import Material, MaterialType
from src.spheretracer.materials.metallic import scatter_metallic
from src.spheretracer.scene.world import hit_world

if TYPE_CHECKING:
    from src.spheretracer.camera.camera import Camera
    from src.spheretracer.scene.world import World

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (pixels_done, total_pixels)
ProgressCallback = Callable[[int, int], None]

# =============================================================================
# Rendering Constants
# =============================================================================

# Lower bound of the admissible hit window, skips self-intersection at the
# origin of scattered rays
T_MIN = 0.001

T_MAX = tm.inf

# Default number of image rows per kernel launch
DEFAULT_ROWS_PER_BATCH = 16

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# 8-bit output, indexed [row, column] with row 0 at the top
_pixels = ti.Vector.field(3, dtype=ti.u8, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Progress counters, the first is incremented atomically by render kernels
_pixels_done = ti.field(dtype=ti.i32, shape=())
_pixels_total = ti.field(dtype=ti.i32, shape=())


def get_render_progress() -> tuple[int, int]:
    """Get the progress of the current (or last) render.

    Returns:
        Tuple of (pixels_done, total_pixels).
    """
    return int(_pixels_done[None]), int(_pixels_total[None])


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(material: Material, ray: Ray, rec: HitRecord):
    """Dispatch to the scatter function of the hit material.

    Args:
        material: The material of the hit surface.
        ray: The incoming ray.
        rec: The hit record.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The new ray direction (not normalized).
        - attenuation: The color attenuation for this bounce.
        - did_scatter: 1 if ray scattered, 0 if absorbed.
    """
    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if material.kind == int(MaterialType.DIFFUSE):
        scattered_direction, attenuation, did_scatter = scatter_diffuse(
            material.albedo, rec.normal
        )

    elif material.kind == int(MaterialType.METALLIC):
        scattered_direction, attenuation, did_scatter = scatter_metallic(
            material.albedo, material.fuzz, ray.direction, rec.normal
        )

    elif material.kind == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric(
            material.refractive_index, ray.direction, rec.normal, rec.front_face
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32) -> vec3:
    """Estimate the light arriving along a ray.

    Args:
        ray: The ray to trace.
        max_depth: Maximum number of scatter events. A surface hit after
            max_depth scatters contributes black.
            A ray that escapes still picks up the sky, even at depth 0, so the
            cutoff blackens surfaces only and never the background.

    Returns:
        The estimated color (RGB, linear).
    """
    current = ray
    color = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(1.0, 1.0, 1.0)

    # Active flag for path continuation (Taichi doesn't support break in ti.func loops)
    active = 1

    for depth in range(max_depth + 1):
        if active == 1:
            rec = hit_world(current, Interval(lo=T_MIN, hi=T_MAX))

            if rec.hit == 0:
                color = attenuation * background_color(current)
                active = 0
            elif depth == max_depth:
                active = 0
            else:
                scattered_direction, albedo, did_scatter = _scatter_material(
                    rec.material, current, rec
                )
                if did_scatter == 0:
                    active = 0
                else:
                    attenuation *= albedo
                    current = Ray(origin=rec.point, direction=scattered_direction)

    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    y_start: ti.i32,
    y_end: ti.i32,
    width: ti.i32,
    num_samples: ti.i32,
    max_depth: ti.i32,
):
    """Render rows [y_start, y_end) of the image into the pixel buffer.

    Args:
        y_start: First row (inclusive).
        y_end: Last row (exclusive).
        width: Image width in pixels.
        num_samples: Samples averaged per pixel.
        max_depth: Maximum number of scatter events per path.
    """
    for y, x in ti.ndrange((y_start, y_end), width):
        color = vec3(0.0, 0.0, 0.0)

        for _ in range(num_samples):
            sample = ray_color(get_ray(x, y), max_depth)

            # Check for NaN/Inf and replace with zero
            for c in ti.static(range(3)):
                if tm.isnan(sample[c]) or tm.isinf(sample[c]):
                    sample[c] = 0.0

            color += sample

        color /= ti.cast(num_samples, ti.f32)
        _pixels[y, x] = to_rgb(to_gamma(color))
        ti.atomic_add(_pixels_done[None], 1)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_image(
    camera: "Camera",
    world: "World",
    rows_per_batch: int = DEFAULT_ROWS_PER_BATCH,
    callback: ProgressCallback | None = None,
) -> npt.NDArray[np.uint8]:
    """Render a world through a camera.

    The world is frozen and uploaded once, then the image is rendered in
    bands of rows_per_batch rows. After each band the callback (if any)
    receives the progress counters.

    The pixel buffer, progress counters and sphere snapshot are module-level
    fields shared by every caller, so only one render may run per process
    at a time.

    Args:
        camera: The camera to render with.
        world: The world to render.
        rows_per_batch: Number of image rows per kernel launch.
        callback: Optional callback receiving (pixels_done, total_pixels).

    Returns:
        NumPy array of shape (height, width, 3) with dtype uint8, row 0 at
        the top of the image.

    Raises:
        ValueError: If the image exceeds the maximum supported size or
            rows_per_batch is not positive.
        RuntimeError: If the world is already frozen by another render.
    """
    width = camera.image_width
    height = camera.image_height

    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    if rows_per_batch < 1:
        raise ValueError(f"rows_per_batch must be at least 1, got {rows_per_batch}")

    config = camera.config
    total = width * height

    with world.frozen():
        sphere_count = world.upload()
        setup_camera(camera)

        _pixels_done[None] = 0
        _pixels_total[None] = total

        logger.info(
            "Rendering %dx%d, %d spheres, %d samples/pixel, max depth %d",
            width,
            height,
            sphere_count,
            config.num_samples,
            config.max_bounce_depth,
        )
        start = time.perf_counter()

        for y_start in range(0, height, rows_per_batch):
            y_end = min(y_start + rows_per_batch, height)
            _render_rows(y_start, y_end, width, config.num_samples, config.max_bounce_depth)

            done, _ = get_render_progress()
            logger.debug("Rendered rows %d-%d (%d/%d pixels)", y_start, y_end - 1, done, total)
            if callback is not None:
                callback(done, total)

        elapsed = time.perf_counter() - start

    logger.info("Render finished in %.2fs", elapsed)

    return _pixels.to_numpy()[:height, :width].copy()
