"""Thin-lens camera: viewport geometry and primary ray generation.

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from look_at toward look_from (opposite the view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport sits on the focus plane, focus_distance in front of the camera.
Pixel (0, 0) is the top-left pixel; moving along px_dy goes down the image.

Every primary ray passes through a random point of its pixel's footprint,
which antialiases edges once samples are averaged. When depth_of_field_angle
is positive the ray origin is also randomized over a disk around the camera
position, so only geometry on the focus plane stays sharp.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretracer.camera.camera import Camera, CameraConfig, setup_camera
    >>>
    >>> config = CameraConfig(
    ...     aspect_ratio=16.0 / 9.0,
    ...     image_width=400,
    ...     look_from=(0.0, 0.0, 0.0),
    ...     look_at=(0.0, 0.0, -1.0),
    ... )
    >>> camera = Camera(config)
    >>> setup_camera(camera)
    >>> # Inside a kernel: ray = get_ray(x, y)
"""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.spheretracer.core.ray import Ray, random_in_unit_disk, vec3

if TYPE_CHECKING:
    from src.spheretracer.core.integrator import ProgressCallback
    from src.spheretracer.scene.world import World


# =============================================================================
# Camera Configuration
# =============================================================================


@dataclass(frozen=True)
class CameraConfig:
    """Configuration for the camera and the render it drives.

    Attributes:
        aspect_ratio: Image width divided by height. Must be positive.
        image_width: Image width in pixels. Must be positive.
        vfov: Vertical field of view in degrees.
        num_samples: Samples averaged per pixel. Must be at least 1.
        max_bounce_depth: Maximum number of scatter events along a path.
            0 makes every surface hit black.
        look_from: Camera position in world space.
        look_at: Point the camera is looking at.
        vup: Up direction used to orient the camera.
        focus_distance: Distance from the camera to the plane of perfect
            focus. Must be positive.
        depth_of_field_angle: Cone angle in degrees of the rays through each
            pixel. 0 disables defocus blur.
    """

    aspect_ratio: float = 16.0 / 9.0
    image_width: int = 400
    vfov: float = 90.0
    num_samples: int = 10
    max_bounce_depth: int = 10
    look_from: tuple[float, float, float] = (0.0, 0.0, 0.0)
    look_at: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    focus_distance: float = 1.0
    depth_of_field_angle: float = 0.0

    def __post_init__(self) -> None:
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.image_width <= 0:
            raise ValueError(f"image_width must be positive, got {self.image_width}")
        if self.num_samples < 1:
            raise ValueError(f"num_samples must be at least 1, got {self.num_samples}")
        if self.max_bounce_depth < 0:
            raise ValueError(
                f"max_bounce_depth must be non-negative, got {self.max_bounce_depth}"
            )
        if self.focus_distance <= 0.0:
            raise ValueError(f"focus_distance must be positive, got {self.focus_distance}")
        if self.depth_of_field_angle < 0.0:
            raise ValueError(
                f"depth_of_field_angle must be non-negative, got {self.depth_of_field_angle}"
            )
        if tuple(self.look_from) == tuple(self.look_at):
            raise ValueError("look_from and look_at must be different points")
        view = np.subtract(self.look_from, self.look_at, dtype=np.float64)
        if np.linalg.norm(np.cross(np.asarray(self.vup, dtype=np.float64), view)) < 1e-12:
            raise ValueError("vup must not be parallel to the viewing direction")

    @property
    def image_height(self) -> int:
        """Image height in pixels, at least 1."""
        return max(1, int(self.image_width / self.aspect_ratio))


# =============================================================================
# Camera Geometry (Python-side, computed once per configuration)
# =============================================================================


class Camera:
    """Viewport geometry derived from a CameraConfig.

    All derived vectors are computed once in the constructor and exposed
    read-only.

    Attributes:
        config: The configuration the camera was built from.
    """

    def __init__(self, config: CameraConfig) -> None:
        self.config = config

        width = config.image_width
        height = config.image_height

        # Real aspect ratio differs from the requested one after the height
        # is truncated to whole pixels
        real_aspect_ratio = width / height

        theta = math.radians(config.vfov)
        h = math.tan(theta / 2.0)
        viewport_height = 2.0 * h * config.focus_distance
        viewport_width = viewport_height * real_aspect_ratio

        look_from = np.array(config.look_from, dtype=np.float64)
        look_at = np.array(config.look_at, dtype=np.float64)
        vup = np.array(config.vup, dtype=np.float64)

        w = look_from - look_at
        w = w / np.linalg.norm(w)
        u = np.cross(vup, w)
        u = u / np.linalg.norm(u)
        v = np.cross(w, u)

        # Rows run top to bottom, so the vertical viewport edge points down
        viewport_x = viewport_width * u
        viewport_y = viewport_height * -v

        px_dx = viewport_x / width
        px_dy = viewport_y / height

        viewport_top_left = (
            look_from - config.focus_distance * w - viewport_x / 2.0 - viewport_y / 2.0
        )
        px_top_left = viewport_top_left + 0.5 * (px_dx + px_dy)

        defocus_radius = config.focus_distance * math.tan(
            math.radians(config.depth_of_field_angle / 2.0)
        )

        self._width = width
        self._height = height
        self._origin = look_from
        self._basis = (u, v, w)
        self._px_top_left = px_top_left
        self._px_dx = px_dx
        self._px_dy = px_dy
        self._defocus_disk_u = u * defocus_radius
        self._defocus_disk_v = v * defocus_radius

    @property
    def image_width(self) -> int:
        return self._width

    @property
    def image_height(self) -> int:
        return self._height

    @property
    def origin(self) -> npt.NDArray[np.float64]:
        return self._origin.copy()

    @property
    def basis(self) -> tuple[npt.NDArray[np.float64], ...]:
        """The (u, v, w) basis vectors."""
        return tuple(axis.copy() for axis in self._basis)

    @property
    def px_top_left(self) -> npt.NDArray[np.float64]:
        return self._px_top_left.copy()

    @property
    def px_dx(self) -> npt.NDArray[np.float64]:
        return self._px_dx.copy()

    @property
    def px_dy(self) -> npt.NDArray[np.float64]:
        return self._px_dy.copy()

    @property
    def defocus_disk(self) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """Defocus disk radius vectors along u and v."""
        return self._defocus_disk_u.copy(), self._defocus_disk_v.copy()

    @property
    def depth_of_field_enabled(self) -> bool:
        return self.config.depth_of_field_angle > 0.0

    def get_info(self) -> dict[str, tuple[float, float, float]]:
        """Get the derived camera vectors for debugging."""
        u, v, w = self._basis
        vectors = {
            "origin": self._origin,
            "u": u,
            "v": v,
            "w": w,
            "px_top_left": self._px_top_left,
            "px_dx": self._px_dx,
            "px_dy": self._px_dy,
            "defocus_disk_u": self._defocus_disk_u,
            "defocus_disk_v": self._defocus_disk_v,
        }
        return {
            name: (float(vec[0]), float(vec[1]), float(vec[2])) for name, vec in vectors.items()
        }

    def render(
        self,
        world: "World",
        *,
        rows_per_batch: int = 16,
        callback: "ProgressCallback | None" = None,
    ) -> npt.NDArray[np.uint8]:
        """Render the world as seen by this camera.

        Args:
            world: The scene to render. It is frozen for the duration.
            rows_per_batch: Image rows rendered per kernel launch.
            callback: Optional callback receiving (pixels_done, total_pixels)
                after every batch.

        Returns:
            Array of shape (image_height, image_width, 3), dtype uint8,
            row 0 at the top.
        """
        from src.spheretracer.core.integrator import render_image

        return render_image(self, world, rows_per_batch=rows_per_batch, callback=callback)

    def __repr__(self) -> str:
        return (
            f"Camera(width={self._width}, height={self._height}, "
            f"samples={self.config.num_samples}, depth={self.config.max_bounce_depth})"
        )


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_px_top_left = ti.Vector.field(3, dtype=ti.f32, shape=())
_px_dx = ti.Vector.field(3, dtype=ti.f32, shape=())
_px_dy = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_disk_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_disk_v = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_enabled = ti.field(dtype=ti.i32, shape=())


def setup_camera(camera: Camera) -> None:
    """Write a camera's derived geometry into the kernel-side fields.

    Must be called from Python scope before launching a render kernel.
    """
    disk_u, disk_v = camera.defocus_disk
    _camera_origin[None] = camera.origin.tolist()
    _px_top_left[None] = camera.px_top_left.tolist()
    _px_dx[None] = camera.px_dx.tolist()
    _px_dy[None] = camera.px_dy.tolist()
    _defocus_disk_u[None] = disk_u.tolist()
    _defocus_disk_v[None] = disk_v.tolist()
    _defocus_enabled[None] = 1 if camera.depth_of_field_enabled else 0


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def sample_square() -> vec3:
    """Random offset in [-0.5, 0.5)^2 within a pixel footprint (z = 0)."""
    return vec3(ti.random(ti.f32) - 0.5, ti.random(ti.f32) - 0.5, 0.0)


@ti.func
def defocus_disk_sample() -> vec3:
    """Random point on the defocus disk around the camera position."""
    p = random_in_unit_disk()
    return _camera_origin[None] + p.x * _defocus_disk_u[None] + p.y * _defocus_disk_v[None]


@ti.func
def get_ray(x: ti.i32, y: ti.i32) -> Ray:
    """Generate a jittered primary ray through pixel (x, y).

    Args:
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).

    Returns:
        A ray from the camera (or a defocus-disk sample) toward a random
        point inside the pixel on the focus plane. The direction is not
        normalized.
    """
    offset = sample_square()
    px_sample = (
        _px_top_left[None]
        + (ti.cast(x, ti.f32) + offset.x) * _px_dx[None]
        + (ti.cast(y, ti.f32) + offset.y) * _px_dy[None]
    )

    origin = _camera_origin[None]
    if _defocus_enabled[None] == 1:
        origin = defocus_disk_sample()

    return Ray(origin=origin, direction=px_sample - origin)
