"""Pinhole camera model for primary ray generation.

The camera maps a pixel to a ray through that pixel's center. It is described
by its position, viewing direction, up vector, horizontal field of view and
output resolution. The orthonormal basis is built once on the Python side with
NumPy:

- forward: the normalized viewing direction
- right:   cross(forward, up), normalized
- up:      cross(right, forward)

For pixel (px, py) of a W x H image, with row 0 at the top:

    sx = 2 (px + 0.5) / W - 1
    sy = 1 - 2 (py + 0.5) / H
    direction = normalize(forward + sx * half_width * right + sy * half_height * up)

where half_width = tan(fov / 2) and half_height = half_width / (W / H).

Example:
    >>> camera = Camera(position=(0.0, 0.0, 5.0), direction=(0.0, 0.0, -1.0))
    >>> frame = build_camera_frame(camera)
    >>> # Inside a kernel:
    >>> # ray = get_ray(frame, px, py, width, height)
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from raytrace.core.ray import Ray, make_ray

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class Camera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        position: Camera position in world space (x, y, z).
        direction: Viewing direction (need not be normalized).
        up: Approximate up direction; must not be parallel to direction.
        horizontal_fov: Horizontal field of view in radians.
        resolution: Output image size as (width, height) in pixels.
    """

    position: tuple[float, float, float] = (0.0, 0.0, 5.0)
    direction: tuple[float, float, float] = (0.0, 0.0, -1.0)
    up: tuple[float, float, float] = (0.0, 1.0, 0.0)
    horizontal_fov: float = math.pi / 4.0
    resolution: tuple[int, int] = (800, 600)

    def __post_init__(self) -> None:
        width, height = self.resolution
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid resolution: {width}x{height}")
        if not 0.0 < self.horizontal_fov < math.pi:
            raise ValueError(f"Field of view {self.horizontal_fov} must be in (0, pi) radians")

    @property
    def width(self) -> int:
        """Image width in pixels."""
        return int(self.resolution[0])

    @property
    def height(self) -> int:
        """Image height in pixels."""
        return int(self.resolution[1])


@ti.dataclass
class CameraFrame:
    """Kernel-side camera basis.

    Attributes:
        origin: Camera position.
        right: Unit vector toward the right edge of the image.
        up: Unit vector toward the top edge of the image.
        forward: Unit viewing direction.
        half_width: tan(horizontal_fov / 2).
        half_height: half_width divided by the aspect ratio.
    """

    origin: vec3
    right: vec3
    up: vec3
    forward: vec3
    half_width: ti.f32
    half_height: ti.f32


# =============================================================================
# Camera Setup (Python-side)
# =============================================================================


def build_camera_frame(camera: Camera) -> dict[str, tuple[float, float, float] | float]:
    """Compute the camera basis and image-plane extents.

    Args:
        camera: Camera configuration.

    Returns:
        Dictionary with origin, right, up, forward, half_width and half_height.

    Raises:
        ValueError: If the direction is zero or parallel to the up vector.
    """
    forward = np.array(camera.direction, dtype=np.float64)
    norm = np.linalg.norm(forward)
    if norm == 0.0:
        raise ValueError("Camera direction must be non-zero")
    forward = forward / norm

    right = np.cross(forward, np.array(camera.up, dtype=np.float64))
    right_norm = np.linalg.norm(right)
    if right_norm < 1e-8:
        raise ValueError("Camera up vector must not be parallel to the viewing direction")
    right = right / right_norm
    up = np.cross(right, forward)

    half_width = math.tan(camera.horizontal_fov / 2.0)
    aspect_ratio = camera.width / camera.height

    return {
        "origin": tuple(float(c) for c in camera.position),
        "right": tuple(float(c) for c in right),
        "up": tuple(float(c) for c in up),
        "forward": tuple(float(c) for c in forward),
        "half_width": half_width,
        "half_height": half_width / aspect_ratio,
    }


# =============================================================================
# Ray Generation (Taichi-side)
# =============================================================================


@ti.func
def get_ray(
    frame: CameraFrame, pixel_x: ti.i32, pixel_y: ti.i32, width: ti.i32, height: ti.i32
) -> Ray:
    """Generate the primary ray through the center of a pixel.

    Args:
        frame: The camera basis.
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A ray from the camera position with a normalized direction.
    """
    sx = 2.0 * (ti.cast(pixel_x, ti.f32) + 0.5) / ti.cast(width, ti.f32) - 1.0
    sy = 1.0 - 2.0 * (ti.cast(pixel_y, ti.f32) + 0.5) / ti.cast(height, ti.f32)
    direction = tm.normalize(
        frame.forward + sx * frame.half_width * frame.right + sy * frame.half_height * frame.up
    )
    return make_ray(frame.origin, direction)
