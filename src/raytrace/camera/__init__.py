"""Camera module.

Components:
    pinhole: Pinhole (perspective) camera mapping pixel centers to rays

The camera basis is computed once with NumPy; ray generation runs in
Taichi functions so every pixel's primary ray is built in parallel.
"""

from .pinhole import Camera, CameraFrame, build_camera_frame, get_ray

__all__ = [
    "Camera",
    "CameraFrame",
    "build_camera_frame",
    "get_ray",
]
