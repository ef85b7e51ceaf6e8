"""Scene module for scene description and ray-scene queries.

Components:
    manager: Python-side scene (spheres, light, ambient), validation and
        dictionary / JSON round-trips
    intersection: Kernel-side scene storage and the closest-hit query
    presets: The default three-sphere scene

Scene data is uploaded to Taichi fields in Structure-of-Arrays layout.
"""

from .intersection import SceneData
from .manager import (
    DEFAULT_AMBIENT,
    MaterialInfo,
    Scene,
    SphereInfo,
    load_scene,
    save_scene,
)
from .presets import ThreeSpheresParams, create_three_spheres_scene

__all__ = [
    "DEFAULT_AMBIENT",
    "MaterialInfo",
    "Scene",
    "SceneData",
    "SphereInfo",
    "ThreeSpheresParams",
    "create_three_spheres_scene",
    "load_scene",
    "save_scene",
]
