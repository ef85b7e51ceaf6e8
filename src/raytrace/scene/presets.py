"""The default three-sphere scene.

Three unit spheres (red, green, blue) sit in a row under one sphere light
and are viewed head-on by a camera on the +z axis:

- Green sphere at (-2, 0, 0)
- Red sphere at (0, 0, 0)
- Blue sphere at (1, 0, 0), overlapping the red one
- All spheres: metallic 0.5, roughness 0.1
- Sphere light at (0, 10, 0), radius 1, 100 W bulb at 10 lm/W
- Camera at (0, 0, 5) looking down -z, 45 degree horizontal field of view

Example:
    >>> from raytrace.scene.presets import create_three_spheres_scene
    >>> scene, camera = create_three_spheres_scene()
    >>> scene.get_sphere_count()
    3
"""

import math
from dataclasses import dataclass

from raytrace.camera.pinhole import Camera
from raytrace.lights.sphere_light import PhotometricEmission
from raytrace.scene.manager import DEFAULT_AMBIENT, Scene


@dataclass
class ThreeSpheresParams:
    """Parameters for the three-sphere scene.

    Attributes:
        metallic: Metalness shared by the three spheres.
        roughness: Roughness shared by the three spheres.
        light_watts: Electrical power of the light bulb.
        light_efficacy: Luminous efficacy of the bulb in lm/W.
        light_color: RGB color of the light.
        ambient: Color of rays that miss every object.
    """

    metallic: float = 0.5
    roughness: float = 0.1
    light_watts: float = 100.0
    light_efficacy: float = 10.0
    light_color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    ambient: tuple[float, float, float] = DEFAULT_AMBIENT


def create_three_spheres_scene(
    params: ThreeSpheresParams | None = None,
    resolution: tuple[int, int] = (800, 600),
) -> tuple[Scene, Camera]:
    """Create the three-sphere scene and its camera.

    Args:
        params: Scene parameters. Defaults to ThreeSpheresParams().
        resolution: Image size as (width, height).

    Returns:
        A tuple (scene, camera).
    """
    if params is None:
        params = ThreeSpheresParams()

    scene = Scene(ambient=params.ambient)
    for center, diffuse in (
        ((0.0, 0.0, 0.0), (1.0, 0.0, 0.0)),
        ((-2.0, 0.0, 0.0), (0.0, 1.0, 0.0)),
        ((1.0, 0.0, 0.0), (0.0, 0.0, 1.0)),
    ):
        scene.add_sphere(
            center=center,
            radius=1.0,
            diffuse=diffuse,
            metallic=params.metallic,
            roughness=params.roughness,
        )

    scene.set_light(
        center=(0.0, 10.0, 0.0),
        radius=1.0,
        emission=PhotometricEmission(watts=params.light_watts, efficacy=params.light_efficacy),
        color=params.light_color,
    )

    camera = Camera(
        position=(0.0, 0.0, 5.0),
        direction=(0.0, 0.0, -1.0),
        up=(0.0, 1.0, 0.0),
        horizontal_fov=math.pi / 4.0,
        resolution=resolution,
    )
    return scene, camera
