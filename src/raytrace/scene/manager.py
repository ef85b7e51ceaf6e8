"""Scene description: spheres, the sphere light and the ambient fallback.

This module provides the Python-side scene model that render contexts are
built from. It validates input at construction time, so nothing malformed
reaches the kernels:

- Material parameters are range-checked, and roughness is clamped to the
  MIN_ROUGHNESS floor.
- Sphere radii must be positive.
- The light must have a positive radius and non-negative color and power.

Scenes round-trip through plain dictionaries (JSON-compatible) so they can be
stored next to renders and reloaded.

Example:
    >>> from raytrace.scene.manager import Scene
    >>> scene = Scene()
    >>> scene.add_sphere(center=(0, 0, 0), radius=1.0, diffuse=(1, 0, 0), roughness=0.5)
    >>> scene.set_light(center=(0, 10, 0), radius=1.0, emission=RadiometricEmission(100.0))
    >>> data = scene.to_dict()
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from raytrace.lights.sphere_light import (
    Emission,
    LightInfo,
    PhotometricEmission,
    RadiometricEmission,
)
from raytrace.materials.microfacet import MIN_ROUGHNESS, clamp_roughness

logger = logging.getLogger(__name__)

# Ambient color of the original three-sphere scene
DEFAULT_AMBIENT = (0.1, 0.1, 0.1)


@dataclass
class MaterialInfo:
    """Python-side material parameters.

    Attributes:
        diffuse: Albedo as (R, G, B), each component in [0, 1].
        metallic: Metalness in [0, 1].
        roughness: Perceptual roughness in [0, 1]; values below
            MIN_ROUGHNESS are raised to the floor.

    Raises:
        ValueError: If any parameter is outside its range.
    """

    diffuse: tuple[float, float, float]
    metallic: float = 0.0
    roughness: float = 0.5

    def __post_init__(self) -> None:
        for i, component in enumerate(self.diffuse):
            if component < 0.0 or component > 1.0:
                raise ValueError(
                    f"Diffuse component {i} = {component} is outside [0, 1]. "
                    "This would violate energy conservation."
                )
        if self.metallic < 0.0 or self.metallic > 1.0:
            raise ValueError(f"Metallic = {self.metallic} is outside [0, 1].")
        if self.roughness < 0.0 or self.roughness > 1.0:
            raise ValueError(f"Roughness = {self.roughness} is outside [0, 1].")
        if self.roughness < MIN_ROUGHNESS:
            logger.debug("Clamping roughness %g to %g", self.roughness, MIN_ROUGHNESS)
            self.roughness = clamp_roughness(self.roughness)


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        center: The center of the sphere.
        radius: The radius of the sphere (positive).
        material: The surface material.
    """

    center: tuple[float, float, float]
    radius: float
    material: MaterialInfo

    def __post_init__(self) -> None:
        if self.radius <= 0.0:
            raise ValueError(f"Sphere radius = {self.radius} must be positive.")


def _vec3(values: Any, name: str) -> tuple[float, float, float]:
    """Convert a length-3 sequence to a float tuple."""
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


def _emission_to_dict(emission: Emission) -> dict[str, Any]:
    if isinstance(emission, PhotometricEmission):
        return {"type": "photometric", "watts": emission.watts, "efficacy": emission.efficacy}
    return {"type": "radiometric", "flux": emission.flux}


def _emission_from_dict(data: dict[str, Any]) -> Emission:
    emission_type = data.get("type", "").lower()
    if emission_type == "photometric":
        return PhotometricEmission(
            watts=float(data["watts"]),
            efficacy=float(data.get("efficacy", 15.0)),
        )
    if emission_type == "radiometric":
        return RadiometricEmission(flux=float(data["flux"]))
    raise ValueError(f"Unknown emission type: {emission_type!r}")


class Scene:
    """An ordered set of spheres, one sphere light and an ambient color.

    Sphere order is preserved; it fixes the tie-break of the nearest-hit
    query (earlier spheres win ties).

    Attributes:
        spheres: List of SphereInfo in insertion order.
        light: The scene's light, or None until set_light() is called.
        ambient: Color returned for camera rays that miss everything.
    """

    def __init__(self, ambient: tuple[float, float, float] = DEFAULT_AMBIENT) -> None:
        self.spheres: list[SphereInfo] = []
        self.light: LightInfo | None = None
        self.ambient = _vec3(ambient, "ambient")
        for i, component in enumerate(self.ambient):
            if component < 0.0:
                raise ValueError(f"Ambient component {i} = {component} is negative.")

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        diffuse: tuple[float, float, float],
        metallic: float = 0.0,
        roughness: float = 0.5,
    ) -> int:
        """Add a sphere with its material.

        Args:
            center: The center point of the sphere.
            radius: The radius of the sphere (positive).
            diffuse: Albedo as (R, G, B), each component in [0, 1].
            metallic: Metalness in [0, 1].
            roughness: Perceptual roughness in [0, 1].

        Returns:
            The index of the added sphere.

        Raises:
            ValueError: If the radius or any material parameter is invalid.
        """
        material = MaterialInfo(
            diffuse=_vec3(diffuse, "diffuse"),
            metallic=float(metallic),
            roughness=float(roughness),
        )
        info = SphereInfo(center=_vec3(center, "center"), radius=float(radius), material=material)
        self.spheres.append(info)
        return len(self.spheres) - 1

    def set_light(
        self,
        center: tuple[float, float, float],
        radius: float,
        emission: Emission,
        color: tuple[float, float, float] = (1.0, 1.0, 1.0),
    ) -> LightInfo:
        """Set the scene's sphere light, replacing any previous one.

        Args:
            center: Center of the light sphere.
            radius: Radius of the light sphere (positive).
            emission: Photometric or radiometric emission spec.
            color: Emission color (RGB).

        Returns:
            The created LightInfo, with its emitted radiance computed.

        Raises:
            ValueError: If the light parameters are invalid.
        """
        self.light = LightInfo(
            center=_vec3(center, "center"),
            radius=float(radius),
            color=_vec3(color, "color"),
            emission=emission,
        )
        logger.debug("Light radiance set to %s", self.light.emitted_radiance)
        return self.light

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return len(self.spheres)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a JSON-compatible dictionary."""
        data: dict[str, Any] = {
            "ambient": list(self.ambient),
            "spheres": [
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "diffuse": list(sphere.material.diffuse),
                    "metallic": sphere.material.metallic,
                    "roughness": sphere.material.roughness,
                }
                for sphere in self.spheres
            ],
            "light": None,
        }
        if self.light is not None:
            data["light"] = {
                "center": list(self.light.center),
                "radius": self.light.radius,
                "color": list(self.light.color),
                "emission": _emission_to_dict(self.light.emission),
            }
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Scene":
        """Build a scene from a dictionary produced by to_dict().

        Args:
            data: The scene dictionary.

        Returns:
            A new Scene.

        Raises:
            ValueError: If the dictionary contains invalid data.
        """
        scene = cls(ambient=data.get("ambient", DEFAULT_AMBIENT))
        for sphere in data.get("spheres", []):
            scene.add_sphere(
                center=sphere.get("center", [0.0, 0.0, 0.0]),
                radius=sphere.get("radius", 1.0),
                diffuse=sphere.get("diffuse", [0.5, 0.5, 0.5]),
                metallic=sphere.get("metallic", 0.0),
                roughness=sphere.get("roughness", 0.5),
            )
        light = data.get("light")
        if light is not None:
            scene.set_light(
                center=light.get("center", [0.0, 10.0, 0.0]),
                radius=light.get("radius", 1.0),
                emission=_emission_from_dict(light.get("emission", {})),
                color=light.get("color", [1.0, 1.0, 1.0]),
            )
        return scene

    def __repr__(self) -> str:
        return f"Scene(spheres={len(self.spheres)}, light={self.light is not None})"


def load_scene(path: str | Path) -> Scene:
    """Load a scene from a JSON file written from Scene.to_dict().

    Args:
        path: Path of the JSON file.

    Returns:
        The loaded Scene.
    """
    with open(path, encoding="utf-8") as handle:
        data = json.load(handle)
    scene = Scene.from_dict(data)
    logger.info("Loaded %r from %s", scene, path)
    return scene


def save_scene(scene: Scene, path: str | Path) -> None:
    """Write a scene to a JSON file."""
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(scene.to_dict(), handle, indent=2)
