"""Spherical area light: emission model and solid-angle light sampling.

A sphere light is described on the Python side by its geometry, its color and
an emission spec, either photometric (bulb wattage and luminous efficacy) or
radiometric (radiant flux). The emitted radiance is derived once, when the
light is built:

    radiant_flux     = efficacy * watts / 683       (photometric)
    radiant_exitance = radiant_flux / (4 pi r^2)
    radiance         = color * radiant_exitance / pi

683 lm/W is the luminous efficacy of monochromatic 555 nm light; dividing the
exitance by pi is the Lambertian emitter relation.

Inside kernels the light is a SphereLight struct. sample_sphere_light draws a
uniform point on the light's surface and converts the area density
1 / (4 pi r^2) into a solid-angle density seen from the shading point.

Example:
    >>> light = LightInfo(
    ...     center=(0.0, 10.0, 0.0),
    ...     radius=1.0,
    ...     color=(1.0, 1.0, 1.0),
    ...     emission=PhotometricEmission(watts=100.0, efficacy=10.0),
    ... )
    >>> light.emitted_radiance
"""

import math
from dataclasses import dataclass, field

import taichi as ti
import taichi.math as tm

from raytrace.core.rng import next_float
from raytrace.geometry.sphere import Sphere
from raytrace.materials.microfacet import Material

# Type alias for 3D vectors
vec3 = tm.vec3

# Lumens per watt of monochromatic 555 nm light (CIE)
MAX_LUMINOUS_EFFICACY = 683.0

# Floor for the light-surface cosine in the area-to-solid-angle Jacobian
MIN_LIGHT_COSINE = 1e-6


# =============================================================================
# Emission Specs (Python-side)
# =============================================================================


@dataclass(frozen=True)
class PhotometricEmission:
    """Emission given as a light bulb rating.

    Attributes:
        watts: Electrical power of the bulb in watts.
        efficacy: Luminous efficacy in lumens per watt.
    """

    watts: float
    efficacy: float = 15.0

    def radiant_flux(self) -> float:
        """Radiant flux in watts."""
        return self.efficacy * self.watts / MAX_LUMINOUS_EFFICACY


@dataclass(frozen=True)
class RadiometricEmission:
    """Emission given directly as radiant flux.

    Attributes:
        flux: Radiant flux in watts.
    """

    flux: float

    def radiant_flux(self) -> float:
        """Radiant flux in watts."""
        return self.flux


Emission = PhotometricEmission | RadiometricEmission


def compute_emitted_radiance(
    color: tuple[float, float, float],
    radius: float,
    emission: Emission,
) -> tuple[float, float, float]:
    """Convert an emission spec into the radiance leaving the light's surface.

    Args:
        color: Emission color (RGB).
        radius: Light sphere radius.
        emission: Photometric or radiometric emission spec.

    Returns:
        The emitted radiance (RGB).
    """
    radiant_exitance = emission.radiant_flux() / (4.0 * math.pi * radius * radius)
    scale = radiant_exitance / math.pi
    return (color[0] * scale, color[1] * scale, color[2] * scale)


@dataclass
class LightInfo:
    """Python-side description of a sphere light.

    The emitted radiance is computed at construction and stays fixed for the
    lifetime of the light.

    Attributes:
        center: Center of the light sphere.
        radius: Radius of the light sphere (positive).
        color: Emission color (RGB, non-negative).
        emission: Photometric or radiometric emission spec.
        emitted_radiance: Derived radiance (RGB), read-only by convention.

    Raises:
        ValueError: If the radius, color or emission power is invalid.
    """

    center: tuple[float, float, float]
    radius: float
    color: tuple[float, float, float]
    emission: Emission
    emitted_radiance: tuple[float, float, float] = field(init=False)

    def __post_init__(self) -> None:
        if self.radius <= 0.0:
            raise ValueError(f"Light radius = {self.radius} must be positive.")
        for i, component in enumerate(self.color):
            if component < 0.0:
                raise ValueError(f"Light color component {i} = {component} is negative.")
        if not isinstance(self.emission, (PhotometricEmission, RadiometricEmission)):
            raise ValueError(f"Unknown emission spec: {self.emission!r}")
        if self.emission.radiant_flux() < 0.0:
            raise ValueError(f"Light emission {self.emission!r} has negative power.")
        self.emitted_radiance = compute_emitted_radiance(self.color, self.radius, self.emission)


# =============================================================================
# Kernel-side Light
# =============================================================================


@ti.dataclass
class SphereLight:
    """A spherical light inside kernels.

    Attributes:
        center: Center of the light sphere.
        radius: Radius of the light sphere.
        color: Emission color (RGB).
        radiance: Precomputed emitted radiance (RGB).
    """

    center: vec3
    radius: ti.f32
    color: vec3
    radiance: vec3


@ti.func
def light_as_sphere(light: SphereLight) -> Sphere:
    """Reduce a light to a sphere so it can be intersected like geometry."""
    return Sphere(
        center=light.center,
        radius=light.radius,
        material=Material(diffuse=light.color, metallic=0.0, roughness=1.0),
    )


@ti.func
def sphere_light_direction(u1: ti.f32, u2: ti.f32, light: SphereLight, point: vec3):
    """Map two uniform variates to a direction toward the light's surface.

    The surface point is uniform over the whole sphere (cos(theta) = 1 - 2 u1,
    phi = 2 pi u2). Its area density 1 / A is converted to solid angle at the
    shading point with the Jacobian distance^2 / (A * cos_light), where
    cos_light is the cosine between the light's surface normal and the
    direction back to the shading point, floored at MIN_LIGHT_COSINE. Points
    on the far side of the light therefore receive a vanishing weight 1 / pdf.

    Args:
        u1: Uniform variate in [0, 1) controlling the polar angle.
        u2: Uniform variate in [0, 1) controlling the azimuth.
        light: The light to sample.
        point: The shading point.

    Returns:
        A tuple (direction, pdf, cos_light).
    """
    cos_theta = 1.0 - 2.0 * u1
    sin_theta = ti.sqrt(ti.max(0.0, 1.0 - cos_theta * cos_theta))
    phi = 2.0 * tm.pi * u2
    local_point = vec3(sin_theta * ti.cos(phi), sin_theta * ti.sin(phi), cos_theta)

    surface_point = light.center + local_point * light.radius
    to_light = surface_point - point
    distance = tm.length(to_light)
    direction = to_light / distance

    area = 4.0 * tm.pi * light.radius * light.radius
    cos_light = tm.dot(-direction, local_point)
    pdf = (distance * distance) / (area * ti.max(cos_light, MIN_LIGHT_COSINE))
    return direction, pdf, cos_light


@ti.func
def sample_sphere_light(light: SphereLight, point: vec3, rng_state: ti.u32):
    """Draw a direction toward a sphere light from a random stream.

    Args:
        light: The light to sample.
        point: The shading point.
        rng_state: Current random stream state.

    Returns:
        A tuple (direction, pdf, radiance, rng_state). The radiance is the
        light's precomputed emitted radiance.
    """
    u1, rng = next_float(rng_state)
    u2, rng = next_float(rng)
    direction, pdf, _cos_light = sphere_light_direction(u1, u2, light, point)
    return direction, pdf, light.radiance, rng
