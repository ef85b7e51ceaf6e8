"""Lights module.

Components:
    sphere_light: Sphere light emission (photometric or radiometric) and
        solid-angle sampling of its surface
"""

from .sphere_light import (
    Emission,
    LightInfo,
    PhotometricEmission,
    RadiometricEmission,
    SphereLight,
    compute_emitted_radiance,
    light_as_sphere,
    sample_sphere_light,
    sphere_light_direction,
)

__all__ = [
    "Emission",
    "LightInfo",
    "PhotometricEmission",
    "RadiometricEmission",
    "SphereLight",
    "compute_emitted_radiance",
    "light_as_sphere",
    "sample_sphere_light",
    "sphere_light_direction",
]
