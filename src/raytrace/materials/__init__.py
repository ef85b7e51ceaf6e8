"""Materials module.

Components:
    microfacet: Material parameters and the Cook-Torrance style BRDF
        (GGX distribution, Smith height-correlated visibility, Schlick
        Fresnel) with an energy-compensated Lambertian diffuse term
"""

from .microfacet import (
    MIN_ROUGHNESS,
    Material,
    base_reflectance,
    clamp_roughness,
    d_ggx,
    evaluate_brdf,
    f_schlick,
    fd_lambert,
    roughness_to_alpha,
    shade,
    v_smith_ggx_correlated,
)

__all__ = [
    "MIN_ROUGHNESS",
    "Material",
    "clamp_roughness",
    "roughness_to_alpha",
    "d_ggx",
    "f_schlick",
    "v_smith_ggx_correlated",
    "fd_lambert",
    "base_reflectance",
    "evaluate_brdf",
    "shade",
]
