"""GGX microfacet BRDF with a Lambertian diffuse lobe.

This module implements the single canonical reflectance model of the renderer:
a Cook-Torrance style specular lobe built from

    D  GGX (Trowbridge-Reitz) normal distribution
    V  height-correlated Smith visibility (includes the 1 / (4 NoV NoL) factor)
    F  Schlick Fresnel with f0 = mix(0.04, diffuse, metallic)

plus an energy-compensated Lambertian diffuse lobe that fades out for metals:

    Fr = D * V * F
    Fd = diffuse / pi * (1 - F) * (1 - metallic)
    BRDF = Fd + Fr

Roughness is the perceptual parameter stored on the material; the microfacet
width used by D, V and the GGX sampler is alpha = roughness^2.

All directions (light, view, normal) point away from the surface.

Example:
    >>> # Inside a Taichi kernel:
    >>> # brdf = evaluate_brdf(light_dir, view_dir, normal, material)
    >>> # radiance = shade(light_dir, view_dir, normal, material, incident)
"""

import taichi as ti
import taichi.math as tm

from raytrace.core.ray import normalize_safe

# Type alias for 3D vectors
vec3 = tm.vec3

# Lowest roughness a material may carry; D_GGX divides by alpha^2
MIN_ROUGHNESS = 1e-3

# Normal-incidence reflectance of common dielectrics
DIELECTRIC_F0 = 0.04

# Keeps NoV strictly positive at grazing view angles
NOV_EPSILON = 1e-5

# Added to the visibility denominator
BRDF_EPSILON = 1e-7

# Floor for the squared GGX bracket
DISTRIBUTION_EPSILON = 1e-30


@ti.dataclass
class Material:
    """Surface reflectance parameters.

    Attributes:
        diffuse: Base color / albedo (RGB, each component in [0, 1]).
        metallic: Metalness in [0, 1]. 0 = dielectric, 1 = metal (f0 = diffuse,
            no diffuse lobe).
        roughness: Perceptual roughness in [MIN_ROUGHNESS, 1].
    """

    diffuse: vec3
    metallic: ti.f32
    roughness: ti.f32


def clamp_roughness(roughness: float) -> float:
    """Clamp a roughness value to the supported range.

    Args:
        roughness: The requested roughness.

    Returns:
        The roughness clamped to [MIN_ROUGHNESS, 1].
    """
    return min(max(roughness, MIN_ROUGHNESS), 1.0)


# =============================================================================
# Microfacet Terms
# =============================================================================


@ti.func
def roughness_to_alpha(roughness: ti.f32) -> ti.f32:
    """Map perceptual roughness to the GGX width parameter alpha."""
    return roughness * roughness


@ti.func
def d_ggx(n_dot_h: ti.f32, alpha: ti.f32) -> ti.f32:
    """GGX (Trowbridge-Reitz) normal distribution function.

    D = alpha^2 / (pi * (NoH^2 * (alpha^2 - 1) + 1)^2)

    The bracket is evaluated as (1 - NoH^2) + alpha^2 * NoH^2. At the roughness
    floor alpha^2 - 1 rounds to -1 in f32, which would leave a zero bracket
    at NoH = 1.

    Args:
        n_dot_h: Cosine between the normal and the half vector, in [0, 1].
        alpha: GGX width (roughness squared).

    Returns:
        The microfacet density. Maximal at NoH = 1 and decreasing toward 0.
    """
    a2 = alpha * alpha
    n_dot_h2 = n_dot_h * n_dot_h
    f = (1.0 - n_dot_h2) + a2 * n_dot_h2
    return a2 / (tm.pi * ti.max(f * f, DISTRIBUTION_EPSILON))


@ti.func
def f_schlick(l_dot_h: ti.f32, f0: vec3) -> vec3:
    """Schlick's Fresnel approximation.

    F = f0 + (1 - f0) * (1 - LoH)^5

    Args:
        l_dot_h: Cosine between the light direction and the half vector.
            1 is normal incidence (F = f0), 0 is full grazing (F = 1).
        f0: Reflectance at normal incidence (RGB).

    Returns:
        The Fresnel reflectance (RGB).
    """
    return f0 + (vec3(1.0, 1.0, 1.0) - f0) * ((1.0 - l_dot_h) ** 5)


@ti.func
def v_smith_ggx_correlated(n_dot_v: ti.f32, n_dot_l: ti.f32, alpha: ti.f32) -> ti.f32:
    """Height-correlated Smith visibility term.

    This is G / (4 NoV NoL), so the specular lobe is D * V * F with no further
    division.

    Args:
        n_dot_v: Cosine between normal and view direction (> 0).
        n_dot_l: Cosine between normal and light direction, in [0, 1].
        alpha: GGX width (roughness squared).

    Returns:
        The visibility term.
    """
    a2 = alpha * alpha
    ggx_v = n_dot_l * ti.sqrt((-n_dot_v * a2 + n_dot_v) * n_dot_v + a2)
    ggx_l = n_dot_v * ti.sqrt((-n_dot_l * a2 + n_dot_l) * n_dot_l + a2)
    return 0.5 / (ggx_v + ggx_l + BRDF_EPSILON)


@ti.func
def fd_lambert() -> ti.f32:
    """Normalized Lambertian diffuse lobe (1 / pi)."""
    return 1.0 / tm.pi


@ti.func
def base_reflectance(material: Material) -> vec3:
    """Normal-incidence reflectance: 0.04 for dielectrics, albedo for metals."""
    return tm.mix(vec3(DIELECTRIC_F0), material.diffuse, material.metallic)


# =============================================================================
# BRDF Evaluation
# =============================================================================


@ti.func
def evaluate_brdf(light_dir: vec3, view_dir: vec3, normal: vec3, material: Material) -> vec3:
    """Evaluate the full BRDF (diffuse + specular) for a direction pair.

    Args:
        light_dir: Unit direction from the surface toward the light.
        view_dir: Unit direction from the surface toward the viewer.
        normal: Unit surface normal.
        material: The surface material.

    Returns:
        The BRDF value (RGB), without the NoL cosine.
    """
    half_vector = normalize_safe(light_dir + view_dir)

    n_dot_v = ti.abs(tm.dot(normal, view_dir)) + NOV_EPSILON
    n_dot_l = tm.clamp(tm.dot(normal, light_dir), 0.0, 1.0)
    n_dot_h = tm.clamp(tm.dot(normal, half_vector), 0.0, 1.0)
    l_dot_h = tm.clamp(tm.dot(light_dir, half_vector), 0.0, 1.0)

    alpha = roughness_to_alpha(material.roughness)
    f0 = base_reflectance(material)

    d = d_ggx(n_dot_h, alpha)
    f = f_schlick(l_dot_h, f0)
    v = v_smith_ggx_correlated(n_dot_v, n_dot_l, alpha)

    specular = (d * v) * f
    diffuse = (
        material.diffuse * fd_lambert() * (vec3(1.0, 1.0, 1.0) - f) * (1.0 - material.metallic)
    )
    return diffuse + specular


@ti.func
def shade(
    light_dir: vec3,
    view_dir: vec3,
    normal: vec3,
    material: Material,
    incident_radiance: vec3,
) -> vec3:
    """Reflected radiance for one incident direction: BRDF * Li * NoL.

    Args:
        light_dir: Unit direction from the surface toward the light.
        view_dir: Unit direction from the surface toward the viewer.
        normal: Unit surface normal.
        material: The surface material.
        incident_radiance: Radiance arriving along light_dir (RGB).

    Returns:
        The outgoing radiance contribution (RGB).
    """
    n_dot_l = tm.clamp(tm.dot(normal, light_dir), 0.0, 1.0)
    return evaluate_brdf(light_dir, view_dir, normal, material) * incident_radiance * n_dot_l
