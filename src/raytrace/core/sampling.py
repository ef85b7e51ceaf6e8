"""Direction sampling and probability densities for the integrator.

Two schemes draw candidate light directions around a shading point:

    GGX importance sampling: a half vector is drawn from the GGX distribution
        of the material and the view direction is reflected about it. The PDF
        of the resulting light direction is D(NoH) * NoH / (4 * VoH).
    Uniform hemisphere sampling: directions drawn uniformly over the
        hemisphere around the normal with constant PDF 1 / (2 pi).

Samples below the horizon or with a non-positive PDF are reported as invalid;
the caller counts them as zero contribution and never redraws, which keeps the
estimator unbiased.

The deterministic mappings (ggx_direction, uniform_hemisphere_direction) take
the uniform variates explicitly; the sample_* wrappers draw them from a stream.
"""

import taichi as ti
import taichi.math as tm

from raytrace.core.ray import build_orthonormal_basis, local_to_world, reflect
from raytrace.core.rng import next_float
from raytrace.materials.microfacet import (
    Material,
    d_ggx,
    evaluate_brdf,
    roughness_to_alpha,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# Added to the half-vector Jacobian denominator
JACOBIAN_EPSILON = 1e-6

# Floor applied to PDFs before they divide a sample
PDF_EPSILON = 1e-6

# Constant density of uniform hemisphere sampling
UNIFORM_HEMISPHERE_PDF = 1.0 / (2.0 * tm.pi)


# =============================================================================
# GGX Importance Sampling
# =============================================================================


@ti.func
def ggx_half_vector(u1: ti.f32, u2: ti.f32, normal: vec3, alpha: ti.f32) -> vec3:
    """Map two uniform variates to a GGX-distributed half vector.

    cos(theta) = sqrt((1 - u1) / (1 + (alpha^2 - 1) * u1)),  phi = 2 pi u2

    Args:
        u1: Uniform variate in [0, 1) controlling the polar angle.
        u2: Uniform variate in [0, 1) controlling the azimuth.
        normal: Unit surface normal (z-axis of the local frame).
        alpha: GGX width (roughness squared).

    Returns:
        The unit half vector in world space.
    """
    a2 = alpha * alpha
    cos_theta = ti.sqrt((1.0 - u1) / (1.0 + (a2 - 1.0) * u1))
    sin_theta = ti.sqrt(ti.max(0.0, 1.0 - cos_theta * cos_theta))
    phi = 2.0 * tm.pi * u2

    local_half = vec3(sin_theta * ti.cos(phi), sin_theta * ti.sin(phi), cos_theta)
    tangent, bitangent = build_orthonormal_basis(normal)
    return tm.normalize(local_to_world(local_half, tangent, bitangent, normal))


@ti.func
def ggx_pdf(n_dot_h: ti.f32, v_dot_h: ti.f32, alpha: ti.f32) -> ti.f32:
    """Solid-angle PDF of a light direction produced by ggx_direction.

    The half-vector density D * NoH is converted to the reflected direction
    through the Jacobian 1 / (4 VoH).

    Args:
        n_dot_h: Cosine between normal and half vector, in [0, 1].
        v_dot_h: Cosine between view direction and half vector, in [0, 1].
        alpha: GGX width (roughness squared).

    Returns:
        The density with respect to solid angle.
    """
    return d_ggx(n_dot_h, alpha) * n_dot_h / (4.0 * v_dot_h + JACOBIAN_EPSILON)


@ti.func
def ggx_direction(u1: ti.f32, u2: ti.f32, view_dir: vec3, normal: vec3, roughness: ti.f32):
    """Importance-sample a light direction from the GGX lobe.

    Args:
        u1: First uniform variate in [0, 1).
        u2: Second uniform variate in [0, 1).
        view_dir: Unit direction from the surface toward the viewer.
        normal: Unit surface normal.
        roughness: Perceptual roughness of the material.

    Returns:
        A tuple (direction, pdf, valid) where valid is 0 when the reflected
        direction falls below the horizon or the PDF is not positive.
    """
    alpha = roughness_to_alpha(roughness)
    half_vector = ggx_half_vector(u1, u2, normal, alpha)
    direction = reflect(-view_dir, half_vector)

    n_dot_h = ti.max(0.0, tm.dot(normal, half_vector))
    v_dot_h = ti.max(0.0, tm.dot(view_dir, half_vector))
    pdf = ggx_pdf(n_dot_h, v_dot_h, alpha)

    valid = 0
    if tm.dot(normal, direction) > 0.0 and pdf > 0.0:
        valid = 1
    return direction, pdf, valid


@ti.func
def sample_ggx(view_dir: vec3, normal: vec3, roughness: ti.f32, rng_state: ti.u32):
    """Draw a GGX importance-sampled light direction from a random stream.

    Args:
        view_dir: Unit direction from the surface toward the viewer.
        normal: Unit surface normal.
        roughness: Perceptual roughness of the material.
        rng_state: Current random stream state.

    Returns:
        A tuple (direction, pdf, valid, rng_state).
    """
    u1, rng = next_float(rng_state)
    u2, rng = next_float(rng)
    direction, pdf, valid = ggx_direction(u1, u2, view_dir, normal, roughness)
    return direction, pdf, valid, rng


@ti.func
def ggx_sample_weight(view_dir: vec3, normal: vec3, material: Material, rng_state: ti.u32):
    """Single-direction GGX estimator weight BRDF * NoL / pdf.

    Multiplying the weight by the radiance arriving along the sampled
    direction gives an unbiased one-sample estimate of reflected radiance.

    Args:
        view_dir: Unit direction from the surface toward the viewer.
        normal: Unit surface normal.
        material: The surface material.
        rng_state: Current random stream state.

    Returns:
        A tuple (weight, direction, rng_state). The weight is zero for an
        invalid sample.
    """
    direction, pdf, valid, rng = sample_ggx(view_dir, normal, material.roughness, rng_state)
    weight = vec3(0.0, 0.0, 0.0)
    if valid == 1:
        n_dot_l = tm.clamp(tm.dot(normal, direction), 0.0, 1.0)
        brdf = evaluate_brdf(direction, view_dir, normal, material)
        weight = brdf * n_dot_l / ti.max(pdf, PDF_EPSILON)
    return weight, direction, rng


# =============================================================================
# Uniform Hemisphere Sampling
# =============================================================================


@ti.func
def uniform_hemisphere_direction(u: ti.f32, v: ti.f32, normal: vec3) -> vec3:
    """Map two uniform variates to a uniformly distributed hemisphere direction.

    cos(theta) = v, phi = 2 pi u. The density is UNIFORM_HEMISPHERE_PDF.

    Args:
        u: Uniform variate in [0, 1) controlling the azimuth.
        v: Uniform variate in [0, 1) giving cos(theta).
        normal: Unit surface normal defining the hemisphere.

    Returns:
        A unit direction with dot(direction, normal) >= 0.
    """
    phi = 2.0 * tm.pi * u
    cos_theta = v
    sin_theta = ti.sqrt(ti.max(0.0, 1.0 - cos_theta * cos_theta))
    local_dir = vec3(ti.cos(phi) * sin_theta, ti.sin(phi) * sin_theta, cos_theta)
    tangent, bitangent = build_orthonormal_basis(normal)
    return tm.normalize(local_to_world(local_dir, tangent, bitangent, normal))


@ti.func
def sample_uniform_hemisphere(normal: vec3, rng_state: ti.u32):
    """Draw a uniform hemisphere direction from a random stream.

    Args:
        normal: Unit surface normal defining the hemisphere.
        rng_state: Current random stream state.

    Returns:
        A tuple (direction, pdf, valid, rng_state).
    """
    u, rng = next_float(rng_state)
    v, rng = next_float(rng)
    direction = uniform_hemisphere_direction(u, v, normal)
    valid = 0
    if tm.dot(normal, direction) > 0.0:
        valid = 1
    return direction, UNIFORM_HEMISPHERE_PDF, valid, rng
