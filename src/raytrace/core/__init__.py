"""Core rendering module.

Components:
    ray: Ray data structure, vector helpers and orthonormal bases
    rng: Explicit per-worker random streams
    sampling: GGX and uniform hemisphere direction sampling with PDFs
    tonemap: Exposure and tone mapping operators
    settings: Render configuration
    integrator: Monte Carlo estimator and the RenderContext
    progressive: Multi-pass accumulation wrapper

All per-ray work runs inside Taichi kernels.
"""

from .ray import (
    Ray,
    build_orthonormal_basis,
    local_to_world,
    make_ray,
    normalize_safe,
    ray_at,
    reflect,
    vec3,
)
from .rng import hash_u32, next_float, next_u32, seed_stream
from .settings import RenderSettings, SamplingStrategy
from .tonemap import (
    TONE_MAP_IDS,
    ToneMapMethod,
    aces_filmic,
    exposure_from_ev100,
    khronos_pbr_neutral,
    reinhard_gamma,
    tone_map,
)

# Note: sampling, integrator and progressive are NOT imported here to avoid
# circular imports with the materials and scene packages. Import them directly,
# e.g. from raytrace.core.integrator import RenderContext

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "normalize_safe",
    "reflect",
    "build_orthonormal_basis",
    "local_to_world",
    "hash_u32",
    "seed_stream",
    "next_u32",
    "next_float",
    "RenderSettings",
    "SamplingStrategy",
    "TONE_MAP_IDS",
    "ToneMapMethod",
    "exposure_from_ev100",
    "reinhard_gamma",
    "aces_filmic",
    "khronos_pbr_neutral",
    "tone_map",
]
