"""Tone mapping operators from linear radiance to display range.

Three interchangeable operators map unbounded non-negative radiance to
[0, 1] per channel:

    reinhard  c / (c + 1), then gamma 1/2.2
    aces      Narkowicz's fit of the ACES filmic curve
    khronos   Khronos PBR Neutral: exact below a compression knee, highlights
              compressed toward white with partial desaturation

Exposure is a scalar multiply applied before any operator. It is derived from
the camera's EV100 as 1 / 2^(ev100 * 1.2).

Operators are Taichi functions; tone_map() dispatches on the integer ids in
TONE_MAP_IDS so the choice can live in a field and change without recompiling.
"""

from typing import Literal

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

# Type alias for tone mapping options
ToneMapMethod = Literal["reinhard", "aces", "khronos"]

# Kernel-side ids of the operators
TONE_MAP_IDS: dict[str, int] = {"reinhard": 0, "aces": 1, "khronos": 2}

DISPLAY_GAMMA = 2.2

# ACES filmic fit coefficients
ACES_A = 2.51
ACES_B = 0.03
ACES_C = 2.43
ACES_D = 0.59
ACES_E = 0.14

# Khronos PBR Neutral parameters
KHRONOS_START_COMPRESSION = 0.8 - 0.04
KHRONOS_DESATURATION = 0.15


def exposure_from_ev100(ev100: float) -> float:
    """Convert an EV100 camera setting to a linear exposure multiplier.

    Args:
        ev100: Exposure value at ISO 100. 0 gives an exposure of 1.

    Returns:
        The scalar 1 / 2^(ev100 * 1.2).
    """
    return 1.0 / (2.0 ** (ev100 * 1.2))


def tone_map_id(method: str) -> int:
    """Look up the kernel-side id of a tone mapping method.

    Raises:
        ValueError: If the method is unknown.
    """
    if method not in TONE_MAP_IDS:
        raise ValueError(f"Unknown tone mapping method: {method}")
    return TONE_MAP_IDS[method]


@ti.func
def reinhard_gamma(color: vec3) -> vec3:
    """Reinhard operator followed by gamma encoding.

    Args:
        color: Non-negative linear radiance (RGB).

    Returns:
        Display color in [0, 1]^3.
    """
    mapped = color / (color + 1.0)
    return tm.clamp(mapped ** (1.0 / DISPLAY_GAMMA), 0.0, 1.0)


@ti.func
def aces_filmic(color: vec3) -> vec3:
    """ACES filmic curve, (x (a x + b)) / (x (c x + d) + e) per channel.

    Args:
        color: Non-negative linear radiance (RGB).

    Returns:
        Display color in [0, 1]^3.
    """
    x = color
    mapped = (x * (ACES_A * x + ACES_B)) / (x * (ACES_C * x + ACES_D) + ACES_E)
    return tm.clamp(mapped, 0.0, 1.0)


@ti.func
def khronos_pbr_neutral(color: vec3) -> vec3:
    """Khronos PBR Neutral tone mapper.

    A small offset is removed from all channels (quadratic near black to
    avoid banding). If the brightest channel stays under the compression knee
    the color passes through; otherwise the peak is compressed toward 1 and
    the color is blended toward white by g = 1 - 1 / (desat * (peak - new_peak) + 1).

    Args:
        color: Non-negative linear radiance (RGB).

    Returns:
        Display color in [0, 1]^3.
    """
    x = ti.min(color.x, ti.min(color.y, color.z))
    offset = 0.04
    if x < 0.08:
        offset = x - 6.25 * x * x
    result = color - offset

    peak = ti.max(result.x, ti.max(result.y, result.z))
    if peak >= KHRONOS_START_COMPRESSION:
        d = 1.0 - KHRONOS_START_COMPRESSION
        new_peak = 1.0 - d * d / (peak + d - KHRONOS_START_COMPRESSION)
        scaled = result * (new_peak / peak)
        g = 1.0 - 1.0 / (KHRONOS_DESATURATION * (peak - new_peak) + 1.0)
        result = tm.mix(scaled, vec3(new_peak), g)

    return tm.clamp(result, 0.0, 1.0)


@ti.func
def tone_map(color: vec3, method: ti.i32) -> vec3:
    """Apply the tone mapping operator selected by its TONE_MAP_IDS id.

    Args:
        color: Non-negative, exposed linear radiance (RGB).
        method: Operator id.

    Returns:
        Display color in [0, 1]^3.
    """
    result = vec3(0.0, 0.0, 0.0)
    if method == TONE_MAP_IDS["aces"]:
        result = aces_filmic(color)
    elif method == TONE_MAP_IDS["khronos"]:
        result = khronos_pbr_neutral(color)
    else:
        result = reinhard_gamma(color)
    return result
