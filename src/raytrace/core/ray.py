"""Ray data structure and vector utilities for the light-transport core.

This module provides the fundamental Ray dataclass and the small set of vector
helpers shared by intersection, BRDF evaluation and sampling. All operations are
Taichi functions so they can be called from inside render kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Shortest vector that normalize_safe() will rescale
NORMALIZE_EPSILON = 1e-12


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Producers are
            expected to normalize it; intersection does not rely on it.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def normalize_safe(v: vec3) -> vec3:
    """Normalize a vector, returning zero for a zero-length input.

    tm.normalize divides by the length unconditionally, which turns the
    degenerate half-vector of opposite light/view directions into NaN.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the direction of v, or the zero vector.
    """
    result = vec3(0.0, 0.0, 0.0)
    len_sq = tm.dot(v, v)
    if len_sq > NORMALIZE_EPSILON:
        result = v / ti.sqrt(len_sq)
    return result


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The reflection axis (should be normalized).

    Returns:
        The reflected direction vector. For unit inputs the result is unit
        length and dot(result, normal) == -dot(incident, normal).
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


# =============================================================================
# Orthonormal Basis
# =============================================================================


@ti.func
def build_orthonormal_basis(normal: vec3):
    """Build a tangent frame around a unit normal.

    The helper axis is world Y when the normal leans toward X (|n.x| > 0.9)
    and world X otherwise. The helper is Gram-Schmidt orthogonalized against
    the normal to give the tangent; the bitangent is cross(normal, tangent).
    The result is deterministic for a given normal, and
    cross(tangent, bitangent) == normal.

    Args:
        normal: The surface normal (must be unit length).

    Returns:
        A tuple (tangent, bitangent).
    """
    helper = vec3(1.0, 0.0, 0.0)
    if ti.abs(normal.x) > 0.9:
        helper = vec3(0.0, 1.0, 0.0)
    tangent = tm.normalize(helper - tm.dot(helper, normal) * normal)
    bitangent = tm.cross(normal, tangent)
    return tangent, bitangent


@ti.func
def local_to_world(local_dir: vec3, tangent: vec3, bitangent: vec3, normal: vec3) -> vec3:
    """Transform a direction from the local (z-up) frame to world space.

    Args:
        local_dir: Direction in local coordinates (z along the normal).
        tangent: The x-axis of the local frame in world coordinates.
        bitangent: The y-axis of the local frame in world coordinates.
        normal: The z-axis of the local frame in world coordinates.

    Returns:
        The direction in world coordinates.
    """
    return local_dir.x * tangent + local_dir.y * bitangent + local_dir.z * normal
