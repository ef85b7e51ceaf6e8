"""Sphere primitive, intersection records and ray-sphere intersection.

This module provides the Sphere dataclass, the tagged Intersection record
returned by every ray query, and the ray-sphere test. Roots of the quadratic
are computed with the robust formula from Ray Tracing Gems to avoid
catastrophic cancellation when b^2 is close to 4ac.

An Intersection carries an IntersectionKind tag and a payload; only the fields
of the active variant are meaningful:

    MISS         nothing was hit
    HIT_SURFACE  point, normal, material and the incident ray are valid
    HIT_LIGHT    point, normal and radiance (the light's emitted radiance)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytrace.geometry.sphere import Sphere, hit_sphere
    >>> # Inside a Taichi kernel:
    >>> # record = hit_sphere(ray, sphere)
    >>> # if record.kind == int(IntersectionKind.HIT_SURFACE): ...
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from raytrace.core.ray import Ray, ray_at
from raytrace.materials.microfacet import Material

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Distance the reported hit point is pushed along the normal
HIT_OFFSET = 1e-4


class IntersectionKind(IntEnum):
    """Tag selecting the active variant of an Intersection."""

    MISS = 0
    HIT_SURFACE = 1
    HIT_LIGHT = 2


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and surface material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        material: The surface material.
    """

    center: vec3
    radius: ti.f32
    material: Material


@ti.dataclass
class Intersection:
    """Result of a ray query against a sphere or a whole scene.

    Attributes:
        kind: IntersectionKind value of the active variant.
        point: Hit point, offset by HIT_OFFSET along the normal so a ray cast
            from it does not re-hit the same surface.
        normal: Unit outward normal (away from the sphere center).
        material: Material of the hit surface (HIT_SURFACE only).
        ray: The incident ray that produced the hit.
        radiance: Emitted radiance of the hit light (HIT_LIGHT only).
    """

    kind: ti.i32
    point: vec3
    normal: vec3
    material: Material
    ray: Ray
    radiance: vec3


@ti.func
def make_miss(ray: Ray) -> Intersection:
    """Create an Intersection of the MISS variant."""
    return Intersection(
        kind=int(IntersectionKind.MISS),
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material=Material(diffuse=vec3(0.0, 0.0, 0.0), metallic=0.0, roughness=1.0),
        ray=ray,
        radiance=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def _solve_quadratic_robust(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve a*t^2 + 2*h*t + c = 0 using a numerically stable method.

    Args:
        h: Half of the linear coefficient.
        a: Quadratic coefficient.
        c: Constant term.
        sqrt_d: Square root of the discriminant (h^2 - a*c).

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant)) avoids cancellation
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0

    if ti.abs(q) < 1e-10:
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere) -> Intersection:
    """Intersect a ray with a sphere.

    Solves |origin + t * direction - center|^2 = radius^2. A discriminant
    <= 0 (including the tangent case) is a miss, as is a sphere lying entirely
    behind the origin (both roots <= 0). Otherwise the smallest positive root
    is used; a ray starting inside the sphere hits the far side.

    Args:
        ray: The ray to test.
        sphere: The sphere to test against.

    Returns:
        An Intersection of the HIT_SURFACE variant carrying the sphere's
        material, or a MISS.
    """
    oc = ray.origin - sphere.center

    # Half-b form: a*t^2 + 2*h*t + c = 0
    a = tm.dot(ray.direction, ray.direction)
    h = tm.dot(ray.direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    result = make_miss(ray)

    if discriminant > 0.0:
        t0, t1 = _solve_quadratic_robust(h, a, c, ti.sqrt(discriminant))
        if t1 > 0.0:
            t = t0
            if t0 <= 0.0:
                t = t1
            surface_point = ray_at(ray, t)
            normal = tm.normalize(surface_point - sphere.center)
            result = Intersection(
                kind=int(IntersectionKind.HIT_SURFACE),
                point=surface_point + normal * HIT_OFFSET,
                normal=normal,
                material=sphere.material,
                ray=ray,
                radiance=vec3(0.0, 0.0, 0.0),
            )

    return result
