"""Geometry module.

Components:
    sphere: Sphere primitive, ray-sphere intersection and the tagged
        Intersection record (MISS, HIT_SURFACE, HIT_LIGHT)
"""

from .sphere import HIT_OFFSET, Intersection, IntersectionKind, Sphere, hit_sphere, make_miss

__all__ = [
    "HIT_OFFSET",
    "Intersection",
    "IntersectionKind",
    "Sphere",
    "hit_sphere",
    "make_miss",
]
