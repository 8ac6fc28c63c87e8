"""Geometric primitives.

Components:
    sphere: Ray-sphere intersection (kernel function and Python wrapper)
"""

from .sphere import intersect_ray_sphere, intersect_ray_sphere_impl

__all__ = [
    "intersect_ray_sphere",
    "intersect_ray_sphere_impl",
]
