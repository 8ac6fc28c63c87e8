"""Kernel-side ray and vector utilities.

Thin Taichi functions over ``taichi.math`` used by the intersection, shading
and tracing kernels. All of them are inlined into the calling kernel.

Example:
    >>> import taichi as ti
    >>> from raytracer.runtime import init_taichi
    >>> init_taichi()
    >>> from raytracer.core.ray import ray_at, reflect, vec3
    >>> @ti.kernel
    ... def probe() -> ti.f64:
    ...     return ray_at(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, 1.0), 2.0).z
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.func
def ray_at(origin: vec3, direction: vec3, t: ti.f64) -> vec3:
    """Compute the point ``origin + t * direction``.

    The direction is not normalised; ``t`` is measured in multiples of it.
    """
    return origin + t * direction


@ti.func
def reflect(v: vec3, normal: vec3) -> vec3:
    """Reflect ``v`` about ``normal``.

    Computes ``2 * normal * (normal . v) - v``. Unlike the usual "incident"
    convention, ``v`` points away from the surface (toward a light or the
    viewer) and so does the result.

    Args:
        v: The vector to reflect.
        normal: The surface normal (should be unit length).

    Returns:
        The mirrored vector.
    """
    return 2.0 * normal * tm.dot(normal, v) - v


@ti.func
def cosine_between(a: vec3, b: vec3) -> ti.f64:
    """Cosine of the angle between two (not necessarily unit) vectors.

    NaN when either vector has zero length.
    """
    return tm.dot(a, b) / (tm.length(a) * tm.length(b))
