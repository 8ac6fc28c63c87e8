"""Ray-sphere intersection.

The ray ``origin + t * direction`` meets a sphere where

    |origin + t * direction - center|^2 = radius^2

which expands to the quadratic ``a*t^2 + b*t + c = 0`` with:
    a = dot(direction, direction)
    b = 2 * dot(origin - center, direction)
    c = dot(origin - center, origin - center) - radius^2

Both roots are returned unordered; a negative discriminant (the ray misses)
yields the ``(+inf, +inf)`` sentinel pair rather than a flag. Range checks are
left to the scene-level query in ``raytracer.scene.intersection``.

Example:
    >>> from raytracer.runtime import init_taichi
    >>> init_taichi()
    >>> from raytracer.geometry.sphere import intersect_ray_sphere
    >>> intersect_ray_sphere(Vec3(0, 0, 0), Vec3(0, 0, 1), sphere)  # doctest: +SKIP
    (5.0, 3.0)
"""

from typing import TYPE_CHECKING

import taichi as ti
import taichi.math as tm

if TYPE_CHECKING:
    from raytracer.core.vector import Vec3
    from raytracer.scene.model import Sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.func
def intersect_ray_sphere_impl(origin: vec3, direction: vec3, center: vec3, radius: ti.f64):
    """Solve the ray-sphere quadratic.

    Args:
        origin: Ray origin.
        direction: Ray direction (not necessarily normalised).
        center: Sphere center.
        radius: Sphere radius.

    Returns:
        Tuple ``(t1, t2)`` with ``t1 = (-b + sqrt(d)) / 2a`` and
        ``t2 = (-b - sqrt(d)) / 2a``, or ``(inf, inf)`` on a miss.
    """
    co = origin - center

    a = tm.dot(direction, direction)
    b = 2.0 * tm.dot(co, direction)
    c = tm.dot(co, co) - radius * radius

    discriminant = b * b - 4.0 * a * c

    t1 = tm.inf
    t2 = tm.inf
    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t1 = (-b + sqrt_d) / (2.0 * a)
        t2 = (-b - sqrt_d) / (2.0 * a)

    return t1, t2


@ti.kernel
def _intersect_single(
    ox: ti.f64,
    oy: ti.f64,
    oz: ti.f64,
    dx: ti.f64,
    dy: ti.f64,
    dz: ti.f64,
    cx: ti.f64,
    cy: ti.f64,
    cz: ti.f64,
    radius: ti.f64,
) -> tm.vec2:
    t1, t2 = intersect_ray_sphere_impl(vec3(ox, oy, oz), vec3(dx, dy, dz), vec3(cx, cy, cz), radius)
    return tm.vec2(t1, t2)


def intersect_ray_sphere(origin: "Vec3", direction: "Vec3", sphere: "Sphere") -> tuple[float, float]:
    """Python-callable ray-sphere intersection.

    Runs ``intersect_ray_sphere_impl`` in a one-off kernel. Requires Taichi
    to be initialised.

    Args:
        origin: Ray origin.
        direction: Ray direction.
        sphere: The sphere to test.

    Returns:
        The two (unordered) roots, ``(inf, inf)`` when the ray misses.
    """
    center = sphere.center
    roots = _intersect_single(
        origin.x,
        origin.y,
        origin.z,
        direction.x,
        direction.y,
        direction.z,
        center.x,
        center.y,
        center.z,
        float(sphere.radius),
    )
    return float(roots[0]), float(roots[1])
