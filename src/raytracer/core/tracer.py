"""Recursive ray tracing with reflections.

``trace_ray_impl`` returns the colour seen along a ray:

- miss: the scene background colour;
- hit: the sphere colour scaled by ``compute_lighting_impl`` at the hit point
  (the local colour). If the sphere is reflective and the depth budget is not
  spent, the mirrored ray is traced from the hit point and blended in as

      local * (1 - r) + reflected * r

  with ``r`` the sphere reflectiveness and saturating ``Color`` arithmetic.

Taichi functions cannot call themselves, so the reflection chain is walked
forward first (at most ``MAX_REFLECTION_DEPTH + 1`` levels, unrolled at compile
time) recording each level's local colour and reflectiveness, then folded back
from the deepest level. The fold applies the blend in the same nesting order as
the recursive definition, so rounding matches it exactly.

Example:
    >>> from raytracer.runtime import init_taichi
    >>> init_taichi()
    >>> from raytracer.core.tracer import trace_ray
    >>> trace_ray(scene, Vec3.ZERO, Vec3(0, 0, 1), 1.0, math.inf, 3)  # doctest: +SKIP
    Color(r=178, g=13, b=48, a=255)
"""

from typing import TYPE_CHECKING

import taichi as ti
import taichi.math as tm

from raytracer.core.color import Color, color_add, color_scale, vec4
from raytracer.core.lighting import compute_lighting_impl
from raytracer.core.ray import ray_at, reflect
from raytracer.core.vector import Vec3
from raytracer.scene.intersection import (
    closest_intersection_impl,
    get_sphere_color,
    sphere_centers,
    sphere_has_specular,
    sphere_reflectiveness,
    sphere_specular,
)
from raytracer.scene.storage import (
    ensure_scene_loaded,
    get_background_color,
    get_camera_dist,
    get_canvas_size,
    get_viewport_size,
)

if TYPE_CHECKING:
    from raytracer.scene.model import Scene

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Primary rays ignore everything between the camera and the projection plane
PRIMARY_T_MIN = 1.0

# Reflected rays start slightly off the surface they leave
REFLECTION_T_MIN = 0.001

DEFAULT_REFLECTION_DEPTH = 3

# Compile-time bound on the reflection chain
MAX_REFLECTION_DEPTH = 5

_trace_result = ti.Vector.field(4, dtype=ti.f64, shape=())


def canvas_to_viewport(scene: "Scene", x: float, y: float) -> Vec3:
    """Map a centred canvas coordinate to a point on the projection plane.

    Args:
        scene: Provides the canvas, viewport and camera distance.
        x: Canvas x, 0 at the centre, growing right.
        y: Canvas y, 0 at the centre, growing up.

    Returns:
        ``(x * vw / cw, y * vh / ch, camera_dist)``.
    """
    return Vec3(
        x * scene.viewport.w / scene.canvas.w,
        y * scene.viewport.h / scene.canvas.h,
        scene.camera_dist,
    )


@ti.func
def canvas_to_viewport_impl(x: ti.f64, y: ti.f64) -> vec3:
    """Kernel counterpart of ``canvas_to_viewport`` for the loaded scene."""
    canvas = get_canvas_size()
    viewport = get_viewport_size()
    return vec3(x * viewport[0] / canvas[0], y * viewport[1] / canvas[1], get_camera_dist())


@ti.func
def trace_ray_impl(
    origin: vec3,
    direction: vec3,
    t_min: ti.f64,
    t_max: ti.f64,
    depth: ti.i32,
) -> vec4:
    """Colour seen along a ray, following up to ``depth`` reflections.

    Args:
        origin: Ray origin.
        direction: Ray direction (not necessarily normalised).
        t_min: Smallest accepted ray parameter for the first segment.
        t_max: Largest accepted ray parameter for the first segment.
        depth: Remaining reflection budget, clamped to ``MAX_REFLECTION_DEPTH``.

    Returns:
        RGBA colour with integral channel values in [0, 255].
    """
    local_colors = ti.Matrix.zero(ti.f64, MAX_REFLECTION_DEPTH + 1, 4)
    weights = ti.Vector.zero(ti.f64, MAX_REFLECTION_DEPTH + 1)
    levels = 0

    ray_origin = origin
    ray_dir = direction
    seg_t_min = t_min
    seg_t_max = t_max
    remaining = ti.min(depth, MAX_REFLECTION_DEPTH)
    active = 1

    # Forward walk: record local colour and reflectiveness per level
    for k in ti.static(range(MAX_REFLECTION_DEPTH + 1)):
        if active == 1:
            color = get_background_color()
            weight = 0.0
            record = closest_intersection_impl(ray_origin, ray_dir, seg_t_min, seg_t_max)
            if record.hit == 0:
                active = 0
            else:
                i = record.sphere_index
                point = ray_at(ray_origin, ray_dir, record.t)
                normal = tm.normalize(point - sphere_centers[i])
                view = -ray_dir
                intensity = compute_lighting_impl(
                    point, normal, view, sphere_has_specular[i], sphere_specular[i]
                )
                color = color_scale(get_sphere_color(i), intensity)

                reflectiveness = sphere_reflectiveness[i]
                if remaining <= 0 or reflectiveness <= 0.0:
                    active = 0
                else:
                    weight = reflectiveness
                    ray_origin = point
                    ray_dir = reflect(view, normal)
                    seg_t_min = REFLECTION_T_MIN
                    seg_t_max = tm.inf
                    remaining -= 1

            for c in ti.static(range(4)):
                local_colors[k, c] = color[c]
            weights[k] = weight
            levels += 1

    # Backward fold: the deepest level is returned as is
    result = vec4(0.0, 0.0, 0.0, 0.0)
    for k in ti.static(range(MAX_REFLECTION_DEPTH, -1, -1)):
        if k < levels:
            local = vec4(local_colors[k, 0], local_colors[k, 1], local_colors[k, 2], local_colors[k, 3])
            if k == levels - 1:
                result = local
            else:
                w = weights[k]
                result = color_add(color_scale(local, 1.0 - w), color_scale(result, w))

    return result


@ti.kernel
def _trace_single_ray(
    ox: ti.f64,
    oy: ti.f64,
    oz: ti.f64,
    dx: ti.f64,
    dy: ti.f64,
    dz: ti.f64,
    t_min: ti.f64,
    t_max: ti.f64,
    depth: ti.i32,
):
    # One-iteration outer loop keeps the sphere and light scans serial
    for _ in range(1):
        _trace_result[None] = trace_ray_impl(vec3(ox, oy, oz), vec3(dx, dy, dz), t_min, t_max, depth)


def trace_ray(
    scene: "Scene",
    origin: Vec3,
    direction: Vec3,
    t_min: float,
    t_max: float,
    depth: int,
) -> Color:
    """Python-callable ray trace.

    Args:
        scene: The scene to trace against.
        origin: Ray origin.
        direction: Ray direction.
        t_min: Smallest accepted ray parameter.
        t_max: Largest accepted ray parameter.
        depth: Number of reflection bounces allowed.

    Returns:
        The colour seen along the ray.

    Raises:
        ValueError: If ``depth`` is outside ``[0, MAX_REFLECTION_DEPTH]``.
    """
    if not 0 <= depth <= MAX_REFLECTION_DEPTH:
        raise ValueError(f"depth must be in [0, {MAX_REFLECTION_DEPTH}], got {depth}")

    ensure_scene_loaded(scene)
    _trace_single_ray(
        origin.x,
        origin.y,
        origin.z,
        direction.x,
        direction.y,
        direction.z,
        float(t_min),
        float(t_max),
        depth,
    )
    rgba = _trace_result[None]
    return Color(*(int(rgba[c]) for c in range(4)))
