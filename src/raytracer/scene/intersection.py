"""Scene-level sphere storage and nearest-hit queries.

Spheres are stored in Taichi fields (Structure of Arrays) so every pixel of
the frame kernel can query them. ``closest_intersection_impl`` scans all
spheres and returns the nearest accepted hit.

Acceptance policy: a sphere counts only when *both* roots of its quadratic lie
inside ``[t_min, t_max]``; its candidate distance is then the smaller root.
This rejects a sphere whose far side is clipped by ``t_max`` (a shadow ray
ending inside a large sphere, for example) and a sphere enclosing the ray
origin. Infinite candidates (misses) are discarded and exact ties go to the
sphere added first.

Example:
    >>> from raytracer.runtime import init_taichi
    >>> init_taichi()
    >>> from raytracer.scene.intersection import closest_intersection
    >>> hit = closest_intersection(scene, Vec3.ZERO, Vec3(0, 0, 1), 1.0, math.inf)  # doctest: +SKIP
    >>> if hit is not None:
    ...     t, sphere = hit
"""

from typing import TYPE_CHECKING

import taichi as ti
import taichi.math as tm

from raytracer.core.color import color_to_vector, vec4
from raytracer.geometry.sphere import intersect_ray_sphere_impl
from raytracer.scene.model import encode_specularity

if TYPE_CHECKING:
    from raytracer.core.vector import Vec3
    from raytracer.scene.model import Scene, Sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Result of a nearest-hit query.

    Attributes:
        hit: 1 if a sphere was accepted, 0 otherwise.
        t: Ray parameter of the hit. ``inf`` on a miss.
        sphere_index: Index of the hit sphere in the sphere fields, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f64
    sphere_index: ti.i32


# Maximum number of spheres supported in the scene
MAX_SPHERES = 256

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
sphere_colors = ti.Vector.field(4, dtype=ti.f64, shape=MAX_SPHERES)
# 1 for Specular spheres, 0 for Matte; the exponent is only read when set
sphere_has_specular = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
sphere_specular = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
sphere_reflectiveness = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Result slot for the Python-callable query
_query_result = SceneHitRecord.field(shape=())


def clear_spheres() -> None:
    """Remove all spheres.

    Resets the sphere count; the field data is overwritten by later adds.
    """
    num_spheres[None] = 0


def add_sphere(sphere: "Sphere") -> int:
    """Append a sphere to the sphere fields.

    Args:
        sphere: The sphere to upload.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = list(sphere.center.to_tuple())
    sphere_radii[idx] = float(sphere.radius)
    sphere_colors[idx] = color_to_vector(sphere.color)
    sphere_has_specular[idx], sphere_specular[idx] = encode_specularity(sphere.specularity)
    sphere_reflectiveness[idx] = float(sphere.reflectiveness)
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres currently uploaded."""
    return int(num_spheres[None])


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(hit=0, t=tm.inf, sphere_index=-1)


@ti.func
def closest_intersection_impl(
    origin: vec3,
    direction: vec3,
    t_min: ti.f64,
    t_max: ti.f64,
) -> SceneHitRecord:
    """Find the nearest accepted sphere along a ray.

    Args:
        origin: Ray origin.
        direction: Ray direction.
        t_min: Smallest accepted ray parameter.
        t_max: Largest accepted ray parameter.

    Returns:
        The nearest hit, or a miss record when no sphere qualifies.
    """
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        t1, t2 = intersect_ray_sphere_impl(origin, direction, sphere_centers[i], sphere_radii[i])
        # NaN roots fail every comparison and are never accepted
        in_range = t_min <= t1 and t1 <= t_max and t_min <= t2 and t2 <= t_max
        if in_range:
            t = ti.min(t1, t2)
            # Strict comparison: infinite candidates and later ties lose
            if t < result.t:
                result.hit = 1
                result.t = t
                result.sphere_index = i

    return result


@ti.func
def get_sphere_color(index: ti.i32) -> vec4:
    """Base colour of the sphere at ``index``."""
    return sphere_colors[index]


@ti.kernel
def _closest_intersection_single(
    ox: ti.f64,
    oy: ti.f64,
    oz: ti.f64,
    dx: ti.f64,
    dy: ti.f64,
    dz: ti.f64,
    t_min: ti.f64,
    t_max: ti.f64,
):
    # One-iteration outer loop keeps the sphere scan serial
    for _ in range(1):
        _query_result[None] = closest_intersection_impl(
            vec3(ox, oy, oz), vec3(dx, dy, dz), t_min, t_max
        )


def closest_intersection(
    scene: "Scene",
    origin: "Vec3",
    direction: "Vec3",
    t_min: float,
    t_max: float,
) -> "tuple[float, Sphere] | None":
    """Python-callable nearest-hit query.

    Uploads ``scene`` if it is not the scene currently loaded, then runs
    ``closest_intersection_impl`` for one ray.

    Args:
        scene: The scene to query.
        origin: Ray origin.
        direction: Ray direction.
        t_min: Smallest accepted ray parameter.
        t_max: Largest accepted ray parameter.

    Returns:
        ``(t, sphere)`` for the nearest accepted sphere, or None.
    """
    # Import here to avoid circular imports (storage uploads into this module)
    from raytracer.scene.storage import ensure_scene_loaded

    ensure_scene_loaded(scene)
    _closest_intersection_single(
        origin.x,
        origin.y,
        origin.z,
        direction.x,
        direction.y,
        direction.z,
        float(t_min),
        float(t_max),
    )
    record = _query_result[None]
    if record.hit == 0:
        return None
    return float(record.t), scene.spheres[int(record.sphere_index)]
