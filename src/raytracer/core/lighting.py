"""Light storage and the diffuse + specular shading model.

Lights are stored in Taichi fields tagged with a ``LightKind``. For each light
``compute_lighting_impl`` adds:

- Ambient: its intensity, unconditionally.
- Point / directional: nothing if a shadow ray toward the light hits a sphere,
  otherwise a Lambertian diffuse term

      max(0, n . l) / (|n| |l|)

  which is not scaled by the light intensity, plus, for specular spheres, a
  Phong term

      intensity * (r . v / (|r| |v|)) ^ exponent   when r . v > 0

  where ``r = 2 n (n . l) - l`` is the light direction mirrored about the
  normal and ``v`` points from the surface to the camera.

Point lights sit at parameter 1 along ``l = position - point``, so their
shadow rays stop at ``t_max = 1``; directional shadow rays are unbounded. Shadow
rays start at ``SHADOW_EPSILON`` to skip the surface being shaded. A light
coincident with the shaded point (zero-length ``l``) contributes nothing.

Example:
    >>> from raytracer.runtime import init_taichi
    >>> init_taichi()
    >>> from raytracer.core.lighting import compute_lighting
    >>> compute_lighting(scene, point, normal, view, Matte())  # doctest: +SKIP
    0.8
"""

from enum import IntEnum
from typing import TYPE_CHECKING

import taichi as ti
import taichi.math as tm

from raytracer.core.ray import cosine_between, reflect
from raytracer.scene.intersection import closest_intersection_impl
from raytracer.scene.model import AmbientLight, DirectionalLight, PointLight, encode_specularity

if TYPE_CHECKING:
    from raytracer.core.vector import Vec3
    from raytracer.scene.model import Light, Scene, Specularity

# Type alias for 3D vectors
vec3 = tm.vec3

# Shadow rays start this far along the light direction to avoid self-hits
SHADOW_EPSILON = 0.001

# Point lights are at ray parameter 1 along (position - point)
POINT_LIGHT_T_MAX = 1.0


class LightKind(IntEnum):
    """Light type tags stored in the ``light_kinds`` field."""

    AMBIENT = 0
    POINT = 1
    DIRECTIONAL = 2


# Maximum number of lights supported in the scene
MAX_LIGHTS = 64

light_kinds = ti.field(dtype=ti.i32, shape=MAX_LIGHTS)
light_intensities = ti.field(dtype=ti.f64, shape=MAX_LIGHTS)
# Position for point lights, direction for directional lights, unused for ambient
light_vectors = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())

_lighting_result = ti.field(dtype=ti.f64, shape=())


def clear_lights() -> None:
    """Remove all lights."""
    num_lights[None] = 0


def add_light(light: "Light") -> int:
    """Append a light to the light fields.

    Args:
        light: An ``AmbientLight``, ``PointLight`` or ``DirectionalLight``.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
        TypeError: If ``light`` is not a known light type.
    """
    if isinstance(light, AmbientLight):
        kind = LightKind.AMBIENT
        vector = (0.0, 0.0, 0.0)
    elif isinstance(light, PointLight):
        kind = LightKind.POINT
        vector = light.position.to_tuple()
    elif isinstance(light, DirectionalLight):
        kind = LightKind.DIRECTIONAL
        vector = light.dir.to_tuple()
    else:
        raise TypeError(f"Unknown light type: {type(light).__name__}")

    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    light_kinds[idx] = int(kind)
    light_intensities[idx] = float(light.intensity)
    light_vectors[idx] = list(vector)
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of lights currently uploaded."""
    return int(num_lights[None])


@ti.func
def compute_lighting_impl(
    point: vec3,
    normal: vec3,
    point_to_camera: vec3,
    has_specular: ti.i32,
    exponent: ti.f64,
) -> ti.f64:
    """Total light intensity arriving at a surface point.

    Args:
        point: The shaded point.
        normal: Surface normal at ``point``.
        point_to_camera: Direction from the point toward the viewer.
        has_specular: 1 to add the Phong term, 0 for matte surfaces.
        exponent: Phong exponent, ignored for matte surfaces.

    Returns:
        The summed intensity of all lights (may exceed 1).
    """
    total = 0.0

    for i in range(num_lights[None]):
        kind = light_kinds[i]
        intensity = light_intensities[i]

        if kind == int(LightKind.AMBIENT):
            total += intensity
        else:
            light_dir = light_vectors[i]
            shadow_t_max = tm.inf
            if kind == int(LightKind.POINT):
                light_dir = light_vectors[i] - point
                shadow_t_max = POINT_LIGHT_T_MAX

            if tm.length(light_dir) > 0.0:
                shadow = closest_intersection_impl(point, light_dir, SHADOW_EPSILON, shadow_t_max)
                if shadow.hit == 0:
                    # Diffuse
                    n_dot_l = tm.dot(normal, light_dir)
                    if n_dot_l > 0.0:
                        total += n_dot_l / (tm.length(normal) * tm.length(light_dir))

                    # Specular
                    if has_specular == 1:
                        reflected = reflect(light_dir, normal)
                        r_dot_v = tm.dot(reflected, point_to_camera)
                        if r_dot_v > 0.0:
                            cosine = cosine_between(reflected, point_to_camera)
                            total += intensity * cosine**exponent

    return total


@ti.kernel
def _compute_lighting_single(
    px: ti.f64,
    py: ti.f64,
    pz: ti.f64,
    nx: ti.f64,
    ny: ti.f64,
    nz: ti.f64,
    vx: ti.f64,
    vy: ti.f64,
    vz: ti.f64,
    has_specular: ti.i32,
    exponent: ti.f64,
):
    # One-iteration outer loop keeps the light and sphere scans serial
    for _ in range(1):
        _lighting_result[None] = compute_lighting_impl(
            vec3(px, py, pz), vec3(nx, ny, nz), vec3(vx, vy, vz), has_specular, exponent
        )


def compute_lighting(
    scene: "Scene",
    point: "Vec3",
    normal: "Vec3",
    point_to_camera: "Vec3",
    specularity: "Specularity",
) -> float:
    """Python-callable shading query.

    Uploads ``scene`` if needed and evaluates ``compute_lighting_impl`` at
    one point.

    Args:
        scene: The scene providing lights and occluders.
        point: The shaded point.
        normal: Surface normal at ``point``.
        point_to_camera: Direction from the point toward the viewer.
        specularity: ``Specular(exponent)`` or ``Matte()``.

    Returns:
        The total light intensity at ``point``.
    """
    # Import here to avoid circular imports (storage uploads into this module)
    from raytracer.scene.storage import ensure_scene_loaded

    ensure_scene_loaded(scene)
    has_specular, exponent = encode_specularity(specularity)
    _compute_lighting_single(
        point.x,
        point.y,
        point.z,
        normal.x,
        normal.y,
        normal.z,
        point_to_camera.x,
        point_to_camera.y,
        point_to_camera.z,
        has_specular,
        exponent,
    )
    return float(_lighting_result[None])
