"""Uploading a ``Scene`` into Taichi fields.

The kernels read spheres, lights and scene-wide settings (background colour,
canvas, viewport, camera distance) from module-level fields. Only one scene is
resident at a time; ``ensure_scene_loaded`` re-uploads when a different
``Scene`` object is passed, so the Python-callable queries can accept a scene
argument without paying for an upload on every call.

Scenes are immutable, so identity is enough to know the fields are current.
"""

from typing import TYPE_CHECKING

import taichi as ti
import taichi.math as tm

from raytracer.core.color import color_to_vector, vec4
from raytracer.core.lighting import add_light, clear_lights
from raytracer.scene.intersection import add_sphere, clear_spheres

if TYPE_CHECKING:
    from raytracer.scene.model import Scene

# Scene-wide settings
_background_color = ti.Vector.field(4, dtype=ti.f64, shape=())
_canvas_size = ti.Vector.field(2, dtype=ti.f64, shape=())
_viewport_size = ti.Vector.field(2, dtype=ti.f64, shape=())
_camera_dist = ti.field(dtype=ti.f64, shape=())

# The Scene object whose data is in the fields, if any
_loaded_scene: "Scene | None" = None


def load_scene(scene: "Scene") -> None:
    """Upload ``scene`` into the Taichi fields, replacing the current one.

    Args:
        scene: The scene to upload.

    Raises:
        RuntimeError: If the scene exceeds the sphere or light capacity.
    """
    global _loaded_scene

    # Forget the previous scene first so a failed upload is never reused
    _loaded_scene = None
    clear_spheres()
    clear_lights()

    for sphere in scene.spheres:
        add_sphere(sphere)
    for light in scene.lights:
        add_light(light)

    _background_color[None] = color_to_vector(scene.bg_color)
    _canvas_size[None] = [float(scene.canvas.w), float(scene.canvas.h)]
    _viewport_size[None] = [float(scene.viewport.w), float(scene.viewport.h)]
    _camera_dist[None] = float(scene.camera_dist)

    _loaded_scene = scene


def ensure_scene_loaded(scene: "Scene") -> None:
    """Upload ``scene`` unless it is already the resident scene."""
    if scene is not _loaded_scene:
        load_scene(scene)


def unload_scene() -> None:
    """Remove all spheres and lights and forget the resident scene."""
    global _loaded_scene

    clear_spheres()
    clear_lights()
    _loaded_scene = None


def get_loaded_scene() -> "Scene | None":
    """Return the resident scene, or None."""
    return _loaded_scene


# =============================================================================
# Kernel-side accessors
# =============================================================================


@ti.func
def get_background_color() -> vec4:
    """Colour returned for rays that hit nothing."""
    return _background_color[None]


@ti.func
def get_canvas_size() -> tm.vec2:
    """Canvas ``(w, h)`` in pixels."""
    return _canvas_size[None]


@ti.func
def get_viewport_size() -> tm.vec2:
    """Viewport ``(w, h)`` in world units."""
    return _viewport_size[None]


@ti.func
def get_camera_dist() -> ti.f64:
    """Distance from the camera to the projection plane."""
    return _camera_dist[None]
