"""Pinhole camera state for primary ray generation.

The camera sits at ``Camera.position`` and looks along ``Camera.rotation``.
Primary rays start at the camera position and pass through the projection
plane point computed by ``canvas_to_viewport``; that point is in camera space
and is taken to world space by the orientation matrix

    Mat3x3.rotation_mat(rotation, UP)

whose columns are stored in Taichi fields here. For the default forward
direction ``(0, 0, 1)`` the matrix is the identity, so the camera looks down
+z with +x to the right and +y up.

Example:
    >>> from raytracer.runtime import init_taichi
    >>> init_taichi()
    >>> from raytracer.camera.pinhole import setup_camera, get_camera_info
    >>> from raytracer.scene.model import Camera
    >>> setup_camera(Camera())
    >>> get_camera_info()["origin"]
    (0.0, 0.0, 0.0)
"""

from typing import TYPE_CHECKING

import taichi as ti
import taichi.math as tm

if TYPE_CHECKING:
    from raytracer.scene.model import Camera

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

# Camera origin (position)
_camera_origin = ti.Vector.field(3, dtype=ti.f64, shape=())

# Columns of the camera-to-world matrix
_camera_col1 = ti.Vector.field(3, dtype=ti.f64, shape=())
_camera_col2 = ti.Vector.field(3, dtype=ti.f64, shape=())
_camera_col3 = ti.Vector.field(3, dtype=ti.f64, shape=())


def setup_camera(camera: "Camera") -> None:
    """Upload the camera position and orientation.

    Must be called before rendering and again whenever the camera moves.

    Args:
        camera: The camera to render from.
    """
    orientation = camera.orientation()

    _camera_origin[None] = list(camera.position.to_tuple())
    _camera_col1[None] = list(orientation.col1.to_tuple())
    _camera_col2[None] = list(orientation.col2.to_tuple())
    _camera_col3[None] = list(orientation.col3.to_tuple())


@ti.func
def get_camera_origin() -> vec3:
    """Get the camera origin (position) in world space."""
    return _camera_origin[None]


@ti.func
def camera_to_world(v: vec3) -> vec3:
    """Rotate a camera-space direction into world space.

    Args:
        v: Direction in camera space, for example a projection plane point.

    Returns:
        ``col1 * v.x + col2 * v.y + col3 * v.z``.
    """
    return _camera_col1[None] * v.x + _camera_col2[None] * v.y + _camera_col3[None] * v.z


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with the origin and the three orientation columns.
    """
    origin_vec = _camera_origin[None]
    col1_vec = _camera_col1[None]
    col2_vec = _camera_col2[None]
    col3_vec = _camera_col3[None]

    return {
        "origin": (float(origin_vec[0]), float(origin_vec[1]), float(origin_vec[2])),
        "col1": (float(col1_vec[0]), float(col1_vec[1]), float(col1_vec[2])),
        "col2": (float(col2_vec[0]), float(col2_vec[1]), float(col2_vec[2])),
        "col3": (float(col3_vec[0]), float(col3_vec[1]), float(col3_vec[2])),
    }
