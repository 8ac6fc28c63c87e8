"""Keyboard camera controls.

Held keys move the camera by ``CAMERA_STEP`` world units per frame:

    W / S          forward / back  (z)
    D / A          right / left    (x)
    Space / Shift  up / down       (y)
    Up / Down      tilt the forward direction (rotation.y)

Key names are the strings Taichi GGUI reports (``ti.ui.SPACE == " "``,
``ti.ui.SHIFT == "Shift"``, ...), so this module does not need a window or an
initialised Taichi runtime.

Example:
    >>> from raytracer.camera.controls import CameraAction, move_camera
    >>> from raytracer.scene.model import Camera
    >>> move_camera(Camera(), [CameraAction.FORWARD]).position
    Vec3(x=0.0, y=0.0, z=0.5)
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from raytracer.core.vector import Vec3
from raytracer.scene.model import Camera

# World units per frame for held keys
CAMERA_STEP = 0.5


class CameraAction(Enum):
    """A camera motion bound to a key."""

    FORWARD = "forward"
    BACK = "back"
    RIGHT = "right"
    LEFT = "left"
    UP = "up"
    DOWN = "down"
    TILT_UP = "tilt_up"
    TILT_DOWN = "tilt_down"


# GGUI key name -> action
KEY_BINDINGS: dict[str, CameraAction] = {
    "w": CameraAction.FORWARD,
    "s": CameraAction.BACK,
    "d": CameraAction.RIGHT,
    "a": CameraAction.LEFT,
    " ": CameraAction.UP,
    "Shift": CameraAction.DOWN,
    "Up": CameraAction.TILT_UP,
    "Down": CameraAction.TILT_DOWN,
}

# Unit offsets, scaled by the step; tilts apply to rotation, the rest to position
_TRANSLATIONS: dict[CameraAction, Vec3] = {
    CameraAction.FORWARD: Vec3(0.0, 0.0, 1.0),
    CameraAction.BACK: Vec3(0.0, 0.0, -1.0),
    CameraAction.RIGHT: Vec3(1.0, 0.0, 0.0),
    CameraAction.LEFT: Vec3(-1.0, 0.0, 0.0),
    CameraAction.UP: Vec3(0.0, 1.0, 0.0),
    CameraAction.DOWN: Vec3(0.0, -1.0, 0.0),
}
_TILTS: dict[CameraAction, Vec3] = {
    CameraAction.TILT_UP: Vec3(0.0, 1.0, 0.0),
    CameraAction.TILT_DOWN: Vec3(0.0, -1.0, 0.0),
}


def actions_for_keys(pressed: Iterable[str]) -> list[CameraAction]:
    """Translate held key names into camera actions, ignoring unbound keys."""
    return [KEY_BINDINGS[key] for key in pressed if key in KEY_BINDINGS]


def move_camera(
    camera: Camera,
    actions: Iterable[CameraAction],
    step: float = CAMERA_STEP,
) -> Camera:
    """Apply camera actions.

    Opposite actions held together cancel out. Moves are along the world
    axes regardless of where the camera is looking.

    Args:
        camera: The current camera.
        actions: Actions to apply, each once.
        step: Distance per action in world units.

    Returns:
        A new ``Camera``; the input is not modified.
    """
    for action in actions:
        if action in _TRANSLATIONS:
            camera = camera.moved(_TRANSLATIONS[action] * step)
        else:
            camera = camera.turned(_TILTS[action] * step)
    return camera
