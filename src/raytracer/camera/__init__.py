"""Camera module.

Components:
    pinhole: Camera fields and primary ray directions (Taichi fields)
    controls: Keyboard bindings and camera motion

Import pinhole directly after ``init_taichi``.
"""

from .controls import CAMERA_STEP, KEY_BINDINGS, CameraAction, actions_for_keys, move_camera

__all__ = [
    "CAMERA_STEP",
    "KEY_BINDINGS",
    "CameraAction",
    "actions_for_keys",
    "move_camera",
]
