"""Interactive viewer using Taichi GGUI.

Opens a window showing the scene and re-renders whenever the camera moves.

Controls:
    W / S          move forward / back
    D / A          move right / left
    Space / Shift  move up / down
    Up / Down      tilt the view
    P              export the current frame to a timestamped PNG
    Escape         quit

Example:
    >>> from raytracer.runtime import init_taichi
    >>> init_taichi()
    >>> from raytracer.preview.interactive import InteractiveViewer
    >>> from raytracer.scene.demo import create_demo_scene
    >>> viewer = InteractiveViewer(create_demo_scene())
    >>> viewer.run()  # doctest: +SKIP
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

from raytracer.camera.controls import CAMERA_STEP, KEY_BINDINGS, actions_for_keys, move_camera
from raytracer.scene.model import Camera

if TYPE_CHECKING:
    import numpy.typing as npt

    from raytracer.core.renderer import FrameRenderer
    from raytracer.scene.model import Scene

# Keys with a meaning beyond camera motion
EXPORT_KEY = "p"
QUIT_KEY = "Escape"


class InteractiveViewer:
    """A window that renders a scene from a keyboard-controlled camera.

    The window is created lazily on first use so the viewer can be built and
    driven (``handle_keys``, ``render``) without a display.

    Attributes:
        scene: The scene being viewed.
        camera: The current camera.
        step: Camera step per frame a key is held.
        width: Window width in pixels (the canvas width).
        height: Window height in pixels (the canvas height).
        display_image: Taichi field holding the displayed RGB image.
    """

    def __init__(
        self,
        scene: Scene,
        camera: Camera | None = None,
        *,
        max_depth: int | None = None,
        step: float = CAMERA_STEP,
        title: str = "Ray Tracer",
        verbose: bool = True,
    ) -> None:
        """Initialize the viewer.

        Args:
            scene: The scene to view.
            camera: Starting camera (default: origin, looking down +z).
            max_depth: Reflection bounces per primary ray (default: the
                renderer default).
            step: Camera step per frame a key is held.
            title: Window title.
            verbose: Print control help and export messages.

        Raises:
            ValueError: If the canvas is too large or ``max_depth`` is out of range.
        """
        from raytracer.core.renderer import FrameRenderer

        if max_depth is None:
            self._renderer: FrameRenderer = FrameRenderer(scene)
        else:
            self._renderer = FrameRenderer(scene, max_depth=max_depth)

        self.scene = scene
        self.camera = camera if camera is not None else Camera()
        self.step = step
        self.width = self._renderer.width
        self.height = self._renderer.height
        self._title = title
        self._verbose = verbose
        self._needs_render = True

        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        # Shape is (width, height) for Taichi field, RGB values stored as vec3
        self.display_image: ti.MatrixField = ti.Vector.field(
            3, dtype=ti.f32, shape=(self.width, self.height)
        )

    def _initialize_window(self) -> None:
        if self._window is not None:
            return

        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()

    @property
    def window(self) -> ti.ui.Window:
        """Get the Taichi GGUI window, initializing if needed."""
        if self._window is None:
            self._initialize_window()
        assert self._window is not None
        return self._window

    @property
    def canvas(self) -> ti.ui.Canvas:
        """Get the canvas for rendering."""
        if self._canvas is None:
            self._initialize_window()
        assert self._canvas is not None
        return self._canvas

    @property
    def renderer(self) -> FrameRenderer:
        """Get the frame renderer."""
        return self._renderer

    def handle_keys(self, pressed: Iterable[str]) -> bool:
        """Move the camera for the held keys.

        Args:
            pressed: GGUI names of the keys currently held.

        Returns:
            True if the camera changed and the frame must be re-rendered.
        """
        actions = actions_for_keys(pressed)
        if not actions:
            return False

        moved = move_camera(self.camera, actions, self.step)
        if moved == self.camera:
            return False
        self.camera = moved
        self._needs_render = True
        return True

    def render(self) -> None:
        """Render the scene from the current camera into the display image."""
        self._renderer.render(self.camera)
        self.update_image(self._renderer.get_frame_numpy())
        self._needs_render = False

    def update_image(self, frame: npt.NDArray[np.uint8]) -> None:
        """Update the display image from an RGBA8 frame.

        Args:
            frame: Array of shape (height, width, 4), dtype uint8, row 0 at the top.

        Raises:
            ValueError: If the frame shape doesn't match (height, width, 4).
        """
        expected_shape = (self.height, self.width, 4)
        if frame.shape != expected_shape:
            raise ValueError(f"Frame shape {frame.shape} doesn't match expected {expected_shape}")

        rgb = frame[:, :, :3].astype(np.float32) / 255.0

        # Taichi fields use (x, y) indexing with the origin at the bottom-left
        image_transposed = np.ascontiguousarray(np.transpose(np.flipud(rgb), (1, 0, 2)))
        self.display_image.from_numpy(image_transposed)

    def _held_keys(self) -> list[str]:
        return [key for key in KEY_BINDINGS if self.window.is_pressed(key)]

    def _poll_events(self) -> None:
        """Handle one-shot key presses (export, quit)."""
        while self.window.get_event(ti.ui.PRESS):
            key = self.window.event.key
            if key == QUIT_KEY:
                self.window.running = False
            elif key == EXPORT_KEY:
                self.export_png()

    def run(self) -> None:
        """Run the window event loop until the window is closed or Escape is pressed."""
        self._initialize_window()

        if self._verbose:
            print("Controls: WASD move, Space/Shift up/down, Up/Down tilt, P export, Esc quit")

        while self.window.running:
            self._poll_events()
            if not self.window.running:
                break

            self.handle_keys(self._held_keys())
            if self._needs_render:
                self.render()

            self.canvas.set_image(self.display_image)
            self.window.show()

    def export_png(self, filepath: str | None = None) -> str:
        """Save the current frame as a PNG.

        Args:
            filepath: Output path (default: ``render_YYYYMMDD_HHMMSS.png``).

        Returns:
            The path written.
        """
        from raytracer.preview.export import save_frame

        if self._needs_render:
            self.render()

        if filepath is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filepath = f"render_{timestamp}.png"

        save_frame(self._renderer, filepath)
        if self._verbose:
            print(f"Exported: {filepath}")
        return filepath

    def close(self) -> None:
        """Close the viewer window."""
        if self._window is not None:
            self._window.running = False

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering.

        Returns:
            True if a display is available, False for headless environments.
        """
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        if os.uname().sysname == "Darwin":
            # SSH session without X forwarding
            ssh_connection = os.environ.get("SSH_CONNECTION")
            if ssh_connection and not display:
                return False
            return True

        if display or wayland:
            return True

        if os.name == "nt":
            return True

        return False
