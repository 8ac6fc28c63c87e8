"""Frame rendering into an RGBA8 pixel buffer.

One kernel launch renders a whole frame: Taichi parallelises the outer
``(row, column)`` loop and every pixel writes only its own four bytes. For the
pixel in row ``y`` (top to bottom) and column ``x`` (left to right) the
centred canvas coordinate is

    cx = x - width // 2
    cy = height // 2 - y

which is mapped onto the projection plane, rotated by the camera orientation,
and traced from the camera position with ``t_min = PRIMARY_T_MIN``.

The frame buffer is preallocated at ``MAX_FRAME_WIDTH x MAX_FRAME_HEIGHT`` so
changing the canvas size never reallocates fields.

Example:
    >>> from raytracer.runtime import init_taichi
    >>> init_taichi()
    >>> from raytracer.core.renderer import FrameRenderer
    >>> from raytracer.scene.demo import create_demo_scene, create_demo_camera
    >>> renderer = FrameRenderer(create_demo_scene())
    >>> renderer.render(create_demo_camera())
    >>> renderer.get_frame_numpy().shape
    (240, 320, 4)
"""

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raytracer.camera.pinhole import camera_to_world, get_camera_origin, setup_camera
from raytracer.core.tracer import (
    DEFAULT_REFLECTION_DEPTH,
    MAX_REFLECTION_DEPTH,
    PRIMARY_T_MIN,
    canvas_to_viewport_impl,
    trace_ray_impl,
)
from raytracer.scene.storage import ensure_scene_loaded

if TYPE_CHECKING:
    from raytracer.scene.model import Camera, Scene

# =============================================================================
# Frame Buffer
# =============================================================================

# Maximum supported frame dimensions (preallocated to avoid reallocation)
MAX_FRAME_WIDTH = 2048
MAX_FRAME_HEIGHT = 2048

# Row-major RGBA8: [row, column, channel], row 0 at the top
_frame_buffer = ti.field(dtype=ti.u8, shape=(MAX_FRAME_HEIGHT, MAX_FRAME_WIDTH, 4))


def frame_size_for(scene: "Scene") -> tuple[int, int]:
    """Get the pixel ``(width, height)`` of a scene's canvas.

    Raises:
        ValueError: If the canvas is empty or exceeds the maximum frame size.
    """
    width = int(scene.canvas.w)
    height = int(scene.canvas.h)
    if width <= 0 or height <= 0:
        raise ValueError(f"Canvas must be at least 1x1 pixels, got {width}x{height}")
    if width > MAX_FRAME_WIDTH or height > MAX_FRAME_HEIGHT:
        raise ValueError(
            f"Frame dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_FRAME_WIDTH}x{MAX_FRAME_HEIGHT})"
        )
    return width, height


@ti.func
def render_pixel_impl(x: ti.i32, y: ti.i32, width: ti.i32, height: ti.i32, depth: ti.i32) -> tm.vec4:
    """Colour of the pixel at column ``x``, row ``y`` (row 0 at the top)."""
    cx = ti.cast(x - width // 2, ti.f64)
    cy = ti.cast(height // 2 - y, ti.f64)
    direction = camera_to_world(canvas_to_viewport_impl(cx, cy))
    return trace_ray_impl(get_camera_origin(), direction, PRIMARY_T_MIN, tm.inf, depth)


@ti.kernel
def _render_frame_kernel(width: ti.i32, height: ti.i32, depth: ti.i32):
    for y, x in ti.ndrange(height, width):
        color = render_pixel_impl(x, y, width, height, depth)
        for c in ti.static(range(4)):
            _frame_buffer[y, x, c] = ti.cast(color[c], ti.u8)


class FrameRenderer:
    """Renders frames of one scene from any camera.

    The renderer uploads its scene on each ``render`` call (a no-op when it is
    already resident) and keeps the last frame in the shared frame buffer.

    Attributes:
        scene: The scene being rendered.
        max_depth: Reflection bounces per primary ray.
    """

    def __init__(self, scene: "Scene", max_depth: int = DEFAULT_REFLECTION_DEPTH) -> None:
        """Initialize the renderer.

        Args:
            scene: The scene to render.
            max_depth: Reflection bounces per primary ray.

        Raises:
            ValueError: If the canvas is too large or ``max_depth`` is out of
                ``[0, MAX_REFLECTION_DEPTH]``.
        """
        if not 0 <= max_depth <= MAX_REFLECTION_DEPTH:
            raise ValueError(f"max_depth must be in [0, {MAX_REFLECTION_DEPTH}], got {max_depth}")
        self._width, self._height = frame_size_for(scene)
        self.scene = scene
        self.max_depth = max_depth
        self._frame_count = 0

    @property
    def width(self) -> int:
        """Get the frame width in pixels."""
        return self._width

    @property
    def height(self) -> int:
        """Get the frame height in pixels."""
        return self._height

    @property
    def frame_count(self) -> int:
        """Get the number of frames rendered so far."""
        return self._frame_count

    def render(self, camera: "Camera") -> None:
        """Render one frame from ``camera`` into the frame buffer.

        Args:
            camera: The camera to render from.
        """
        ensure_scene_loaded(self.scene)
        setup_camera(camera)
        _render_frame_kernel(self._width, self._height, self.max_depth)
        self._frame_count += 1

    def _check_rendered(self) -> None:
        if self._frame_count == 0:
            raise RuntimeError("No frame rendered yet. Call render() first.")

    def get_frame_numpy(self) -> npt.NDArray[np.uint8]:
        """Get the last frame as a NumPy array.

        Returns:
            Array of shape (height, width, 4), dtype uint8, row 0 at the top.

        Raises:
            RuntimeError: If no frame has been rendered.
        """
        self._check_rendered()
        full_frame = _frame_buffer.to_numpy()
        return np.ascontiguousarray(full_frame[: self._height, : self._width, :])

    def get_frame_bytes(self) -> bytes:
        """Get the last frame as row-major RGBA8 bytes.

        Pixel ``(x, y)`` starts at offset ``4 * (y * width + x)``.

        Raises:
            RuntimeError: If no frame has been rendered.
        """
        return self.get_frame_numpy().tobytes()

    def save_image(self, filepath: str) -> None:
        """Save the last frame as a PNG (or any format Pillow infers from the path).

        Raises:
            RuntimeError: If no frame has been rendered.
        """
        from raytracer.preview.export import save_png_from_array

        save_png_from_array(self.get_frame_numpy(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"FrameRenderer(width={self.width}, height={self.height}, "
            f"max_depth={self.max_depth}, frames={self.frame_count})"
        )


def render_frame(
    scene: "Scene",
    camera: "Camera",
    max_depth: int = DEFAULT_REFLECTION_DEPTH,
) -> npt.NDArray[np.uint8]:
    """Render a single frame.

    Args:
        scene: The scene to render.
        camera: The camera to render from.
        max_depth: Reflection bounces per primary ray.

    Returns:
        Array of shape (canvas.h, canvas.w, 4), dtype uint8.
    """
    renderer = FrameRenderer(scene, max_depth=max_depth)
    renderer.render(camera)
    return renderer.get_frame_numpy()
