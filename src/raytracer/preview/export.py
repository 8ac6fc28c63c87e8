"""Image export utilities for rendered frames.

Frames are already 8-bit RGBA, so export is a direct Pillow conversion with
no tone mapping or gamma step.

Supported formats:
    - PNG (RGBA8 via Pillow); other formats Pillow infers from the extension

Example:
    >>> from raytracer.preview.export import save_frame
    >>> renderer.render(camera)  # doctest: +SKIP
    >>> save_frame(renderer, "output.png")  # doctest: +SKIP
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from raytracer.core.renderer import FrameRenderer


def _check_frame(frame: npt.NDArray[np.uint8]) -> None:
    if frame.ndim != 3 or frame.shape[2] != 4:
        raise ValueError(f"Expected an (H, W, 4) RGBA frame, got shape {frame.shape}")
    if frame.dtype != np.uint8:
        raise ValueError(f"Expected dtype uint8, got {frame.dtype}")


def frame_to_image(frame: npt.NDArray[np.uint8]) -> PILImage.Image:
    """Convert an RGBA8 frame to a Pillow image.

    Args:
        frame: Array of shape (H, W, 4), dtype uint8, row 0 at the top.

    Returns:
        An ``RGBA`` Pillow image of size (W, H).

    Raises:
        ValueError: If the array shape or dtype is wrong.
    """
    _check_frame(frame)
    return PILImage.fromarray(np.ascontiguousarray(frame))


def frame_from_bytes(data: bytes, width: int, height: int) -> npt.NDArray[np.uint8]:
    """Reshape row-major RGBA8 bytes into an (H, W, 4) array.

    Raises:
        ValueError: If ``len(data)`` is not ``4 * width * height``.
    """
    expected = 4 * width * height
    if len(data) != expected:
        raise ValueError(f"Expected {expected} bytes for {width}x{height} RGBA, got {len(data)}")
    return np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4).copy()


def save_png_from_array(frame: npt.NDArray[np.uint8], filepath: str) -> None:
    """Save an RGBA8 frame as a PNG file.

    Args:
        frame: Array of shape (H, W, 4), dtype uint8.
        filepath: Output file path (should end in .png).
    """
    frame_to_image(frame).save(filepath)


def save_frame(renderer: FrameRenderer, filepath: str) -> None:
    """Save the renderer's last frame as a PNG file.

    Raises:
        RuntimeError: If the renderer has not rendered a frame yet.
    """
    save_png_from_array(renderer.get_frame_numpy(), filepath)


def compute_rmse(
    frame_a: npt.NDArray[np.uint8],
    frame_b: npt.NDArray[np.uint8],
) -> float:
    """Compute root mean squared error between two frames, in channel units.

    Raises:
        ValueError: If frame shapes don't match.
    """
    if frame_a.shape != frame_b.shape:
        raise ValueError(f"Frame shapes must match: {frame_a.shape} vs {frame_b.shape}")

    diff = frame_a.astype(np.float64) - frame_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
