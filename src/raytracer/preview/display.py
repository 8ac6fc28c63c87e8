"""Matplotlib-based preview of rendered frames.

For one-off looks at a frame (the interactive viewer uses Taichi GGUI
instead). Matplotlib is imported lazily so the rest of the package works
without a display backend.

Example:
    >>> from raytracer.preview.display import show_frame
    >>> renderer.render(camera)  # doctest: +SKIP
    >>> show_frame(renderer.get_frame_numpy(), title="Demo")  # doctest: +SKIP
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from raytracer.preview.export import compute_rmse


def frame_to_display(frame: npt.NDArray[np.uint8], *, opaque: bool = True) -> npt.NDArray[np.float32]:
    """Convert an RGBA8 frame to float [0, 1] for ``imshow``.

    Args:
        frame: Array of shape (H, W, 4), dtype uint8.
        opaque: Drop the alpha channel. Scene colours with alpha below 255
            (``Color.BLACK`` has alpha 0) would otherwise show as transparent.

    Returns:
        Array of shape (H, W, 3), or (H, W, 4) when ``opaque`` is False.
    """
    image = frame.astype(np.float32) / 255.0
    if opaque:
        image = image[:, :, :3]
    return image


def show_frame(
    frame: npt.NDArray[np.uint8],
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display a frame as a Matplotlib figure.

    Args:
        frame: Array of shape (H, W, 4), dtype uint8.
        title: Figure title (default shows the frame size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    ax.imshow(frame_to_display(frame))
    ax.axis("off")

    if title is None:
        title = f"Render Preview - {frame.shape[1]}x{frame.shape[0]}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)


def show_comparison(
    frame_a: npt.NDArray[np.uint8],
    frame_b: npt.NDArray[np.uint8],
    *,
    labels: tuple[str, str] = ("A", "B"),
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 5),
    block: bool = True,
) -> float:
    """Display two frames side by side with their amplified difference.

    Args:
        frame_a: First frame (H, W, 4).
        frame_b: Second frame (H, W, 4).
        labels: Labels for the two frames.
        diff_scale: Scale factor for difference amplification.
        figsize: Figure size in inches.
        block: Whether to block execution until figure is closed.

    Returns:
        RMSE between the two frames in channel units.

    Raises:
        ValueError: If frame shapes don't match.
    """
    import matplotlib.pyplot as plt

    rmse = compute_rmse(frame_a, frame_b)

    display_a = frame_to_display(frame_a)
    display_b = frame_to_display(frame_b)
    diff_amplified = np.clip(np.abs(display_a - display_b) * diff_scale, 0.0, 1.0)

    fig, axes = plt.subplots(1, 3, figsize=figsize)

    axes[0].imshow(display_a)
    axes[0].set_title(labels[0])
    axes[0].axis("off")

    axes[1].imshow(display_b)
    axes[1].set_title(labels[1])
    axes[1].axis("off")

    axes[2].imshow(diff_amplified)
    axes[2].set_title(f"Difference ({diff_scale}x) - RMSE: {rmse:.3f}")
    axes[2].axis("off")

    plt.tight_layout()
    plt.show(block=block)

    return rmse
