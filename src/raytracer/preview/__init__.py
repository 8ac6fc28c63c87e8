"""Preview module for output and visualization.

Components:
    export: PNG export of RGBA8 frames (Pillow)
    display: Matplotlib-based static preview
    interactive: Taichi GGUI viewer with keyboard camera controls

Example:
    >>> from raytracer.preview import save_frame, show_frame
    >>> renderer.render(camera)  # doctest: +SKIP
    >>> save_frame(renderer, "output.png")  # doctest: +SKIP
    >>> show_frame(renderer.get_frame_numpy())  # doctest: +SKIP
"""

from raytracer.preview.display import frame_to_display, show_comparison, show_frame
from raytracer.preview.export import (
    compute_rmse,
    frame_from_bytes,
    frame_to_image,
    save_frame,
    save_png_from_array,
)
from raytracer.preview.interactive import InteractiveViewer

__all__ = [
    # Interactive viewer
    "InteractiveViewer",
    # Display functions
    "show_frame",
    "show_comparison",
    "frame_to_display",
    # Export functions
    "frame_to_image",
    "frame_from_bytes",
    "save_png_from_array",
    "save_frame",
    "compute_rmse",
]
