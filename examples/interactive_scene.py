#!/usr/bin/env python3
"""Interactive sphere scene viewer with keyboard camera controls.

Usage:
    python -m examples.interactive_scene [--scene PATH] [--depth DEPTH]

Controls:
    - W / S: move forward / back
    - D / A: move right / left
    - Space / Shift: move up / down
    - Up / Down: tilt the view
    - P: export the current frame to a timestamped PNG
    - Escape: quit

The frame is re-rendered whenever the camera moves.
"""

from __future__ import annotations

import argparse
import sys

import taichi as ti


def initialize_taichi() -> str:
    """Initialize Taichi with an f64-capable backend.

    Tries CUDA, falls back to CPU (Metal has no f64 support).

    Returns:
        Name of the backend being used.
    """
    from raytracer.runtime import init_taichi

    try:
        init_taichi(arch=ti.cuda)
        return "CUDA (GPU)"
    except Exception:
        pass

    init_taichi(arch=ti.cpu)
    return "CPU"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Interactive sphere scene viewer.")
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file (default: built-in demo scene)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=3,
        help="Reflection bounces (default: 3)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the interactive viewer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    args = parse_args(argv)

    # Initialize Taichi first (before importing modules that declare fields)
    backend = initialize_taichi()
    print(f"Taichi backend: {backend}")

    from raytracer.preview.interactive import InteractiveViewer
    from raytracer.scene.demo import create_demo_camera, create_demo_scene
    from raytracer.scene.serialization import load_scene_file

    if not InteractiveViewer.is_display_available():
        print("Error: No display available. Cannot run interactive viewer.", file=sys.stderr)
        print("This script requires a graphical display environment.", file=sys.stderr)
        return 1

    try:
        scene = create_demo_scene() if args.scene is None else load_scene_file(args.scene)
        viewer = InteractiveViewer(scene, create_demo_camera(), max_depth=args.depth)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Opening viewer ({viewer.width}x{viewer.height})...")

    try:
        viewer.run()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        viewer.close()
        print("Viewer closed.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
