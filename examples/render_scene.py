#!/usr/bin/env python3
"""Render a sphere scene to a PNG.

Renders the built-in demo scene, or a JSON scene file, from a camera at the
origin looking down +z.

Usage:
    python -m examples.render_scene [options]

Options:
    --scene PATH        JSON scene file (default: built-in demo scene)
    --width WIDTH       Canvas width for the demo scene (default: 320)
    --height HEIGHT     Canvas height for the demo scene (default: 240)
    --depth DEPTH       Reflection bounces (default: 3)
    --output OUTPUT     Output file path (default: render.png)
    --arch ARCH         Taichi backend: cpu, cuda or vulkan (default: cpu)
    --show              Show the frame in a Matplotlib window
    --quiet             Suppress progress output

Example:
    python -m examples.render_scene --width 640 --height 480 --depth 5
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti

_ARCHES = {"cpu": ti.cpu, "cuda": ti.cuda, "vulkan": ti.vulkan}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene to a PNG.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file (default: built-in demo scene)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=320,
        help="Canvas width for the demo scene (default: 320)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=240,
        help="Canvas height for the demo scene (default: 240)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=3,
        help="Reflection bounces (default: 3)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="render.png",
        help="Output file path (default: render.png)",
    )
    parser.add_argument(
        "--arch",
        choices=sorted(_ARCHES),
        default="cpu",
        help="Taichi backend; must support f64 (default: cpu)",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Show the frame in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_scene(
    scene_path: str | None = None,
    width: int = 320,
    height: int = 240,
    depth: int = 3,
    output_path: str = "render.png",
    show: bool = False,
    quiet: bool = False,
) -> Path:
    """Render a scene and save it to a file.

    Args:
        scene_path: JSON scene file, or None for the demo scene.
        width: Canvas width for the demo scene.
        height: Canvas height for the demo scene.
        depth: Reflection bounces.
        output_path: Output file path (PNG).
        show: Show the frame with Matplotlib after saving.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from raytracer.core.renderer import FrameRenderer
    from raytracer.preview.export import save_frame
    from raytracer.scene.demo import create_demo_camera, create_demo_scene
    from raytracer.scene.serialization import load_scene_file

    if scene_path is None:
        if not quiet:
            print(f"Creating demo scene ({width}x{height})...")
        scene = create_demo_scene(width, height)
    else:
        if not quiet:
            print(f"Loading scene from {scene_path}...")
        scene = load_scene_file(scene_path)

    renderer = FrameRenderer(scene, max_depth=depth)

    if not quiet:
        print(
            f"Rendering {renderer.width}x{renderer.height}, {len(scene.spheres)} spheres, "
            f"{len(scene.lights)} lights, depth {depth}..."
        )

    start_time = time.time()
    renderer.render(create_demo_camera())

    output_file = Path(output_path)
    save_frame(renderer, str(output_file))

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    if show:
        from raytracer.preview.display import show_frame

        show_frame(renderer.get_frame_numpy(), title=output_file.name)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    from raytracer.runtime import init_taichi

    init_taichi(arch=_ARCHES[args.arch])
    if not args.quiet:
        print(f"Using {args.arch.upper()} backend")

    try:
        render_scene(
            scene_path=args.scene,
            width=args.width,
            height=args.height,
            depth=args.depth,
            output_path=args.output,
            show=args.show,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
