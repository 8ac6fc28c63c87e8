"""Tests for Taichi initialisation and the command-line scripts.

``init_taichi`` is only called with conflicting options here; a real
re-initialisation would discard the fields the session fixture created.
"""

import __future__
import importlib

import pytest
import taichi as ti
from PIL import Image as PILImage

from raytracer.runtime import REQUIRED_INIT_OPTIONS, init_taichi

# Modules defining @ti.func, @ti.kernel or @ti.dataclass
KERNEL_MODULES = [
    "raytracer.core.color",
    "raytracer.core.ray",
    "raytracer.geometry.sphere",
    "raytracer.scene.intersection",
    "raytracer.core.lighting",
    "raytracer.scene.storage",
    "raytracer.core.tracer",
    "raytracer.camera.pinhole",
    "raytracer.core.renderer",
]


class TestInitTaichi:
    """Tests for init_taichi option checks."""

    def test_required_options(self):
        assert REQUIRED_INIT_OPTIONS == {"default_fp": ti.f64, "fast_math": False}

    def test_single_precision_rejected(self):
        with pytest.raises(ValueError, match="default_fp"):
            init_taichi(arch=ti.cpu, default_fp=ti.f32)

    def test_fast_math_rejected(self):
        with pytest.raises(ValueError, match="fast_math"):
            init_taichi(arch=ti.cpu, fast_math=True)


class TestKernelModules:
    """Tests that the Taichi modules import with evaluated annotations."""

    @pytest.mark.parametrize("name", KERNEL_MODULES)
    def test_annotations_not_postponed(self, name):
        """Taichi rejects string annotations on kernels and functions."""
        module = importlib.import_module(name)
        assert vars(module).get("annotations") is not __future__.annotations


class TestRenderScript:
    """Tests for examples/render_scene.py."""

    def test_parse_defaults(self):
        from examples.render_scene import parse_args

        args = parse_args([])
        assert (args.width, args.height, args.depth) == (320, 240, 3)
        assert args.scene is None
        assert args.output == "render.png"
        assert args.arch == "cpu"

    def test_render_demo_scene(self, tmp_path):
        from examples.render_scene import render_scene

        output = render_scene(width=40, height=30, output_path=str(tmp_path / "demo.png"), quiet=True)

        with PILImage.open(output) as image:
            assert image.size == (40, 30)
            assert image.getpixel((0, 0)) == (255, 255, 255, 255)

    def test_render_scene_file(self, tmp_path, make_scene):
        from examples.render_scene import render_scene
        from raytracer.core.color import Color
        from raytracer.scene.serialization import save_scene_file

        scene_path = tmp_path / "empty.json"
        save_scene_file(make_scene(bg_color=Color.BLUE), scene_path)
        output = render_scene(scene_path=str(scene_path), output_path=str(tmp_path / "out.png"), quiet=True)

        with PILImage.open(output) as image:
            assert image.size == (32, 24)
            assert image.getpixel((10, 10)) == (0, 0, 255, 255)

    def test_bad_depth_raises(self, tmp_path):
        from examples.render_scene import render_scene

        with pytest.raises(ValueError, match="max_depth"):
            render_scene(width=8, height=8, depth=7, output_path=str(tmp_path / "x.png"), quiet=True)


class TestInteractiveScript:
    """Tests for examples/interactive_scene.py argument parsing."""

    def test_parse_args(self):
        from examples.interactive_scene import parse_args

        args = parse_args(["--scene", "scenes/demo.json", "--depth", "5"])
        assert args.scene == "scenes/demo.json"
        assert args.depth == 5
