"""Unit tests for ray tracing with reflections.

Tests cover:
- Canvas to viewport mapping (host and kernel)
- Background colour on a miss
- Local shading of a hit
- Reflection blending and the depth budget
- Multi-bounce chains against a host-side recursive reference
"""

import math

import pytest
import taichi as ti

from raytracer.core.color import Color
from raytracer.core.vector import Vec3
from raytracer.scene.model import AmbientLight, Matte, Sphere

FORWARD = Vec3(0.0, 0.0, 1.0)


def _reference_trace(locals_and_weights, depth):
    """Host-side recursive blend of per-bounce local colours.

    Args:
        locals_and_weights: ``(local_color, reflectiveness)`` per bounce, in
            hit order. The ray after the last entry hits the background.
        depth: Reflection budget.
    """

    def trace(level, remaining, background):
        if level == len(locals_and_weights):
            return background
        local, r = locals_and_weights[level]
        if remaining <= 0 or r <= 0:
            return local
        reflected = trace(level + 1, remaining - 1, background)
        return local * (1 - r) + reflected * r

    return trace


class TestCanvasToViewport:
    """Tests for the canvas to projection plane mapping."""

    def test_center_maps_to_plane_center(self, make_scene):
        from raytracer.core.tracer import canvas_to_viewport

        assert canvas_to_viewport(make_scene(), 0, 0) == Vec3(0.0, 0.0, 1.0)

    def test_corner_maps_to_viewport_corner(self, make_scene):
        from raytracer.core.tracer import canvas_to_viewport

        assert canvas_to_viewport(make_scene(), 16, 12) == Vec3(1.0, 0.75, 1.0)
        assert canvas_to_viewport(make_scene(), -16, -12) == Vec3(-1.0, -0.75, 1.0)

    def test_kernel_mapping_matches_host(self, make_scene):
        from raytracer.core.tracer import canvas_to_viewport, canvas_to_viewport_impl
        from raytracer.scene.storage import load_scene

        scene = make_scene()
        load_scene(scene)
        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel(x: ti.f64, y: ti.f64):
            result[None] = canvas_to_viewport_impl(x, y)

        test_kernel(5.0, -7.0)
        expected = canvas_to_viewport(scene, 5.0, -7.0)
        assert tuple(result[None].to_numpy().tolist()) == pytest.approx(expected.to_tuple())


class TestTraceRay:
    """Tests for trace_ray."""

    def test_empty_scene_returns_background(self, make_scene):
        from raytracer.core.tracer import trace_ray

        scene = make_scene(bg_color=Color(10, 20, 30, 40))
        assert trace_ray(scene, Vec3.ZERO, FORWARD, 1.0, math.inf, 3) == Color(10, 20, 30, 40)

    def test_hit_returns_lit_color(self, make_scene):
        from raytracer.core.tracer import trace_ray

        scene = make_scene([Sphere(1.0, Vec3(0.0, 0.0, 4.0), Color.RED)], [AmbientLight(0.5)])
        assert trace_ray(scene, Vec3.ZERO, FORWARD, 1.0, math.inf, 3) == Color.RED * 0.5

    def test_unlit_hit_is_transparent_black(self, make_scene):
        from raytracer.core.tracer import trace_ray

        scene = make_scene([Sphere(1.0, Vec3(0.0, 0.0, 4.0), Color.RED)])
        assert trace_ray(scene, Vec3.ZERO, FORWARD, 1.0, math.inf, 3) == Color(0, 0, 0, 0)

    def test_overexposed_hit_saturates(self, make_scene):
        from raytracer.core.tracer import trace_ray

        sphere = Sphere(1.0, Vec3(0.0, 0.0, 4.0), Color(200, 100, 0, 255))
        scene = make_scene([sphere], [AmbientLight(2.0)])
        assert trace_ray(scene, Vec3.ZERO, FORWARD, 1.0, math.inf, 3) == Color(255, 200, 0, 255)

    def test_sphere_before_t_min_is_ignored(self, make_scene):
        from raytracer.core.tracer import trace_ray

        scene = make_scene([Sphere(0.25, Vec3(0.0, 0.0, 0.5), Color.RED)], [AmbientLight(1.0)])
        assert trace_ray(scene, Vec3.ZERO, FORWARD, 1.0, math.inf, 3) == Color.WHITE

    def test_reflection_of_background(self, make_scene):
        """A half mirror facing away from everything blends with the background."""
        from raytracer.core.tracer import trace_ray

        mirror = Sphere(1.0, Vec3(0.0, 0.0, 4.0), Color.RED, Matte(), 0.5)
        scene = make_scene([mirror], [AmbientLight(1.0)])
        assert trace_ray(scene, Vec3.ZERO, FORWARD, 1.0, math.inf, 1) == Color(254, 127, 127, 254)

    def test_depth_zero_skips_reflection(self, make_scene):
        from raytracer.core.tracer import trace_ray

        mirror = Sphere(1.0, Vec3(0.0, 0.0, 4.0), Color.RED, Matte(), 0.5)
        scene = make_scene([mirror], [AmbientLight(1.0)])
        assert trace_ray(scene, Vec3.ZERO, FORWARD, 1.0, math.inf, 0) == Color.RED

    def test_perfect_mirror_shows_reflection_only(self, make_scene):
        from raytracer.core.tracer import trace_ray

        mirror = Sphere(1.0, Vec3(0.0, 0.0, 4.0), Color.RED, Matte(), 1.0)
        scene = make_scene([mirror], [AmbientLight(1.0)], bg_color=Color.BLUE)
        assert trace_ray(scene, Vec3.ZERO, FORWARD, 1.0, math.inf, 2) == Color.BLUE

    @pytest.mark.parametrize("depth", [-1, 6])
    def test_depth_out_of_range_raises(self, make_scene, depth):
        from raytracer.core.tracer import trace_ray

        with pytest.raises(ValueError, match="depth"):
            trace_ray(make_scene(), Vec3.ZERO, FORWARD, 1.0, math.inf, depth)


class TestReflectionChains:
    """Tests for rays bouncing between two facing mirrors."""

    @pytest.fixture
    def facing_mirrors(self, make_scene):
        front = Sphere(1.0, Vec3(0.0, 0.0, 4.0), Color.RED, Matte(), 0.5)
        back = Sphere(1.0, Vec3(0.0, 0.0, -4.0), Color(0, 0, 255, 128), Matte(), 0.3)
        return make_scene([front, back], [AmbientLight(0.8)])

    @pytest.mark.parametrize("depth", [0, 1, 2, 3, 4, 5])
    def test_matches_recursive_reference(self, facing_mirrors, depth):
        """The ray ping-pongs along the z axis until the budget runs out."""
        from raytracer.core.tracer import trace_ray

        front, back = facing_mirrors.spheres
        bounces = []
        for level in range(depth + 1):
            sphere = front if level % 2 == 0 else back
            bounces.append((sphere.color * 0.8, sphere.reflectiveness))

        expected = _reference_trace(bounces, depth)(0, depth, Color.WHITE)
        assert trace_ray(facing_mirrors, Vec3.ZERO, FORWARD, 1.0, math.inf, depth) == expected

    def test_deeper_budget_changes_result(self, facing_mirrors):
        from raytracer.core.tracer import trace_ray

        shallow = trace_ray(facing_mirrors, Vec3.ZERO, FORWARD, 1.0, math.inf, 0)
        deep = trace_ray(facing_mirrors, Vec3.ZERO, FORWARD, 1.0, math.inf, 5)
        assert shallow != deep
