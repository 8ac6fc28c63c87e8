"""Unit tests for scene-level intersection.

Tests cover:
- SceneHitRecord miss records
- Sphere storage, clearing and capacity
- Closest hit selection among several spheres
- The both-roots acceptance policy
- Tie breaking by sphere order
"""

import math

import pytest
import taichi as ti

from raytracer.core.color import Color
from raytracer.core.vector import Vec3
from raytracer.scene.model import Sphere

FORWARD = Vec3(0.0, 0.0, 1.0)


class TestSceneHitRecordBasics:
    """Tests for SceneHitRecord."""

    def test_miss_record(self):
        from raytracer.scene.intersection import _make_miss_record

        result_hit = ti.field(dtype=ti.i32, shape=())
        result_t = ti.field(dtype=ti.f64, shape=())
        result_index = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = _make_miss_record()
            result_hit[None] = rec.hit
            result_t[None] = rec.t
            result_index[None] = rec.sphere_index

        test_kernel()
        assert result_hit[None] == 0
        assert result_t[None] == math.inf
        assert result_index[None] == -1


class TestSphereStorage:
    """Tests for sphere storage and management."""

    def test_add_sphere(self):
        from raytracer.scene.intersection import add_sphere, get_sphere_count

        assert get_sphere_count() == 0
        idx = add_sphere(Sphere(1.0, Vec3(1.0, 2.0, 3.0), Color.RED))
        assert idx == 0
        assert get_sphere_count() == 1

    def test_clear_spheres(self):
        from raytracer.scene.intersection import add_sphere, clear_spheres, get_sphere_count

        for i in range(5):
            assert add_sphere(Sphere(0.5, Vec3(float(i), 0.0, 0.0), Color.BLUE)) == i
        assert get_sphere_count() == 5

        clear_spheres()
        assert get_sphere_count() == 0

    def test_capacity_exceeded_raises(self):
        from raytracer.scene.intersection import MAX_SPHERES, add_sphere

        sphere = Sphere(1.0, Vec3.ZERO, Color.RED)
        for _ in range(MAX_SPHERES):
            add_sphere(sphere)
        with pytest.raises(RuntimeError, match="Maximum number of spheres"):
            add_sphere(sphere)


class TestClosestIntersection:
    """Tests for the nearest-hit query."""

    def test_empty_scene_misses(self, make_scene):
        from raytracer.scene.intersection import closest_intersection

        assert closest_intersection(make_scene(), Vec3.ZERO, FORWARD, 1.0, math.inf) is None

    def test_single_sphere_hit(self, make_scene):
        from raytracer.scene.intersection import closest_intersection

        sphere = Sphere(1.0, Vec3(0.0, 0.0, 5.0), Color.RED)
        hit = closest_intersection(make_scene([sphere]), Vec3.ZERO, FORWARD, 1.0, math.inf)

        assert hit is not None
        t, hit_sphere = hit
        assert t == pytest.approx(4.0)
        assert hit_sphere is sphere

    def test_nearest_of_several(self, make_scene):
        from raytracer.scene.intersection import closest_intersection

        far = Sphere(1.0, Vec3(0.0, 0.0, 10.0), Color.BLUE)
        near = Sphere(1.0, Vec3(0.0, 0.0, 5.0), Color.RED)
        off_axis = Sphere(1.0, Vec3(5.0, 0.0, 2.0), Color.GREEN)
        scene = make_scene([far, near, off_axis])

        t, sphere = closest_intersection(scene, Vec3.ZERO, FORWARD, 1.0, math.inf)
        assert t == pytest.approx(4.0)
        assert sphere is near

    def test_far_root_beyond_t_max_rejects_sphere(self, make_scene):
        """Both roots must be in range: t_max between the roots is a miss."""
        from raytracer.scene.intersection import closest_intersection

        scene = make_scene([Sphere(1.0, Vec3(0.0, 0.0, 4.0), Color.RED)])
        assert closest_intersection(scene, Vec3.ZERO, FORWARD, 0.0, 4.0) is None
        assert closest_intersection(scene, Vec3.ZERO, FORWARD, 0.0, 5.0) is not None

    def test_origin_inside_sphere_misses(self, make_scene):
        """A sphere enclosing the origin has a negative root and is rejected."""
        from raytracer.scene.intersection import closest_intersection

        scene = make_scene([Sphere(2.0, Vec3.ZERO, Color.RED)])
        assert closest_intersection(scene, Vec3.ZERO, FORWARD, 0.001, math.inf) is None

    def test_sphere_behind_t_min_misses(self, make_scene):
        from raytracer.scene.intersection import closest_intersection

        scene = make_scene([Sphere(0.25, Vec3(0.0, 0.0, 0.5), Color.RED)])
        assert closest_intersection(scene, Vec3.ZERO, FORWARD, 1.0, math.inf) is None

    def test_inverted_range_misses(self, make_scene):
        from raytracer.scene.intersection import closest_intersection

        scene = make_scene([Sphere(1.0, Vec3(0.0, 0.0, 5.0), Color.RED)])
        assert closest_intersection(scene, Vec3.ZERO, FORWARD, 10.0, 1.0) is None

    def test_tie_goes_to_first_sphere(self, make_scene):
        from raytracer.scene.intersection import closest_intersection

        first = Sphere(1.0, Vec3(0.0, 0.0, 5.0), Color.RED)
        second = Sphere(1.0, Vec3(0.0, 0.0, 5.0), Color.BLUE)

        _, sphere = closest_intersection(make_scene([first, second]), Vec3.ZERO, FORWARD, 1.0, math.inf)
        assert sphere is first

    def test_scene_switch_reuploads(self, make_scene):
        """Querying a different scene replaces the resident spheres."""
        from raytracer.scene.intersection import closest_intersection, get_sphere_count

        one = make_scene([Sphere(1.0, Vec3(0.0, 0.0, 5.0), Color.RED)])
        two = make_scene(
            [
                Sphere(1.0, Vec3(0.0, 0.0, 8.0), Color.BLUE),
                Sphere(1.0, Vec3(0.0, 5.0, 8.0), Color.GREEN),
            ]
        )

        t_one, _ = closest_intersection(one, Vec3.ZERO, FORWARD, 1.0, math.inf)
        t_two, _ = closest_intersection(two, Vec3.ZERO, FORWARD, 1.0, math.inf)
        assert t_one == pytest.approx(4.0)
        assert t_two == pytest.approx(7.0)
        assert get_sphere_count() == 2
