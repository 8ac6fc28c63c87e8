"""Pytest configuration for raytracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    from raytracer.runtime import init_taichi

    init_taichi(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_loaded_scene():
    """Unload the resident scene before and after each test.

    Tests that upload spheres or lights directly would otherwise leak them
    into the next test.
    """
    # Import here so the fields are declared after ti.init
    from raytracer.scene.storage import unload_scene

    unload_scene()
    yield
    unload_scene()


@pytest.fixture
def make_scene():
    """Factory for small scenes with sensible defaults.

    The default scene has no spheres, a white background, a 32x24 canvas
    with a matching 2x1.5 viewport at distance 1, and no lights.
    """
    from raytracer.core.color import Color
    from raytracer.scene.model import Scene, Surface

    def _make(spheres=(), lights=(), bg_color=None, canvas=(32.0, 24.0), viewport=(2.0, 1.5)):
        return Scene(
            spheres=list(spheres),
            bg_color=Color.WHITE if bg_color is None else bg_color,
            canvas=Surface(*canvas),
            viewport=Surface(*viewport),
            camera_dist=1.0,
            lights=list(lights),
        )

    return _make
