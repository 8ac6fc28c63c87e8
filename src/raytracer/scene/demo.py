"""Demo scene: three spheres on a large ground sphere.

Layout (camera at the origin looking down +z):

- a red shiny sphere in front, resting on the ground,
- a blue half-mirror sphere to the right,
- a green dull sphere to the left,
- a huge orange ground sphere (radius 5000) that is also half-mirror.

Lit by an ambient light, a point light up and to the right of the camera and
a directional light from above.

Example:
    >>> from raytracer.scene.demo import create_demo_scene, create_demo_camera
    >>> scene = create_demo_scene()
    >>> len(scene.spheres), len(scene.lights)
    (4, 3)
"""

from __future__ import annotations

from raytracer.core.color import Color
from raytracer.core.vector import Vec3
from raytracer.scene.model import (
    AmbientLight,
    Camera,
    DirectionalLight,
    PointLight,
    Scene,
    Specular,
    Sphere,
    Surface,
)

DEFAULT_WIDTH = 320
DEFAULT_HEIGHT = 240

# Projection plane is 2 units wide at distance 1
VIEWPORT_WIDTH = 2.0
CAMERA_DIST = 1.0


def create_demo_spheres() -> list[Sphere]:
    """Create the four demo spheres."""
    return [
        Sphere(
            radius=1.0,
            center=Vec3(0.0, -1.0, 3.0),
            color=Color(0xB2, 0x0D, 0x30, 0xFF),
            specularity=Specular(500.0),
            reflectiveness=0.0,
        ),
        Sphere(
            radius=1.0,
            center=Vec3(2.0, 0.0, 4.0),
            color=Color(0x3F, 0x84, 0xE5, 0xFF),
            specularity=Specular(500.0),
            reflectiveness=0.5,
        ),
        Sphere(
            radius=1.0,
            center=Vec3(-2.0, 0.0, 4.0),
            color=Color(0x3F, 0x78, 0x4C, 0xFF),
            specularity=Specular(10.0),
            reflectiveness=0.0,
        ),
        # Ground
        Sphere(
            radius=5000.0,
            center=Vec3(0.0, -5001.0, 0.0),
            color=Color(0xC1, 0x78, 0x17, 0xFF),
            specularity=Specular(1000.0),
            reflectiveness=0.5,
        ),
    ]


def create_demo_scene(width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> Scene:
    """Create the demo scene for a ``width`` x ``height`` canvas.

    The viewport keeps the canvas aspect ratio so pixels stay square.

    Args:
        width: Canvas width in pixels.
        height: Canvas height in pixels.

    Returns:
        The demo scene with a white background.

    Raises:
        ValueError: If either dimension is not positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Canvas must be at least 1x1 pixels, got {width}x{height}")

    return Scene(
        spheres=create_demo_spheres(),
        bg_color=Color.WHITE,
        canvas=Surface(float(width), float(height)),
        viewport=Surface(VIEWPORT_WIDTH, VIEWPORT_WIDTH * height / width),
        camera_dist=CAMERA_DIST,
        lights=[
            AmbientLight(0.2),
            PointLight(0.6, Vec3(2.0, 1.0, 0.0)),
            DirectionalLight(0.2, Vec3(1.0, 4.0, 4.0)),
        ],
    )


def create_demo_camera() -> Camera:
    """Camera at the origin looking down +z."""
    return Camera(position=Vec3.ZERO, rotation=Vec3(0.0, 0.0, 1.0))
