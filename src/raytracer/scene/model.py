"""Scene description types.

Plain immutable dataclasses describing the world: spheres, lights, the canvas
and viewport surfaces, and the camera. A ``Scene`` is uploaded into Taichi
fields by ``raytracer.scene.storage`` before rendering and is never modified
by the renderer.

The dataclasses do not validate their invariants (positive radius,
reflectiveness in [0, 1], non-negative intensity): a malformed sphere only
degrades the pixels it covers. Scenes read from files are checked by
``raytracer.scene.serialization.validate_scene``.

Example:
    >>> from raytracer.core.color import Color
    >>> from raytracer.core.vector import Vec3
    >>> from raytracer.scene.model import AmbientLight, Matte, Scene, Sphere, Surface
    >>> scene = Scene(
    ...     spheres=[Sphere(1.0, Vec3(0.0, 0.0, 4.0), Color.RED, Matte(), 0.0)],
    ...     bg_color=Color.WHITE,
    ...     canvas=Surface(320.0, 240.0),
    ...     viewport=Surface(2.0, 1.5),
    ...     camera_dist=1.0,
    ...     lights=[AmbientLight(1.0)],
    ... )
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Union

from raytracer.core.color import Color
from raytracer.core.vector import UP, Mat3x3, Vec3

@dataclass(frozen=True)
class Specular:
    """Phong highlight with the given shininess exponent."""

    exponent: float


@dataclass(frozen=True)
class Matte:
    """No specular highlight."""


Specularity = Union[Specular, Matte]


def encode_specularity(specularity: Specularity) -> tuple[int, float]:
    """Encode a specularity for the Taichi fields.

    Returns:
        ``(1, exponent)`` for ``Specular``, ``(0, 0.0)`` for ``Matte``. The
        exponent is passed through unchanged, negative values included.
    """
    if isinstance(specularity, Specular):
        return 1, float(specularity.exponent)
    return 0, 0.0


@dataclass(frozen=True)
class Sphere:
    """A coloured sphere.

    Attributes:
        radius: Sphere radius (should be positive).
        center: Center point in world space.
        color: Base colour.
        specularity: ``Specular(exponent)`` or ``Matte()``.
        reflectiveness: 0.0 (not reflective at all) to 1.0 (a perfect mirror).
    """

    radius: float
    center: Vec3
    color: Color
    specularity: Specularity = field(default_factory=Matte)
    reflectiveness: float = 0.0


@dataclass(frozen=True)
class Surface:
    """Width and height of the canvas (pixels) or viewport (world units)."""

    w: float
    h: float


@dataclass(frozen=True)
class AmbientLight:
    """Light reaching every point regardless of geometry."""

    intensity: float


@dataclass(frozen=True)
class PointLight:
    """Light emitted from a single position."""

    intensity: float
    position: Vec3


@dataclass(frozen=True)
class DirectionalLight:
    """Light arriving from a fixed direction (``dir`` points toward the light)."""

    intensity: float
    dir: Vec3


Light = Union[AmbientLight, PointLight, DirectionalLight]


@dataclass(frozen=True)
class Scene:
    """The world to render.

    Attributes:
        spheres: Spheres in iteration order; the earlier sphere wins exact
            distance ties.
        bg_color: Colour of rays that hit nothing.
        canvas: Canvas size in pixels.
        viewport: Size of the projection plane in world units.
        camera_dist: Distance from the camera to the projection plane.
        lights: Lights, summed in order.
    """

    spheres: tuple[Sphere, ...]
    bg_color: Color
    canvas: Surface
    viewport: Surface
    camera_dist: float
    lights: tuple[Light, ...]

    def __post_init__(self) -> None:
        # Accept any sequence but store tuples so the scene stays immutable
        object.__setattr__(self, "spheres", tuple(self.spheres))
        object.__setattr__(self, "lights", tuple(self.lights))


@dataclass(frozen=True)
class Camera:
    """Camera position and forward direction.

    The camera looks along ``rotation``; the default ``(0, 0, 1)`` is the
    canonical view down the +z axis.

    Attributes:
        position: Camera position in world space; primary rays start here.
        rotation: Forward direction (need not be unit length).
    """

    position: Vec3 = Vec3.ZERO
    rotation: Vec3 = Vec3(0.0, 0.0, 1.0)

    def orientation(self) -> Mat3x3:
        """Return the matrix mapping camera-space directions to world space."""
        return Mat3x3.rotation_mat(self.rotation, UP)

    def moved(self, offset: Vec3) -> Camera:
        """Return a copy translated by ``offset``."""
        return replace(self, position=self.position + offset)

    def turned(self, offset: Vec3) -> Camera:
        """Return a copy whose forward direction is shifted by ``offset``."""
        return replace(self, rotation=self.rotation + offset)
