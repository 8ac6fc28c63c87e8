"""Reading and writing scenes as JSON.

File layout::

    {
      "spheres": [
        {"radius": 1.0, "center": [0, -1, 3], "color": [178, 13, 48, 255],
         "specular": 500, "reflectiveness": 0.0}
      ],
      "bg_color": [255, 255, 255, 255],
      "canvas": [320, 240],
      "viewport": [2.0, 1.5],
      "camera_dist": 1.0,
      "lights": [
        {"type": "ambient", "intensity": 0.2},
        {"type": "point", "intensity": 0.6, "position": [2, 1, 0]},
        {"type": "directional", "intensity": 0.2, "dir": [1, 4, 4]}
      ]
    }

``"specular": null`` (or a missing key) means a matte sphere. Loaded scenes
are validated: unlike the dataclasses, files are checked for positive radii,
reflectiveness in [0, 1], non-negative intensities and positive surfaces.

Example:
    >>> from raytracer.scene.serialization import load_scene_file
    >>> scene = load_scene_file("examples/scenes/demo.json")  # doctest: +SKIP
"""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any

from raytracer.core.color import Color
from raytracer.core.vector import Vec3
from raytracer.scene.model import (
    AmbientLight,
    DirectionalLight,
    Light,
    Matte,
    PointLight,
    Scene,
    Specular,
    Sphere,
    Surface,
)

# =============================================================================
# Encoding
# =============================================================================


def _light_to_dict(light: Light) -> dict[str, Any]:
    if isinstance(light, AmbientLight):
        return {"type": "ambient", "intensity": light.intensity}
    if isinstance(light, PointLight):
        return {
            "type": "point",
            "intensity": light.intensity,
            "position": list(light.position.to_tuple()),
        }
    if isinstance(light, DirectionalLight):
        return {"type": "directional", "intensity": light.intensity, "dir": list(light.dir.to_tuple())}
    raise TypeError(f"Unknown light type: {type(light).__name__}")


def _sphere_to_dict(sphere: Sphere) -> dict[str, Any]:
    specular = sphere.specularity.exponent if isinstance(sphere.specularity, Specular) else None
    return {
        "radius": sphere.radius,
        "center": list(sphere.center.to_tuple()),
        "color": list(sphere.color.to_tuple()),
        "specular": specular,
        "reflectiveness": sphere.reflectiveness,
    }


def scene_to_dict(scene: Scene) -> dict[str, Any]:
    """Convert a scene to plain JSON-compatible data."""
    return {
        "spheres": [_sphere_to_dict(sphere) for sphere in scene.spheres],
        "bg_color": list(scene.bg_color.to_tuple()),
        "canvas": [scene.canvas.w, scene.canvas.h],
        "viewport": [scene.viewport.w, scene.viewport.h],
        "camera_dist": scene.camera_dist,
        "lights": [_light_to_dict(light) for light in scene.lights],
    }


# =============================================================================
# Decoding
# =============================================================================


def _require(data: dict[str, Any], key: str, where: str) -> Any:
    if key not in data:
        raise ValueError(f"{where}: missing required key '{key}'")
    return data[key]


def _vec3(values: Any, where: str) -> Vec3:
    if not isinstance(values, (list, tuple)):
        raise ValueError(f"{where}: expected a list of 3 numbers, got {values!r}")
    return Vec3.from_sequence(values)


def _color(values: Any, where: str) -> Color:
    if not isinstance(values, (list, tuple)):
        raise ValueError(f"{where}: expected a list of 4 channels, got {values!r}")
    return Color.from_sequence(values)


def _surface(values: Any, where: str) -> Surface:
    if not isinstance(values, (list, tuple)) or len(values) != 2:
        raise ValueError(f"{where}: expected [w, h], got {values!r}")
    return Surface(float(values[0]), float(values[1]))


def _sphere_from_dict(data: dict[str, Any], index: int) -> Sphere:
    where = f"spheres[{index}]"
    specular = data.get("specular")
    return Sphere(
        radius=float(_require(data, "radius", where)),
        center=_vec3(_require(data, "center", where), f"{where}.center"),
        color=_color(_require(data, "color", where), f"{where}.color"),
        specularity=Matte() if specular is None else Specular(float(specular)),
        reflectiveness=float(data.get("reflectiveness", 0.0)),
    )


def _light_from_dict(data: dict[str, Any], index: int) -> Light:
    where = f"lights[{index}]"
    kind = _require(data, "type", where)
    intensity = float(_require(data, "intensity", where))
    if kind == "ambient":
        return AmbientLight(intensity)
    if kind == "point":
        return PointLight(intensity, _vec3(_require(data, "position", where), f"{where}.position"))
    if kind == "directional":
        return DirectionalLight(intensity, _vec3(_require(data, "dir", where), f"{where}.dir"))
    raise ValueError(f"{where}: unknown light type {kind!r}")


def scene_from_dict(data: dict[str, Any]) -> Scene:
    """Build and validate a scene from data produced by ``scene_to_dict``.

    Args:
        data: Parsed JSON object.

    Returns:
        The decoded scene.

    Raises:
        ValueError: If a key is missing, a value has the wrong shape, or the
            scene fails ``validate_scene``.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Scene must be a JSON object, got {type(data).__name__}")

    scene = Scene(
        spheres=[_sphere_from_dict(s, i) for i, s in enumerate(_require(data, "spheres", "scene"))],
        bg_color=_color(_require(data, "bg_color", "scene"), "bg_color"),
        canvas=_surface(_require(data, "canvas", "scene"), "canvas"),
        viewport=_surface(_require(data, "viewport", "scene"), "viewport"),
        camera_dist=float(_require(data, "camera_dist", "scene")),
        lights=[_light_from_dict(light, i) for i, light in enumerate(_require(data, "lights", "scene"))],
    )
    validate_scene(scene)
    return scene


def validate_scene(scene: Scene) -> None:
    """Check the physical invariants of a scene.

    Raises:
        ValueError: On the first violated invariant.
    """
    for i, sphere in enumerate(scene.spheres):
        if not sphere.radius > 0.0:
            raise ValueError(f"spheres[{i}]: radius must be positive, got {sphere.radius}")
        if not 0.0 <= sphere.reflectiveness <= 1.0:
            raise ValueError(
                f"spheres[{i}]: reflectiveness must be in [0, 1], got {sphere.reflectiveness}"
            )
        if isinstance(sphere.specularity, Specular) and not sphere.specularity.exponent >= 0.0:
            raise ValueError(
                f"spheres[{i}]: specular exponent must be non-negative, "
                f"got {sphere.specularity.exponent}"
            )

    for i, light in enumerate(scene.lights):
        if not light.intensity >= 0.0:
            raise ValueError(f"lights[{i}]: intensity must be non-negative, got {light.intensity}")

    for name, surface in (("canvas", scene.canvas), ("viewport", scene.viewport)):
        if not (surface.w > 0.0 and surface.h > 0.0):
            raise ValueError(f"{name}: width and height must be positive, got {surface.w}x{surface.h}")

    if not math.isfinite(scene.camera_dist) or scene.camera_dist <= 0.0:
        raise ValueError(f"camera_dist must be positive, got {scene.camera_dist}")


def load_scene_file(filepath: str | Path) -> Scene:
    """Read a scene from a JSON file.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the JSON is malformed or the scene is invalid.
    """
    with open(filepath) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"{filepath}: invalid JSON ({e})") from e
    return scene_from_dict(data)


def save_scene_file(scene: Scene, filepath: str | Path) -> None:
    """Write a scene to a JSON file."""
    with open(filepath, "w") as f:
        json.dump(scene_to_dict(scene), f, indent=2)
        f.write("\n")
