"""Tests for JSON scene files.

Tests cover:
- Encoding a scene to plain data
- Decoding defaults (matte spheres, reflectiveness)
- Validation errors with the offending element named
- File round trips and the bundled example scenes
"""

import json
from pathlib import Path

import pytest

from raytracer.core.color import Color
from raytracer.core.vector import Vec3
from raytracer.scene.demo import create_demo_scene
from raytracer.scene.model import (
    AmbientLight,
    DirectionalLight,
    Matte,
    PointLight,
    Specular,
    Sphere,
)
from raytracer.scene.serialization import (
    load_scene_file,
    save_scene_file,
    scene_from_dict,
    scene_to_dict,
    validate_scene,
)

SCENES_DIR = Path(__file__).resolve().parent.parent / "examples" / "scenes"


def _minimal_data(**overrides):
    data = {
        "spheres": [{"radius": 1.0, "center": [0, 0, 4], "color": [255, 0, 0, 255]}],
        "bg_color": [255, 255, 255, 255],
        "canvas": [32, 24],
        "viewport": [2.0, 1.5],
        "camera_dist": 1.0,
        "lights": [{"type": "ambient", "intensity": 1.0}],
    }
    data.update(overrides)
    return data


class TestEncoding:
    """Tests for scene_to_dict."""

    def test_sphere_fields(self, make_scene):
        scene = make_scene([Sphere(1.5, Vec3(1.0, 2.0, 3.0), Color.RED, Specular(10.0), 0.25)])
        (sphere,) = scene_to_dict(scene)["spheres"]

        assert sphere == {
            "radius": 1.5,
            "center": [1.0, 2.0, 3.0],
            "color": [255, 0, 0, 255],
            "specular": 10.0,
            "reflectiveness": 0.25,
        }

    def test_matte_encodes_as_null(self, make_scene):
        scene = make_scene([Sphere(1.0, Vec3.ZERO, Color.RED, Matte())])
        assert scene_to_dict(scene)["spheres"][0]["specular"] is None

    def test_lights(self, make_scene):
        scene = make_scene(
            lights=[
                AmbientLight(0.2),
                PointLight(0.6, Vec3(2.0, 1.0, 0.0)),
                DirectionalLight(0.2, Vec3(1.0, 4.0, 4.0)),
            ]
        )
        assert scene_to_dict(scene)["lights"] == [
            {"type": "ambient", "intensity": 0.2},
            {"type": "point", "intensity": 0.6, "position": [2.0, 1.0, 0.0]},
            {"type": "directional", "intensity": 0.2, "dir": [1.0, 4.0, 4.0]},
        ]

    def test_output_is_json_serialisable(self):
        text = json.dumps(scene_to_dict(create_demo_scene()))
        assert json.loads(text)["canvas"] == [320.0, 240.0]


class TestDecoding:
    """Tests for scene_from_dict."""

    def test_defaults(self):
        scene = scene_from_dict(_minimal_data())
        (sphere,) = scene.spheres

        assert sphere.specularity == Matte()
        assert sphere.reflectiveness == 0.0
        assert sphere.center == Vec3(0.0, 0.0, 4.0)
        assert scene.lights == (AmbientLight(1.0),)

    def test_dict_round_trip(self):
        scene = create_demo_scene(64, 48)
        assert scene_from_dict(scene_to_dict(scene)) == scene

    def test_not_an_object(self):
        with pytest.raises(ValueError, match="JSON object"):
            scene_from_dict([1, 2, 3])

    def test_missing_top_level_key(self):
        data = _minimal_data()
        del data["camera_dist"]
        with pytest.raises(ValueError, match="missing required key 'camera_dist'"):
            scene_from_dict(data)

    def test_missing_sphere_key_names_sphere(self):
        data = _minimal_data(spheres=[{"radius": 1.0, "color": [0, 0, 0, 255]}])
        with pytest.raises(ValueError, match=r"spheres\[0\]: missing required key 'center'"):
            scene_from_dict(data)

    def test_wrong_vector_length(self):
        data = _minimal_data(spheres=[{"radius": 1.0, "center": [0, 0], "color": [0, 0, 0, 255]}])
        with pytest.raises(ValueError, match="3 components"):
            scene_from_dict(data)

    def test_color_channel_out_of_range(self):
        with pytest.raises(ValueError, match="outside"):
            scene_from_dict(_minimal_data(bg_color=[256, 0, 0, 255]))

    def test_unknown_light_type(self):
        data = _minimal_data(lights=[{"type": "spot", "intensity": 1.0}])
        with pytest.raises(ValueError, match=r"lights\[0\]: unknown light type 'spot'"):
            scene_from_dict(data)

    def test_bad_surface(self):
        with pytest.raises(ValueError, match=r"canvas: expected \[w, h\]"):
            scene_from_dict(_minimal_data(canvas=[32]))


class TestValidation:
    """Tests for validate_scene."""

    @pytest.mark.parametrize(
        ("sphere", "message"),
        [
            ({"radius": 0.0}, "radius must be positive"),
            ({"radius": -1.0}, "radius must be positive"),
            ({"reflectiveness": 1.5}, r"reflectiveness must be in \[0, 1\]"),
            ({"reflectiveness": -0.1}, r"reflectiveness must be in \[0, 1\]"),
            ({"specular": -5.0}, "specular exponent must be non-negative"),
        ],
    )
    def test_invalid_sphere(self, sphere, message):
        entry = {"radius": 1.0, "center": [0, 0, 4], "color": [255, 0, 0, 255], **sphere}
        with pytest.raises(ValueError, match=message):
            scene_from_dict(_minimal_data(spheres=[entry]))

    def test_negative_intensity(self):
        data = _minimal_data(lights=[{"type": "ambient", "intensity": -0.5}])
        with pytest.raises(ValueError, match=r"lights\[0\]: intensity must be non-negative"):
            scene_from_dict(data)

    @pytest.mark.parametrize("key", ["canvas", "viewport"])
    def test_empty_surface(self, key):
        with pytest.raises(ValueError, match=f"{key}: width and height must be positive"):
            scene_from_dict(_minimal_data(**{key: [0, 10]}))

    @pytest.mark.parametrize("dist", [0.0, -1.0, float("inf")])
    def test_bad_camera_dist(self, dist):
        with pytest.raises(ValueError, match="camera_dist must be positive"):
            scene_from_dict(_minimal_data(camera_dist=dist))

    def test_demo_scene_is_valid(self):
        validate_scene(create_demo_scene())


class TestFiles:
    """Tests for reading and writing scene files."""

    def test_file_round_trip(self, tmp_path):
        scene = create_demo_scene(100, 50)
        path = tmp_path / "scene.json"
        save_scene_file(scene, path)

        assert path.read_text().endswith("}\n")
        assert load_scene_file(path) == scene

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{ not json")
        with pytest.raises(ValueError, match="invalid JSON"):
            load_scene_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_scene_file(tmp_path / "nope.json")

    def test_bundled_demo_matches_builtin(self):
        assert load_scene_file(SCENES_DIR / "demo.json") == create_demo_scene()

    def test_bundled_mirrors_scene_loads(self):
        scene = load_scene_file(SCENES_DIR / "mirrors.json")
        assert len(scene.spheres) == 3
        assert scene.spheres[2].specularity == Matte()
        assert scene.bg_color == Color(20, 20, 40, 255)
