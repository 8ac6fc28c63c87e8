"""Scene description and management.

Components:
    model: Immutable scene types (spheres, lights, surfaces, camera)
    serialization: JSON scene files
    demo: The built-in demo scene
    intersection: Sphere fields and nearest-hit queries (Taichi fields)
    storage: Uploading a scene into the fields (Taichi fields)

intersection and storage are not imported here; import them after
``init_taichi``.
"""

from .demo import create_demo_camera, create_demo_scene
from .model import (
    AmbientLight,
    Camera,
    DirectionalLight,
    Light,
    Matte,
    PointLight,
    Scene,
    Specular,
    Specularity,
    Sphere,
    Surface,
)
from .serialization import (
    load_scene_file,
    save_scene_file,
    scene_from_dict,
    scene_to_dict,
    validate_scene,
)

__all__ = [
    # Model
    "Scene",
    "Sphere",
    "Surface",
    "Camera",
    "Specular",
    "Matte",
    "Specularity",
    "AmbientLight",
    "PointLight",
    "DirectionalLight",
    "Light",
    # Files
    "scene_to_dict",
    "scene_from_dict",
    "validate_scene",
    "load_scene_file",
    "save_scene_file",
    # Demo
    "create_demo_scene",
    "create_demo_camera",
]
