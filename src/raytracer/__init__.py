"""Whitted-style sphere ray tracer built on Taichi.

Renders scenes of coloured spheres lit by ambient, point and directional
lights, with hard shadows, Phong highlights and mirror reflections, into an
8-bit RGBA frame.

Subpackages:
    core: Vectors, colours, shading, the ray tracer and the frame renderer
    geometry: Ray-sphere intersection
    scene: Scene description types, upload into Taichi fields, JSON files
    camera: Camera state and keyboard controls
    preview: PNG export, Matplotlib preview and the interactive viewer

Taichi must be initialised with ``raytracer.runtime.init_taichi`` before
importing modules that declare fields (``scene.intersection``,
``scene.storage``, ``core.lighting``, ``core.tracer``, ``core.renderer``,
``camera.pinhole``).
"""

__version__ = "0.1.0"
