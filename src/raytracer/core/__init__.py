"""Core rendering module.

Components:
    vector: Host-side ``Vec3`` and ``Mat3x3``
    color: ``Color`` and the kernel colour arithmetic
    ray: Kernel vector helpers (ray points, reflection)
    lighting: Light fields and the shading model
    tracer: ``trace_ray`` with reflections
    renderer: Whole-frame rendering into an RGBA8 buffer

Only the modules without Taichi fields are imported here. Import lighting,
tracer and renderer directly after ``init_taichi``:
    from raytracer.core.renderer import FrameRenderer
"""

from .color import Color, color_add, color_scale, color_to_vector, vec4
from .ray import cosine_between, ray_at, reflect, vec3
from .vector import UP, Mat3x3, Vec3

__all__ = [
    "Vec3",
    "Mat3x3",
    "UP",
    "Color",
    "color_scale",
    "color_add",
    "color_to_vector",
    "vec4",
    "vec3",
    "ray_at",
    "reflect",
    "cosine_between",
]
