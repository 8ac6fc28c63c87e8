"""Taichi runtime initialisation.

The tracing kernels rely on double precision and on IEEE infinities and NaN
checks (miss sentinels, unbounded ``t_max``, NaN colour channels), so Taichi
must be initialised with ``default_fp=ti.f64`` and ``fast_math=False``.

``init_taichi`` has to run before importing any module that declares Taichi
fields (``scene.intersection``, ``scene.storage``, ``core.lighting``,
``core.tracer``, ``camera.pinhole``, ``core.renderer``): ``ti.init`` discards
fields declared before it.

Example:
    >>> import taichi as ti
    >>> from raytracer.runtime import init_taichi
    >>> init_taichi(arch=ti.cpu)
    >>> from raytracer.core.tracer import trace_ray
"""

from typing import Any

import taichi as ti

# Options every runtime must use; callers may add others (random_seed, ...)
REQUIRED_INIT_OPTIONS: dict[str, Any] = {
    "default_fp": ti.f64,
    "fast_math": False,
}


def init_taichi(arch: Any = None, **kwargs: Any) -> None:
    """Initialise Taichi for the ray tracer.

    Args:
        arch: Taichi backend (``ti.cpu``, ``ti.gpu``, ...). Defaults to CPU.
        **kwargs: Extra ``ti.init`` options. They cannot override the
            required floating point settings.

    Raises:
        ValueError: If ``kwargs`` tries to change a required option.
    """
    for name, value in REQUIRED_INIT_OPTIONS.items():
        if name in kwargs and kwargs[name] != value:
            raise ValueError(f"ti.init option {name}={kwargs[name]!r} is not supported")
    options = {**kwargs, **REQUIRED_INIT_OPTIONS}
    ti.init(arch=ti.cpu if arch is None else arch, **options)
