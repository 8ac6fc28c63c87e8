"""Clamped 8-bit RGBA colour arithmetic.

Colours are four 8-bit channels. Addition saturates at 255 and scaling by a
float truncates toward zero and clamps to [0, 255]; alpha takes part in both
operations. The same arithmetic is available in two forms:

- ``Color``: an immutable host-side value type.
- ``color_scale`` / ``color_add``: Taichi functions operating on ``vec4``
  values whose components hold integral channel values in [0, 255].

Both forms must agree bit for bit, because frames rendered on the device are
compared against colours computed on the host.

Example:
    >>> from raytracer.core.color import Color
    >>> Color.RED * 0.5 + Color.WHITE * 0.5
    Color(r=254, g=127, b=127, a=254)
"""

import math
from dataclasses import dataclass
from typing import ClassVar

import taichi as ti
import taichi.math as tm

# Kernel-side colour type: (r, g, b, a) with integral values in [0, 255]
vec4 = tm.vec4

CHANNEL_MAX = 255


def _clamped_mul(channel: int, factor: float) -> int:
    """Multiply a channel by ``factor``, truncate and clamp to [0, 255]."""
    product = channel * factor
    if math.isnan(product):
        return 0
    return int(min(max(product, 0.0), float(CHANNEL_MAX)))


def _clamped_add(a: int, b: int) -> int:
    return min(a + b, CHANNEL_MAX)


@dataclass(frozen=True, slots=True)
class Color:
    """An RGBA colour with 8-bit channels.

    Attributes:
        r: Red channel in [0, 255].
        g: Green channel in [0, 255].
        b: Blue channel in [0, 255].
        a: Alpha channel in [0, 255].
    """

    r: int
    g: int
    b: int
    a: int

    RED: ClassVar["Color"]
    GREEN: ClassVar["Color"]
    BLUE: ClassVar["Color"]
    WHITE: ClassVar["Color"]
    BLACK: ClassVar["Color"]

    def __post_init__(self) -> None:
        for name in ("r", "g", "b", "a"):
            value = getattr(self, name)
            if not 0 <= value <= CHANNEL_MAX:
                raise ValueError(f"Channel {name}={value} outside [0, {CHANNEL_MAX}]")

    def __add__(self, other: "Color") -> "Color":
        if not isinstance(other, Color):
            return NotImplemented
        return Color(
            _clamped_add(self.r, other.r),
            _clamped_add(self.g, other.g),
            _clamped_add(self.b, other.b),
            _clamped_add(self.a, other.a),
        )

    def __mul__(self, factor: float) -> "Color":
        if not isinstance(factor, (int, float)):
            return NotImplemented
        return Color(
            _clamped_mul(self.r, factor),
            _clamped_mul(self.g, factor),
            _clamped_mul(self.b, factor),
            _clamped_mul(self.a, factor),
        )

    def __rmul__(self, factor: float) -> "Color":
        return self.__mul__(factor)

    def as_bytes(self) -> bytes:
        """Return the colour as ``[r, g, b, a]`` bytes."""
        return bytes((self.r, self.g, self.b, self.a))

    def to_tuple(self) -> tuple[int, int, int, int]:
        """Return the channels as an ``(r, g, b, a)`` tuple."""
        return (self.r, self.g, self.b, self.a)

    @classmethod
    def from_sequence(cls, values: tuple[float, ...] | list[float]) -> "Color":
        """Build a colour from four channel values.

        Values are truncated to integers (kernel colours are stored as
        integral floats).

        Raises:
            ValueError: If there are not exactly four values or a value is
                outside [0, 255].
        """
        if len(values) != 4:
            raise ValueError(f"Expected 4 channels, got {len(values)}")
        return cls(int(values[0]), int(values[1]), int(values[2]), int(values[3]))


Color.RED = Color(0xFF, 0, 0, 0xFF)
Color.GREEN = Color(0, 0xFF, 0, 0xFF)
Color.BLUE = Color(0, 0, 0xFF, 0xFF)
Color.WHITE = Color(0xFF, 0xFF, 0xFF, 0xFF)
Color.BLACK = Color(0, 0, 0, 0)


# =============================================================================
# Kernel-side colour arithmetic
# =============================================================================


@ti.func
def color_scale(color: vec4, factor: ti.f64) -> vec4:
    """Scale every channel by ``factor`` with truncation and saturation.

    Args:
        color: Channels in [0, 255] stored as integral floats.
        factor: Scale factor. NaN products collapse to 0.

    Returns:
        The scaled colour, still integral and within [0, 255].
    """
    result = vec4(0.0, 0.0, 0.0, 0.0)
    for c in ti.static(range(4)):
        product = color[c] * factor
        if tm.isnan(product):
            product = 0.0
        result[c] = ti.floor(tm.clamp(product, 0.0, 255.0))
    return result


@ti.func
def color_add(a: vec4, b: vec4) -> vec4:
    """Add two colours channel-wise, saturating at 255."""
    return tm.min(a + b, vec4(255.0, 255.0, 255.0, 255.0))


def color_to_vector(color: "Color") -> list[float]:
    """Convert a host colour into the list form written to Taichi fields."""
    return [float(color.r), float(color.g), float(color.b), float(color.a)]
