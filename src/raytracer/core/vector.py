"""Host-side vector and matrix algebra.

These are plain immutable Python value types used to describe scenes and
cameras before they are uploaded into Taichi fields. Kernel code uses
``taichi.math`` vectors instead (see ``raytracer.core.ray``).

Degenerate inputs follow IEEE semantics rather than raising: normalising a
zero vector produces NaN components, and ``Mat3x3.rotation_mat`` checks for
that case explicitly.

Example:
    >>> from raytracer.core.vector import Vec3, Mat3x3, UP
    >>> forward = Vec3(0.0, 0.5, 1.0).normalize()
    >>> rotation = Mat3x3.rotation_mat(forward, UP)
    >>> direction = rotation @ Vec3(0.0, 0.0, 1.0)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True, slots=True)
class Vec3:
    """Immutable 3D vector with double-precision components."""

    x: float
    y: float
    z: float

    ZERO: ClassVar[Vec3]

    def __add__(self, other: Vec3) -> Vec3:
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __neg__(self) -> Vec3:
        return Vec3(-self.x, -self.y, -self.z)

    def __sub__(self, other: Vec3) -> Vec3:
        return self + -other

    def __mul__(self, scalar: float) -> Vec3:
        if not isinstance(scalar, (int, float)):
            return NotImplemented
        return Vec3(scalar * self.x, scalar * self.y, scalar * self.z)

    def __rmul__(self, scalar: float) -> Vec3:
        return self.__mul__(scalar)

    def __truediv__(self, scalar: float) -> Vec3:
        if not isinstance(scalar, (int, float)):
            return NotImplemented
        if scalar == 0:
            # Zero divisor gives signed inf, or nan for 0/0, so normalize never raises
            sign = math.copysign(1.0, scalar)
            return Vec3(
                *(
                    math.copysign(math.inf, c) * sign if c and not math.isnan(c) else math.nan
                    for c in (self.x, self.y, self.z)
                )
            )
        return Vec3(self.x / scalar, self.y / scalar, self.z / scalar)

    def dot(self, other: Vec3) -> float:
        """Return the dot product with another vector."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vec3) -> Vec3:
        """Return the right-handed cross product ``self x other``."""
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length(self) -> float:
        """Return the Euclidean norm."""
        return math.sqrt(self.dot(self))

    def normalize(self) -> Vec3:
        """Return ``self / self.length()``.

        A zero-length vector yields NaN components.
        """
        return self / self.length()

    def angle_between(self, other: Vec3) -> float:
        """Return the angle to ``other`` in radians.

        NaN when either vector has zero length.
        """
        denominator = self.length() * other.length()
        if denominator == 0:
            return math.nan
        cosine = self.dot(other) / denominator
        # Rounding can push the cosine just outside [-1, 1]
        return math.acos(min(1.0, max(-1.0, cosine)))

    def to_tuple(self) -> tuple[float, float, float]:
        """Return the components as an ``(x, y, z)`` tuple."""
        return (self.x, self.y, self.z)

    @classmethod
    def from_sequence(cls, values: tuple[float, ...] | list[float]) -> Vec3:
        """Build a vector from a three-element sequence.

        Raises:
            ValueError: If ``values`` does not have exactly three elements.
        """
        if len(values) != 3:
            raise ValueError(f"Expected 3 components, got {len(values)}")
        return cls(float(values[0]), float(values[1]), float(values[2]))


Vec3.ZERO = Vec3(0.0, 0.0, 0.0)

# Reference "up" direction for camera orientation
UP = Vec3(0.0, 0.0, 1.0)


@dataclass(frozen=True, slots=True)
class Mat3x3:
    """3x3 matrix stored as three column vectors."""

    col1: Vec3
    col2: Vec3
    col3: Vec3

    IDENTITY: ClassVar[Mat3x3]

    def __matmul__(self, vector: Vec3) -> Vec3:
        return self.col1 * vector.x + self.col2 * vector.y + self.col3 * vector.z

    def __mul__(self, vector: Vec3) -> Vec3:
        if not isinstance(vector, Vec3):
            return NotImplemented
        return self @ vector

    @classmethod
    def rotation_mat(cls, direction: Vec3, up: Vec3) -> Mat3x3:
        """Build the orientation matrix that turns the +z axis toward ``direction``.

        The rows of the matrix are the orthonormal basis
        ``x_axis = normalize(up x direction)``,
        ``y_axis = normalize(direction x x_axis)`` and ``direction``.

        Args:
            direction: Forward direction of the camera.
            up: Reference up vector (must be nonzero).

        Returns:
            The orientation matrix, or ``IDENTITY`` when ``direction`` is
            parallel to ``up`` (the basis is undefined in that case).
        """
        x_axis = up.cross(direction).normalize()
        if math.isnan(x_axis.x):
            return cls.IDENTITY
        y_axis = direction.cross(x_axis).normalize()

        return cls(
            col1=Vec3(x_axis.x, y_axis.x, direction.x),
            col2=Vec3(x_axis.y, y_axis.y, direction.y),
            col3=Vec3(x_axis.z, y_axis.z, direction.z),
        )

    def columns(self) -> tuple[Vec3, Vec3, Vec3]:
        """Return the three column vectors."""
        return (self.col1, self.col2, self.col3)


Mat3x3.IDENTITY = Mat3x3(
    col1=Vec3(1.0, 0.0, 0.0),
    col2=Vec3(0.0, 1.0, 0.0),
    col3=Vec3(0.0, 0.0, 1.0),
)
