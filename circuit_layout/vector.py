"""Small 2D vector helpers used by pins, wires and components."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

_ZERO_TOL = 1e-9


def is_zero(value: float, tol: float = _ZERO_TOL) -> bool:
    return abs(value) < tol


@dataclass(frozen=True)
class Vector2:
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> "Vector2":
        return Vector2(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def __truediv__(self, factor: float) -> "Vector2":
        return Vector2(self.x / factor, self.y / factor)

    def __neg__(self) -> "Vector2":
        return Vector2(-self.x, -self.y)

    def __iter__(self):
        yield self.x
        yield self.y

    @property
    def length(self) -> float:
        return math.hypot(self.x, self.y)

    @property
    def perpendicular(self) -> "Vector2":
        return Vector2(-self.y, self.x)

    def dot(self, other: "Vector2") -> float:
        return self.x * other.x + self.y * other.y

    def is_zero(self) -> bool:
        return is_zero(self.x) and is_zero(self.y)

    def normalized(self) -> "Vector2":
        length = self.length
        if is_zero(length):
            raise ValueError("cannot normalize a zero-length vector")
        return Vector2(self.x / length, self.y / length)

    def is_close(self, other: "Vector2", tol: float = 1e-6) -> bool:
        return abs(self.x - other.x) <= tol and abs(self.y - other.y) <= tol

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def __str__(self) -> str:  # pragma: no cover - trivial string formatting
        return f"({self.x:.6g}, {self.y:.6g})"


def order_offset(
    offset: Vector2, low_x: str, high_x: str, low_y: str, high_y: str
) -> Tuple[Vector2, str, str, str, str]:
    """Swap node pairs so that both components of ``offset`` become non-negative.

    Returns the absolute offset followed by the (possibly swapped) low/high
    node names for each axis.
    """

    dx, dy = offset.x, offset.y
    if dx < 0:
        dx = -dx
        low_x, high_x = high_x, low_x
    if dy < 0:
        dy = -dy
        low_y, high_y = high_y, low_y
    return Vector2(dx, dy), low_x, high_x, low_y, high_y


@dataclass(frozen=True)
class Transform:
    """Linear 2D transform given by the images of the local X and Y axes."""

    x_axis: Vector2 = Vector2(1.0, 0.0)
    y_axis: Vector2 = Vector2(0.0, 1.0)

    @classmethod
    def from_orientation(cls, orientation: Vector2, *, flipped: bool = False, scale: float = 1.0) -> "Transform":
        normal = orientation.normalized()
        perp = normal.perpendicular
        if flipped:
            perp = -perp
        return cls(normal * scale, perp * scale)

    def apply(self, local: Vector2) -> Vector2:
        return self.x_axis * local.x + self.y_axis * local.y

    def apply_normal(self, local: Vector2) -> Vector2:
        result = self.apply(local)
        if result.is_zero():
            return result
        return result.normalized()

    def inverse_apply(self, world: Vector2) -> Vector2:
        a, c = self.x_axis.x, self.y_axis.x
        b, d = self.x_axis.y, self.y_axis.y
        det = a * d - b * c
        if is_zero(det):
            raise ValueError("transform is not invertible")
        return Vector2((d * world.x - c * world.y) / det, (-b * world.x + a * world.y) / det)


IDENTITY = Transform()


__all__ = ["IDENTITY", "Transform", "Vector2", "is_zero", "order_offset"]
