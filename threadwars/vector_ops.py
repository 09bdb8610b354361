"""Two-dimensional vector type and the geometry helpers used by the game."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Vector2:
    """An immutable point or direction in the plane."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vector2) -> Vector2:
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector2) -> Vector2:
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> Vector2:
        return Vector2(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def __neg__(self) -> Vector2:
        return Vector2(-self.x, -self.y)

    def __iter__(self):
        yield self.x
        yield self.y


ZERO = Vector2(0.0, 0.0)


def distance(a: Vector2, b: Vector2) -> float:
    """Euclidean distance between two points."""
    return math.hypot(a.x - b.x, a.y - b.y)


def magnitude(v: Vector2) -> float:
    """Length of a vector."""
    return math.hypot(v.x, v.y)


def normalize(v: Vector2) -> Vector2:
    """Unit vector pointing the same way as ``v``; the zero vector stays zero."""
    length = magnitude(v)
    if length == 0:
        return ZERO
    return Vector2(v.x / length, v.y / length)


def direction(origin: Vector2, target: Vector2) -> Vector2:
    """Unit vector from ``origin`` towards ``target``; zero if they coincide."""
    gap = distance(origin, target)
    if gap == 0:
        return ZERO
    return Vector2((target.x - origin.x) / gap, (target.y - origin.y) / gap)