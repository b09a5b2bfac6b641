from __future__ import annotations

import math
from typing import Sequence

from pygame.math import Vector3


def safe_normalize(vector: Vector3) -> Vector3:
    magnitude_sq = vector.length_squared()
    if magnitude_sq == 0.0:
        return Vector3()
    inv = 1.0 / math.sqrt(magnitude_sq)
    return Vector3(vector.x * inv, vector.y * inv, vector.z * inv)


def clamp_length(vector: Vector3, max_length: float) -> Vector3:
    if max_length <= 0:
        return Vector3()
    magnitude_sq = vector.length_squared()
    if magnitude_sq <= max_length * max_length:
        return Vector3(vector)
    inv = max_length / math.sqrt(magnitude_sq)
    return Vector3(vector.x * inv, vector.y * inv, vector.z * inv)


def distance_sq(a: Vector3, b: Vector3) -> float:
    dx = b.x - a.x
    dy = b.y - a.y
    dz = b.z - a.z
    return dx * dx + dy * dy + dz * dz


def to_vector(value: Sequence[float] | Vector3) -> Vector3:
    return Vector3(float(value[0]), float(value[1]), float(value[2]))


def as_tuple(vector: Vector3) -> tuple[float, float, float]:
    return (vector.x, vector.y, vector.z)
