from __future__ import annotations

import math
import random
from typing import Protocol

from pygame.math import Vector3


class RandomSource(Protocol):
    """Capability used to seed initial agent state."""

    def next_in_box(self, origin: Vector3, half_extents: Vector3) -> Vector3:
        ...

    def next_unit_sphere(self) -> Vector3:
        ...


class DeterministicRng:
    def __init__(self, seed: int):
        self._seed = seed
        self._random = random.Random(seed)

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_in_box(self, origin: Vector3, half_extents: Vector3) -> Vector3:
        return Vector3(
            origin.x + self._random.uniform(-half_extents.x, half_extents.x),
            origin.y + self._random.uniform(-half_extents.y, half_extents.y),
            origin.z + self._random.uniform(-half_extents.z, half_extents.z),
        )

    def next_unit_sphere(self) -> Vector3:
        # Uniform on the sphere: uniform z and azimuth.
        z = self._random.uniform(-1.0, 1.0)
        azimuth = self._random.uniform(0.0, 2.0 * math.pi)
        ring = math.sqrt(max(0.0, 1.0 - z * z))
        return Vector3(ring * math.cos(azimuth), ring * math.sin(azimuth), z)
