from __future__ import annotations

import math
from typing import Dict, List, Sequence, Tuple

from pygame.math import Vector3

CellKey = Tuple[int, int, int]


class SpatialGrid:
    """Uniform 3D hash grid over agent indices."""

    def __init__(self, cell_size: float) -> None:
        if cell_size <= 0:
            raise ValueError(f"cell_size must be > 0, got {cell_size}")
        self._cell_size = cell_size
        self._cells: Dict[CellKey, List[int]] = {}
        self._active_keys: List[CellKey] = []

    @property
    def cell_size(self) -> float:
        return self._cell_size

    def build_neighbor_cell_offsets(self, radius: float) -> List[CellKey]:
        cell_range = int(math.ceil(radius / self._cell_size))
        span = range(-cell_range, cell_range + 1)
        return [(dx, dy, dz) for dx in span for dy in span for dz in span]

    def clear(self) -> None:
        for key in self._active_keys:
            bucket = self._cells.get(key)
            if bucket:
                bucket.clear()
        self._active_keys.clear()

    def insert(self, index: int, position: Vector3) -> None:
        key = self.cell_key(position)
        bucket = self._cells.get(key)
        if bucket is None:
            bucket = []
            self._cells[key] = bucket
            self._active_keys.append(key)
        elif not bucket:
            # Bucket exists but was cleared at the start of this step; mark it active again.
            self._active_keys.append(key)
        bucket.append(index)

    def rebuild(self, positions: Sequence[Vector3]) -> None:
        self.clear()
        for index, position in enumerate(positions):
            self.insert(index, position)

    def collect_neighbors(
        self,
        positions: Sequence[Vector3],
        index: int,
        cell_offsets: List[CellKey],
        radius_sq: float,
        out_indices: List[int],
    ) -> None:
        """
        Fill `out_indices` with every indexed agent strictly closer than the radius to `positions[index]`.

        The result is sorted and excludes `index` itself. `cell_offsets` must come from
        `build_neighbor_cell_offsets` for the same radius.
        """

        out_indices.clear()
        position = positions[index]
        base_x, base_y, base_z = self.cell_key(position)
        pos_x = position.x
        pos_y = position.y
        pos_z = position.z
        cells = self._cells
        append = out_indices.append

        for dx, dy, dz in cell_offsets:
            bucket = cells.get((base_x + dx, base_y + dy, base_z + dz))
            if not bucket:
                continue
            for other in bucket:
                if other == index:
                    continue
                pos = positions[other]
                offset_x = pos.x - pos_x
                offset_y = pos.y - pos_y
                offset_z = pos.z - pos_z
                if offset_x * offset_x + offset_y * offset_y + offset_z * offset_z < radius_sq:
                    append(other)
        out_indices.sort()

    def cell_key(self, position: Vector3) -> CellKey:
        size = self._cell_size
        return (int(position.x // size), int(position.y // size), int(position.z // size))
