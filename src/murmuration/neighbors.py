from __future__ import annotations

from typing import List, Optional, Sequence

from pygame.math import Vector3

from .math3d import distance_sq
from .spatial_grid import SpatialGrid

NeighborSets = List[List[int]]


def find_neighbors_brute_force(positions: Sequence[Vector3], radius: float) -> NeighborSets:
    radius_sq = radius * radius
    count = len(positions)
    result: NeighborSets = []
    for i in range(count):
        position = positions[i]
        result.append([j for j in range(count) if j != i and distance_sq(position, positions[j]) < radius_sq])
    return result


def find_neighbors_grid(positions: Sequence[Vector3], radius: float, cell_size: float) -> NeighborSets:
    grid = SpatialGrid(cell_size)
    grid.rebuild(positions)
    cell_offsets = grid.build_neighbor_cell_offsets(radius)
    radius_sq = radius * radius
    result: NeighborSets = []
    scratch: List[int] = []
    for i in range(len(positions)):
        grid.collect_neighbors(positions, i, cell_offsets, radius_sq, scratch)
        result.append(list(scratch))
    return result


def find_neighbors(positions: Sequence[Vector3], radius: float, cell_size: Optional[float] = None) -> NeighborSets:
    """Neighbor index sets for every position; uses the hash grid when `cell_size` is given."""
    if len(positions) <= 1 or radius <= 0:
        return [[] for _ in positions]
    if cell_size is None or cell_size <= 0:
        return find_neighbors_brute_force(positions, radius)
    # Keep the scanned block bounded when the radius dwarfs the cell size.
    if radius / cell_size > 8:
        cell_size = radius / 8
    return find_neighbors_grid(positions, radius, cell_size)
