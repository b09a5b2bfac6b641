from __future__ import annotations

import pytest
from pygame.math import Vector3

from murmuration.spatial_grid import SpatialGrid


def _positions():
    return [
        Vector3(0, 0, 0),
        Vector3(1, 1, 0),
        Vector3(3, 0.5, 0.5),
        Vector3(6, 6, 6),
        Vector3(-1.5, 0, -1),
    ]


def test_collect_neighbors_matches_bruteforce():
    positions = _positions()
    grid = SpatialGrid(cell_size=2.5)
    grid.rebuild(positions)
    radius = 3.0
    cell_offsets = grid.build_neighbor_cell_offsets(radius)
    out: list[int] = []

    for index, center in enumerate(positions):
        grid.collect_neighbors(positions, index, cell_offsets, radius * radius, out)
        brute = [
            other
            for other, pos in enumerate(positions)
            if other != index and (pos - center).length_squared() < radius * radius
        ]
        assert out == brute


def test_boundary_distance_is_excluded():
    positions = [Vector3(0, 0, 0), Vector3(2, 0, 0)]
    grid = SpatialGrid(cell_size=1.0)
    grid.rebuild(positions)
    out: list[int] = []

    grid.collect_neighbors(positions, 0, grid.build_neighbor_cell_offsets(2.0), 4.0, out)

    assert out == []


def test_rebuild_clears_previous_buckets():
    grid = SpatialGrid(cell_size=1.0)
    grid.rebuild([Vector3(0.5, 0.5, 0.5), Vector3(0.6, 0.5, 0.5)])
    positions = [Vector3(0.5, 0.5, 0.5), Vector3(50, 50, 50)]
    grid.rebuild(positions)
    out: list[int] = []

    grid.collect_neighbors(positions, 0, grid.build_neighbor_cell_offsets(1.0), 1.0, out)

    assert out == []


def test_negative_coordinates_use_floor_cells():
    grid = SpatialGrid(cell_size=2.0)

    assert grid.cell_key(Vector3(-0.5, 0.5, -2.0)) == (-1, 0, -1)


def test_cell_offsets_cover_cube():
    grid = SpatialGrid(cell_size=2.0)

    assert len(grid.build_neighbor_cell_offsets(3.0)) == 5 ** 3


def test_rejects_non_positive_cell_size():
    with pytest.raises(ValueError):
        SpatialGrid(cell_size=0.0)
