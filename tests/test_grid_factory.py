"""Tests for grid construction helpers."""

import pytest

from adaptive_paths.domain.types import CellType, MovementPattern
from adaptive_paths.domain.solvers import breadth_first
from adaptive_paths.utils.grid_factory import (
    create_empty_grid, reset_grid, add_walls, add_random_walls, place_start_and_end,
    generate_maze_grid, generate_solvable_grid, place_random_obstacle,
)
from adaptive_paths.utils.rng import SeededRNG

from conftest import bfs_distances


def test_create_empty_grid():
    grid = create_empty_grid(4)

    assert len(grid.cells) == 16
    assert all(cell.type == CellType.EMPTY for cell in grid)
    assert grid.get_cell((2, 3)).coord == (2, 3)
    assert grid.get_cell((4, 0)) is None

    with pytest.raises(ValueError):
        create_empty_grid(0)


def test_reset_grid_can_keep_walls():
    grid = create_empty_grid(5)
    add_walls(grid, [(1, 1), (2, 2)])
    place_start_and_end(grid, (0, 0), (4, 4))

    reset_grid(grid, preserve_walls=True)
    assert grid.coords_of_type(CellType.WALL) == [(1, 1), (2, 2)]
    assert grid.find_first(CellType.START) is None

    reset_grid(grid)
    assert not grid.coords_of_type(CellType.WALL)


def test_random_wall_count():
    grid = create_empty_grid(10)

    add_random_walls(grid, 0.3, SeededRNG(1))

    assert len(grid.coords_of_type(CellType.WALL)) == 30

    with pytest.raises(ValueError):
        add_random_walls(grid, 1.5)


def test_place_start_and_end_validation():
    grid = create_empty_grid(5)
    add_walls(grid, [(0, 0)])

    with pytest.raises(ValueError):
        place_start_and_end(grid, (0, 0), (4, 4))
    with pytest.raises(ValueError):
        place_start_and_end(grid, (1, 1), (1, 1))
    with pytest.raises(ValueError):
        place_start_and_end(grid, (1, 1), (5, 5))


def test_random_start_and_end_are_distinct():
    grid = create_empty_grid(3)

    start, end = place_start_and_end(grid, rng=SeededRNG(8))

    assert start != end
    assert grid.get_type(start) == CellType.START
    assert grid.get_type(end) == CellType.END


@pytest.mark.parametrize("size", [5, 10, 11])
def test_maze_passages_are_connected(size):
    grid = generate_maze_grid(size, seed=size)
    passages = set(grid.coords_of_type(CellType.EMPTY))

    assert (1, 1) in passages
    assert all(0 < row < size - 1 and 0 < col < size - 1 for row, col in passages)
    assert set(bfs_distances(grid, (1, 1))) == passages


def test_maze_is_reproducible():
    first = generate_maze_grid(9, seed=5)
    second = generate_maze_grid(9, seed=5)

    assert [c.type for c in first] == [c.type for c in second]

    with pytest.raises(ValueError):
        generate_maze_grid(4)


def test_solvable_grid():
    grid, start, end = generate_solvable_grid(10, wall_density=0.3, seed=2)

    assert grid.get_type(start) == CellType.START
    assert grid.get_type(end) == CellType.END
    assert breadth_first(start, end, grid).found


def test_random_obstacle_needs_an_empty_cell():
    grid = create_empty_grid(3)
    add_walls(grid, [cell.coord for cell in grid])

    assert place_random_obstacle(grid, MovementPattern.RANDOM, rng=SeededRNG(1)) is None

    grid.set_cell_type((1, 1), CellType.EMPTY)
    obstacle = place_random_obstacle(grid, MovementPattern.RANDOM, rng=SeededRNG(1), attempts=500)
    assert obstacle is not None
    assert obstacle.position == (1, 1)
    assert not obstacle.is_placed
