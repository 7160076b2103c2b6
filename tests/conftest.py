"""Shared fixtures for the engine tests."""

from collections import deque

import pytest

from adaptive_paths.domain.types import Grid, CellType
from adaptive_paths.domain.neighbors import get_neighbors
from adaptive_paths.utils.grid_factory import create_empty_grid, place_start_and_end
from adaptive_paths.utils.rng import SeededRNG


@pytest.fixture
def rng():
    return SeededRNG(1234)


@pytest.fixture
def empty_grid():
    """10x10 grid with no walls and no start/end."""
    return create_empty_grid(10)


@pytest.fixture
def corner_grid():
    """10x10 grid with start at (0, 0) and end at (9, 9)."""
    grid = create_empty_grid(10)
    place_start_and_end(grid, (0, 0), (9, 9))
    return grid


def bfs_distances(grid: Grid, source):
    """Shortest 4-connected step counts from source to every reachable cell."""
    distances = {source: 0}
    queue = deque([source])
    while queue:
        current = queue.popleft()
        for neighbor in get_neighbors(current, grid):
            if neighbor not in distances:
                distances[neighbor] = distances[current] + 1
                queue.append(neighbor)
    return distances


def blocked_coords(grid: Grid):
    return {cell.coord for cell in grid if cell.type in (CellType.WALL, CellType.START, CellType.END)}
