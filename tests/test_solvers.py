"""Tests for the classic searches that share the A* result type."""

import pytest

from adaptive_paths.domain.astar import find_path
from adaptive_paths.domain.path import validate_path
from adaptive_paths.domain.solvers import (
    dijkstra, greedy_best_first, breadth_first, get_solver, SOLVERS
)
from adaptive_paths.utils.grid_factory import create_empty_grid, add_walls, generate_solvable_grid


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_optimal_solvers_agree_with_astar(seed):
    grid, start, end = generate_solvable_grid(14, wall_density=0.25, seed=seed)
    reference = find_path(start, end, grid)

    for solver in (dijkstra, breadth_first):
        result = solver(start, end, grid)
        assert result.found
        assert result.path_length == reference.path_length
        assert result.path_cost == reference.path_cost
        assert validate_path(result.path, grid)


def test_greedy_finds_a_valid_path_no_shorter_than_optimal():
    grid, start, end = generate_solvable_grid(14, wall_density=0.25, seed=4)
    reference = find_path(start, end, grid)

    result = greedy_best_first(start, end, grid)

    assert result.found
    assert result.path[0] == start and result.path[-1] == end
    assert validate_path(result.path, grid)
    assert result.path_length >= reference.path_length


@pytest.mark.parametrize("name", sorted(SOLVERS))
def test_every_solver_reports_unreachable(name):
    grid = create_empty_grid(5)
    add_walls(grid, [(2, col) for col in range(5)])

    result = get_solver(name)((0, 0), (4, 4), grid)

    assert not result.found
    assert result.path_length == 0


def test_blocked_start_raises():
    grid = create_empty_grid(5)
    add_walls(grid, [(0, 0)])

    with pytest.raises(ValueError):
        dijkstra((0, 0), (4, 4), grid)
    with pytest.raises(ValueError):
        breadth_first((0, 1), (5, 5), grid)


def test_unknown_solver_name():
    with pytest.raises(ValueError, match="Unknown solver"):
        get_solver("depth_first")
