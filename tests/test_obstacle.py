"""Tests for moving obstacles: motion rules, grid marking and prediction."""

import pytest

from adaptive_paths.domain.config import ObstacleConfig
from adaptive_paths.domain.errors import InvalidPositionError
from adaptive_paths.domain.neighbors import step
from adaptive_paths.domain.obstacle import DynamicObstacle
from adaptive_paths.domain.types import CellType, Direction, MovementPattern
from adaptive_paths.utils.grid_factory import (
    create_empty_grid, add_walls, generate_solvable_grid, place_random_obstacle
)
from adaptive_paths.utils.rng import SeededRNG

from conftest import blocked_coords


def make_obstacle(grid, row, col, pattern, direction=None, **config):
    obstacle = DynamicObstacle(row, col, pattern, grid, rng=SeededRNG(99),
                               config=ObstacleConfig(**config), direction=direction)
    obstacle.occupy()
    return obstacle


@pytest.mark.parametrize("pattern", list(MovementPattern))
def test_obstacle_stays_in_bounds_and_off_fixed_cells(pattern):
    grid, start, end = generate_solvable_grid(12, wall_density=0.2, seed=5)
    forbidden = blocked_coords(grid)
    obstacle = place_random_obstacle(grid, pattern, rng=SeededRNG(17))
    assert obstacle is not None
    obstacle.occupy()

    for _ in range(1000):
        obstacle.move(*end)
        assert grid.is_valid_coord(obstacle.position)
        assert obstacle.position not in forbidden
        assert grid.get_type(obstacle.position) == CellType.OBSTACLE

    assert len(grid.coords_of_type(CellType.OBSTACLE)) == 1
    assert grid.get_type(start) == CellType.START
    assert grid.get_type(end) == CellType.END


def test_obstacles_never_share_a_cell():
    grid = create_empty_grid(4)
    rng = SeededRNG(3)
    obstacles = [DynamicObstacle(r, c, MovementPattern.RANDOM, grid, rng=rng)
                 for r, c in ((0, 0), (1, 1), (2, 2), (3, 3))]
    for obstacle in obstacles:
        obstacle.occupy()

    for _ in range(300):
        for obstacle in obstacles:
            obstacle.move(0, 0)
        positions = [obstacle.position for obstacle in obstacles]
        assert len(set(positions)) == len(positions)


@pytest.mark.parametrize("horizontal", [True, False])
def test_patrol_stays_within_segment(horizontal):
    grid = create_empty_grid(10)
    obstacle = make_obstacle(grid, 5, 5, MovementPattern.PATROL)
    obstacle.set_patrol_path(3, 7, horizontal=horizontal)

    seen = set()
    for _ in range(100):
        obstacle.move(0, 0)
        axis, fixed = (obstacle.col, obstacle.row) if horizontal else (obstacle.row, obstacle.col)
        assert 3 <= axis <= 7
        assert fixed == 5
        seen.add(axis)

    assert seen == {3, 4, 5, 6, 7}


def test_patrol_reverses_at_a_wall():
    grid = create_empty_grid(10)
    add_walls(grid, [(5, 6)])
    obstacle = make_obstacle(grid, 5, 5, MovementPattern.PATROL)

    obstacle.move(0, 0)

    assert obstacle.position == (5, 4)
    assert obstacle.direction == Direction.LEFT


def test_default_patrol_segment_is_clamped():
    grid = create_empty_grid(6)
    obstacle = DynamicObstacle(2, 1, MovementPattern.PATROL, grid)

    assert (obstacle.patrol_start, obstacle.patrol_end) == (0, 3)
    assert obstacle.direction == Direction.RIGHT


def test_patrol_segment_must_contain_obstacle():
    grid = create_empty_grid(10)
    obstacle = DynamicObstacle(5, 5, MovementPattern.PATROL, grid)

    with pytest.raises(ValueError):
        obstacle.set_patrol_path(6, 9, horizontal=True)
    with pytest.raises(ValueError):
        obstacle.set_patrol_path(4, 12, horizontal=False)


@pytest.mark.parametrize("pattern", [MovementPattern.LINEAR, MovementPattern.PATROL])
def test_prediction_is_repeatable_and_matches_motion(pattern):
    grid = create_empty_grid(10)
    add_walls(grid, [(5, 8)])
    obstacle = make_obstacle(grid, 5, 5, pattern, direction=Direction.RIGHT)

    first = obstacle.predict_path(8)
    second = obstacle.predict_path(8)
    assert first == second
    assert obstacle.position == (5, 5)
    assert obstacle.trail == []

    actual = []
    for _ in range(8):
        obstacle.move(0, 0)
        actual.append(obstacle.position)
    assert actual == first


def test_linear_prediction_bounces_off_the_edge():
    grid = create_empty_grid(10)
    obstacle = make_obstacle(grid, 5, 5, MovementPattern.LINEAR, direction=Direction.RIGHT)

    assert obstacle.predict_path(5) == [(5, 6), (5, 7), (5, 8), (5, 9), (5, 8)]


def test_prediction_respects_speed():
    grid = create_empty_grid(10)
    obstacle = make_obstacle(grid, 5, 5, MovementPattern.LINEAR, direction=Direction.RIGHT, speed=2)

    assert obstacle.predict_path(4) == [(5, 5), (5, 6), (5, 6), (5, 7)]


@pytest.mark.parametrize("pattern", [MovementPattern.RANDOM, MovementPattern.CHASE])
def test_unpredictable_patterns_extrapolate_then_hold(pattern):
    grid = create_empty_grid(10)
    obstacle = make_obstacle(grid, 5, 5, pattern, direction=Direction.RIGHT)

    assert obstacle.predict_path(5) == [(5, 6), (5, 7), (5, 8), (5, 8), (5, 8)]

    edge = make_obstacle(grid, 0, 8, pattern, direction=Direction.RIGHT)
    assert edge.predict_path(4) == [(0, 9), (0, 9), (0, 9), (0, 9)]


def test_predict_zero_steps():
    grid = create_empty_grid(5)
    obstacle = make_obstacle(grid, 2, 2, MovementPattern.LINEAR)

    assert obstacle.predict_path(0) == []


def test_linear_bounces_off_a_wall():
    grid = create_empty_grid(5)
    add_walls(grid, [(2, 3)])
    obstacle = make_obstacle(grid, 2, 2, MovementPattern.LINEAR, direction=Direction.RIGHT)

    assert obstacle.move(0, 0)
    assert obstacle.position == (2, 1)
    assert obstacle.direction == Direction.LEFT


def test_linear_stays_when_boxed_in():
    grid = create_empty_grid(5)
    add_walls(grid, [(2, 1), (2, 3)])
    obstacle = make_obstacle(grid, 2, 2, MovementPattern.LINEAR, direction=Direction.RIGHT)

    assert not obstacle.move(0, 0)
    assert obstacle.position == (2, 2)
    assert obstacle.trail == []


def test_chase_prefers_the_larger_axis():
    grid = create_empty_grid(5)
    obstacle = make_obstacle(grid, 0, 0, MovementPattern.CHASE)

    obstacle.move(4, 1)
    assert obstacle.position == (1, 0)
    assert obstacle.direction == Direction.DOWN

    obstacle.move(1, 4)
    assert obstacle.position == (1, 1)
    assert obstacle.direction == Direction.RIGHT


def test_chase_falls_back_when_blocked():
    grid = create_empty_grid(5)
    add_walls(grid, [(1, 0)])
    obstacle = make_obstacle(grid, 0, 0, MovementPattern.CHASE)

    obstacle.move(4, 0)

    assert obstacle.position == (0, 1)
    assert obstacle.direction == Direction.RIGHT


def test_speed_throttles_moves():
    grid = create_empty_grid(10)
    obstacle = make_obstacle(grid, 5, 5, MovementPattern.LINEAR, direction=Direction.UP, speed=3)

    assert [obstacle.move(0, 0) for _ in range(6)] == [False, False, True, False, False, True]
    assert obstacle.position == (3, 5)


def test_speed_setter_clamps():
    grid = create_empty_grid(5)
    obstacle = DynamicObstacle(2, 2, MovementPattern.LINEAR, grid)

    obstacle.speed = 0
    assert obstacle.speed == 1


def test_trail_keeps_most_recent_positions():
    grid = create_empty_grid(10)
    obstacle = make_obstacle(grid, 9, 0, MovementPattern.LINEAR, direction=Direction.RIGHT, trail_length=3)

    for _ in range(5):
        obstacle.move(0, 0)

    assert obstacle.position == (9, 5)
    assert obstacle.trail == [(9, 2), (9, 3), (9, 4)]


def test_trail_length_is_clamped():
    grid = create_empty_grid(5)
    obstacle = DynamicObstacle(2, 2, MovementPattern.LINEAR, grid)

    obstacle.trail_length = 25
    assert obstacle.trail_length == 10
    obstacle.trail_length = 0
    assert obstacle.trail_length == 1


def test_moving_restores_the_covered_cell():
    grid = create_empty_grid(5)
    grid.set_cell_type((2, 2), CellType.PATH)
    obstacle = make_obstacle(grid, 2, 2, MovementPattern.LINEAR, direction=Direction.UP)

    assert grid.get_type((2, 2)) == CellType.OBSTACLE
    obstacle.move(0, 0)

    assert grid.get_type((2, 2)) == CellType.PATH
    assert grid.get_type((1, 2)) == CellType.OBSTACLE


def test_occupy_and_vacate():
    grid = create_empty_grid(5)
    obstacle = DynamicObstacle(1, 1, MovementPattern.RANDOM, grid)
    assert not obstacle.is_placed

    obstacle.occupy()
    assert obstacle.is_placed
    assert grid.get_type((1, 1)) == CellType.OBSTACLE

    obstacle.vacate()
    assert not obstacle.is_placed
    assert grid.get_type((1, 1)) == CellType.EMPTY


def test_cannot_occupy_a_wall():
    grid = create_empty_grid(5)
    add_walls(grid, [(1, 1)])
    obstacle = DynamicObstacle(1, 1, MovementPattern.RANDOM, grid)

    with pytest.raises(InvalidPositionError) as excinfo:
        obstacle.occupy()
    assert excinfo.value.cell_type == CellType.WALL


def test_out_of_bounds_construction():
    grid = create_empty_grid(5)

    with pytest.raises(ValueError):
        DynamicObstacle(5, 0, MovementPattern.LINEAR, grid)


@pytest.mark.parametrize("pattern", [MovementPattern.RANDOM, MovementPattern.CHASE])
def test_boxed_in_obstacle_stays_put(pattern):
    grid = create_empty_grid(5)
    add_walls(grid, [(1, 2), (3, 2), (2, 1), (2, 3)])
    obstacle = make_obstacle(grid, 2, 2, pattern, direction=Direction.RIGHT)

    for _ in range(50):
        assert not obstacle.move(0, 0)
        assert obstacle.position == (2, 2)

    assert obstacle.trail == []
    assert grid.get_type((2, 2)) == CellType.OBSTACLE


def test_random_without_turns_keeps_heading():
    grid = create_empty_grid(10)
    obstacle = make_obstacle(grid, 2, 0, MovementPattern.RANDOM,
                             direction=Direction.RIGHT, turn_probability=0.0)

    for _ in range(5):
        assert obstacle.move(0, 0)

    assert obstacle.position == (2, 5)
    assert obstacle.direction == Direction.RIGHT


def test_random_always_turning_changes_heading():
    grid = create_empty_grid(10)
    obstacle = make_obstacle(grid, 5, 5, MovementPattern.RANDOM,
                             direction=Direction.RIGHT, turn_probability=1.0)

    headings = set()
    for _ in range(200):
        obstacle.move(0, 0)
        headings.add(obstacle.direction)

    assert len(headings) > 1


def test_random_repicks_a_legal_heading_when_blocked():
    moved = 0
    for seed in range(20):
        grid = create_empty_grid(5)
        add_walls(grid, [(2, 3)])
        obstacle = DynamicObstacle(2, 2, MovementPattern.RANDOM, grid, rng=SeededRNG(seed),
                                   config=ObstacleConfig(turn_probability=0.0),
                                   direction=Direction.RIGHT)
        obstacle.occupy()

        if obstacle.move(0, 0):
            moved += 1
            assert obstacle.direction != Direction.RIGHT
            assert obstacle.position == step((2, 2), obstacle.direction)
        else:
            assert obstacle.position == (2, 2)
        assert grid.get_type((2, 3)) == CellType.WALL

    assert moved > 0
