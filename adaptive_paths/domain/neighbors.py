"""Neighbor generation and movement helpers for 4-connected grids."""

from typing import List
from .types import Coord, Grid, Direction, DIRECTION_DELTAS


def step(coord: Coord, direction: Direction) -> Coord:
    """Coordinate one cell away in the given direction (may be out of bounds)."""
    dr, dc = DIRECTION_DELTAS[direction]
    return (coord[0] + dr, coord[1] + dc)


def get_neighbors(coord: Coord, grid: Grid) -> List[Coord]:
    """
    Passable in-bound neighbors of a coordinate.
    Order is UP, RIGHT, DOWN, LEFT.
    """
    neighbors = []
    for direction in Direction:
        new_coord = step(coord, direction)
        if grid.is_passable(new_coord):
            neighbors.append(new_coord)
    return neighbors


def clamp_to_grid(coord: Coord, grid: Grid) -> Coord:
    """Clamp a coordinate into the grid bounds."""
    last = grid.size - 1
    return (max(0, min(last, coord[0])), max(0, min(last, coord[1])))

