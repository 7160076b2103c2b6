"""Heuristic functions for the grid searches."""

from typing import Callable, Literal
from .types import Coord

HeuristicId = Literal["manhattan", "zero"]


def manhattan_distance(start: Coord, target: Coord) -> float:
    """
    Manhattan (L1) distance heuristic.
    Admissible and consistent for 4-directional movement with unit cost.
    """
    return abs(start[0] - target[0]) + abs(start[1] - target[1])


def zero_heuristic(start: Coord, target: Coord) -> float:
    """Always zero; turns A* into Dijkstra's algorithm."""
    return 0.0


HEURISTICS: dict[HeuristicId, Callable[[Coord, Coord], float]] = {
    "manhattan": manhattan_distance,
    "zero": zero_heuristic,
}


def get_heuristic(heuristic_id: HeuristicId) -> Callable[[Coord, Coord], float]:
    """Get heuristic function by ID."""
    return HEURISTICS[heuristic_id]
