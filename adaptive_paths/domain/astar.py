"""Core A* pathfinding algorithm implementation."""

import logging
from typing import Optional, Set, List

from .types import Coord, Grid, GridCell, CellType, PathfindingResult
from .config import AlgoConfig
from .priority_queue import PriorityQueue
from .heuristics import get_heuristic
from .neighbors import get_neighbors
from .path import reconstruct_path, mark_path, path_coords

logger = logging.getLogger(__name__)


class AStarAlgorithm:
    """
    A* over a 4-connected grid with unit edge cost.

    The search can be driven one expansion at a time with step() or run to
    completion with run_complete(). Scores and parent indices are written to
    the grid cells' scratch fields.
    """

    def __init__(self, config: Optional[AlgoConfig] = None):
        self.config = config or AlgoConfig()
        self.reset()

    def reset(self):
        """Reset the algorithm state."""
        self.open_set = PriorityQueue()
        self.closed_set: Set[int] = set()
        self.start_coord: Optional[Coord] = None
        self.target_coord: Optional[Coord] = None
        self.nodes_explored = 0
        self.current_coord: Optional[Coord] = None
        self.path: List[GridCell] = []

    def initialize(self, start: Coord, target: Coord, grid: Grid):
        """Initialize the algorithm with start and target positions."""
        if not grid.is_valid_coord(start):
            raise ValueError(f"Start coordinate {start} is out of bounds")
        if not grid.is_valid_coord(target):
            raise ValueError(f"Target coordinate {target} is out of bounds")
        if not grid.is_passable(start):
            raise ValueError(f"Start position {start} is not passable")
        if not grid.is_passable(target):
            raise ValueError(f"Target position {target} is not passable")

        self.reset()
        self.start_coord = start
        self.target_coord = target

        grid.reset_search_states()

        start_cell = grid.get_cell(start)
        h_cost = self._calculate_heuristic(start)
        start_cell.g_score = 0.0
        start_cell.f_score = h_cost
        start_cell.parent = None

        self.open_set.put(grid.index_of(start), start_cell.f_score, h_cost, start)

    def step(self, grid: Grid) -> Optional[PathfindingResult]:
        """
        Execute one expansion of the A* algorithm.
        Returns PathfindingResult if the search is complete, None otherwise.
        """
        if self.start_coord is None or self.target_coord is None:
            raise ValueError("Algorithm not initialized")

        result = self.open_set.get()
        if result is None:
            return PathfindingResult(found=False, nodes_explored=self.nodes_explored)

        current_index, current_coord = result
        self.current_coord = current_coord
        self.nodes_explored += 1
        self.closed_set.add(current_index)
        current_cell = grid.cell_at_index(current_index)

        if current_coord == self.target_coord:
            self.path = reconstruct_path(self.target_coord, grid)
            if self.config.mark_cells:
                mark_path(self.path)
            return PathfindingResult(
                path=path_coords(self.path),
                path_cost=current_cell.g_score,
                found=True,
                nodes_explored=self.nodes_explored,
            )

        self._mark(current_cell, CellType.VISITED)

        for neighbor_coord in get_neighbors(current_coord, grid):
            neighbor_index = grid.index_of(neighbor_coord)
            if neighbor_index in self.closed_set:
                continue

            neighbor_cell = grid.cell_at_index(neighbor_index)
            tentative_g = current_cell.g_score + 1

            if tentative_g < neighbor_cell.g_score:
                h_cost = self._calculate_heuristic(neighbor_coord)
                neighbor_cell.g_score = tentative_g
                neighbor_cell.f_score = tentative_g + h_cost
                neighbor_cell.parent = current_index

                self.open_set.put(neighbor_index, neighbor_cell.f_score, h_cost, neighbor_coord)
                self._mark(neighbor_cell, CellType.CONSIDERING)

        return None

    def run_complete(self, grid: Grid) -> PathfindingResult:
        """
        Run the A* algorithm until the frontier is exhausted or the target is reached.
        """
        while True:
            result = self.step(grid)
            if result is not None:
                return result

    def _mark(self, cell: GridCell, cell_type: CellType):
        if self.config.mark_cells and cell.type not in (CellType.START, CellType.END):
            cell.type = cell_type

    def _calculate_heuristic(self, coord: Coord) -> float:
        """Calculate heuristic cost from coordinate to target."""
        if self.target_coord is None:
            return 0.0
        heuristic_func = get_heuristic(self.config.heuristic)
        return heuristic_func(coord, self.target_coord)

    def get_open_set_coords(self) -> List[Coord]:
        """Get all coordinates currently in the open set."""
        return self.open_set.coords()

    def is_complete(self) -> bool:
        """Check if the algorithm has no frontier left."""
        return self.open_set.is_empty()


def find_path(start: Coord, target: Coord, grid: Grid,
              config: Optional[AlgoConfig] = None) -> PathfindingResult:
    """
    Convenience function to run A* pathfinding from start to finish.

    Args:
        start: Starting coordinate
        target: Target coordinate
        grid: Grid to search in
        config: Algorithm configuration

    Returns:
        PathfindingResult with path and statistics
    """
    algorithm = AStarAlgorithm(config)
    try:
        algorithm.initialize(start, target, grid)
    except ValueError as e:
        logger.warning("A* not started: %s", e)
        return PathfindingResult(found=False, nodes_explored=0)
    return algorithm.run_complete(grid)
