"""Classic grid searches sharing the A* result type: Dijkstra, greedy best-first and BFS."""

from collections import deque
from typing import Callable, Dict, Optional

from .types import Coord, Grid, GridCell, CellType, PathfindingResult
from .config import AlgoConfig
from .priority_queue import PriorityQueue
from .heuristics import manhattan_distance
from .neighbors import get_neighbors
from .path import reconstruct_path, mark_path, path_coords
from . import astar


def _check_endpoints(start: Coord, target: Coord, grid: Grid):
    if not grid.is_passable(start):
        raise ValueError(f"Start position {start} is out of bounds or not passable")
    if not grid.is_passable(target):
        raise ValueError(f"Target position {target} is out of bounds or not passable")


def _mark(cell: GridCell, cell_type: CellType, config: AlgoConfig):
    if config.mark_cells and cell.type not in (CellType.START, CellType.END):
        cell.type = cell_type


def _finish(target: Coord, grid: Grid, explored: int, config: AlgoConfig) -> PathfindingResult:
    path = reconstruct_path(target, grid)
    if config.mark_cells:
        mark_path(path)
    return PathfindingResult(
        path=path_coords(path),
        path_cost=float(len(path) - 1),
        found=True,
        nodes_explored=explored,
    )


def dijkstra(start: Coord, target: Coord, grid: Grid,
             config: Optional[AlgoConfig] = None) -> PathfindingResult:
    """Uniform-cost search ordered by the cells' ``distance`` field."""
    config = config or AlgoConfig()
    _check_endpoints(start, target, grid)
    grid.reset_search_states()

    open_set = PriorityQueue()
    closed = set()
    start_cell = grid.get_cell(start)
    start_cell.distance = 0.0
    open_set.put(grid.index_of(start), 0.0, 0.0, start)
    explored = 0

    while not open_set.is_empty():
        current_index, current_coord = open_set.get()
        closed.add(current_index)
        explored += 1
        current = grid.cell_at_index(current_index)

        if current_coord == target:
            return _finish(target, grid, explored, config)

        _mark(current, CellType.VISITED, config)

        for neighbor_coord in get_neighbors(current_coord, grid):
            neighbor_index = grid.index_of(neighbor_coord)
            if neighbor_index in closed:
                continue
            neighbor = grid.cell_at_index(neighbor_index)
            distance = current.distance + 1
            if distance < neighbor.distance:
                neighbor.distance = distance
                neighbor.parent = current_index
                open_set.put(neighbor_index, distance, 0.0, neighbor_coord)
                _mark(neighbor, CellType.CONSIDERING, config)

    return PathfindingResult(found=False, nodes_explored=explored)


def greedy_best_first(start: Coord, target: Coord, grid: Grid,
                      config: Optional[AlgoConfig] = None) -> PathfindingResult:
    """
    Expand the cell closest to the target by Manhattan distance.
    Fast, but the path it returns is not guaranteed to be shortest.
    """
    config = config or AlgoConfig()
    _check_endpoints(start, target, grid)
    grid.reset_search_states()

    open_set = PriorityQueue()
    seen = {grid.index_of(start)}
    h_start = manhattan_distance(start, target)
    open_set.put(grid.index_of(start), h_start, h_start, start)
    explored = 0

    while not open_set.is_empty():
        current_index, current_coord = open_set.get()
        explored += 1
        current = grid.cell_at_index(current_index)

        if current_coord == target:
            return _finish(target, grid, explored, config)

        _mark(current, CellType.VISITED, config)

        for neighbor_coord in get_neighbors(current_coord, grid):
            neighbor_index = grid.index_of(neighbor_coord)
            if neighbor_index in seen:
                continue
            seen.add(neighbor_index)
            neighbor = grid.cell_at_index(neighbor_index)
            neighbor.parent = current_index
            h_cost = manhattan_distance(neighbor_coord, target)
            open_set.put(neighbor_index, h_cost, h_cost, neighbor_coord)
            _mark(neighbor, CellType.CONSIDERING, config)

    return PathfindingResult(found=False, nodes_explored=explored)


def breadth_first(start: Coord, target: Coord, grid: Grid,
                  config: Optional[AlgoConfig] = None) -> PathfindingResult:
    """Breadth-first search; shortest on unit-cost grids."""
    config = config or AlgoConfig()
    _check_endpoints(start, target, grid)
    grid.reset_search_states()

    queue = deque([start])
    seen = {grid.index_of(start)}
    explored = 0

    while queue:
        current_coord = queue.popleft()
        current_index = grid.index_of(current_coord)
        explored += 1

        if current_coord == target:
            return _finish(target, grid, explored, config)

        _mark(grid.cell_at_index(current_index), CellType.VISITED, config)

        for neighbor_coord in get_neighbors(current_coord, grid):
            neighbor_index = grid.index_of(neighbor_coord)
            if neighbor_index in seen:
                continue
            seen.add(neighbor_index)
            neighbor = grid.cell_at_index(neighbor_index)
            neighbor.parent = current_index
            queue.append(neighbor_coord)
            _mark(neighbor, CellType.CONSIDERING, config)

    return PathfindingResult(found=False, nodes_explored=explored)


SOLVERS: Dict[str, Callable[..., PathfindingResult]] = {
    "astar": astar.find_path,
    "dijkstra": dijkstra,
    "greedy": greedy_best_first,
    "bfs": breadth_first,
}


def get_solver(name: str) -> Callable[..., PathfindingResult]:
    """Get a search function by name."""
    try:
        return SOLVERS[name]
    except KeyError:
        raise ValueError(f"Unknown solver {name!r}, expected one of {sorted(SOLVERS)}") from None
