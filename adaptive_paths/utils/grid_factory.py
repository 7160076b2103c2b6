"""Grid factory for creating, resetting, and randomizing grids."""

import logging
from typing import Optional, Tuple

from ..domain.types import Grid, Coord, CellType, MovementPattern
from ..domain.config import ObstacleConfig
from ..domain.obstacle import DynamicObstacle
from .rng import SeededRNG, default_rng

logger = logging.getLogger(__name__)


def create_empty_grid(size: int) -> Grid:
    """
    Create a new empty square grid.

    Args:
        size: Number of rows and columns (must be > 0)

    Returns:
        New Grid instance with all empty cells

    Raises:
        ValueError: If size <= 0
    """
    if size <= 0:
        raise ValueError(f"Grid size must be positive, got {size}")
    return Grid(size=size)


def reset_grid(grid: Grid, preserve_walls: bool = False) -> None:
    """
    Reset a grid to empty state.

    Args:
        grid: Grid to reset
        preserve_walls: If True, keep wall positions
    """
    for cell in grid:
        if preserve_walls and cell.type == CellType.WALL:
            continue
        cell.type = CellType.EMPTY
        cell.reset_search()


def add_walls(grid: Grid, coords) -> None:
    """Turn the given coordinates into walls."""
    for coord in coords:
        grid.set_cell_type(coord, CellType.WALL)


def add_random_walls(grid: Grid, density: float, rng: Optional[SeededRNG] = None) -> None:
    """
    Add random walls to the grid.

    Args:
        grid: Grid to modify
        density: Wall density (0.0 to 1.0, where 1.0 = all walls)
        rng: Random number generator to use (uses default if None)
    """
    if not (0.0 <= density <= 1.0):
        raise ValueError(f"Density must be between 0.0 and 1.0, got {density}")

    if rng is None:
        rng = default_rng

    empty_coords = grid.coords_of_type(CellType.EMPTY)
    num_walls = min(int(len(grid.cells) * density), len(empty_coords))

    for coord in rng.sample(empty_coords, num_walls):
        grid.set_cell_type(coord, CellType.WALL)


def place_start_and_end(grid: Grid, start: Optional[Coord] = None,
                        end: Optional[Coord] = None,
                        rng: Optional[SeededRNG] = None) -> Tuple[Coord, Coord]:
    """
    Place start and end positions on the grid.

    Args:
        grid: Grid to modify
        start: Specific start coordinate (random if None)
        end: Specific end coordinate (random if None)
        rng: Random number generator to use

    Returns:
        Tuple of (start_coord, end_coord)

    Raises:
        ValueError: If no valid positions available or positions overlap
    """
    if rng is None:
        rng = default_rng

    empty_coords = grid.coords_of_type(CellType.EMPTY)

    if start is None:
        if not empty_coords:
            raise ValueError("No empty cell available for the start position")
        start = rng.choice(empty_coords)
    elif not grid.is_valid_coord(start):
        raise ValueError(f"Start position {start} is out of bounds")
    elif grid.get_type(start) != CellType.EMPTY:
        raise ValueError(f"Start position {start} is not empty")

    available_for_end = [coord for coord in empty_coords if coord != start]
    if end is None:
        if not available_for_end:
            raise ValueError("No empty cell available for the end position")
        end = rng.choice(available_for_end)
    elif not grid.is_valid_coord(end):
        raise ValueError(f"End position {end} is out of bounds")
    elif end == start:
        raise ValueError("Start and end positions cannot be the same")
    elif grid.get_type(end) != CellType.EMPTY:
        raise ValueError(f"End position {end} is not empty")

    grid.set_cell_type(start, CellType.START)
    grid.set_cell_type(end, CellType.END)
    return start, end


def generate_maze_grid(size: int, seed: Optional[int] = None,
                       rng: Optional[SeededRNG] = None) -> Grid:
    """
    Generate a maze by recursive backtracking.

    Passages are carved on odd coordinates; for even sizes the last row and
    column stay solid. Every passage cell is reachable from every other.

    Args:
        size: Grid size (minimum 5)
        seed: Random seed for reproducibility (ignored when rng is given)
        rng: Random number generator to use

    Returns:
        Grid with walls and empty passages, no start or end placed
    """
    if size < 5:
        raise ValueError(f"Maze size must be at least 5, got {size}")

    rng = rng or SeededRNG(seed)
    grid = create_empty_grid(size)
    for cell in grid:
        cell.type = CellType.WALL

    last = size - 2 if size % 2 == 0 else size - 1
    start = (1, 1)
    grid.set_cell_type(start, CellType.EMPTY)
    stack = [start]
    visited = {start}

    while stack:
        row, col = stack[-1]
        candidates = []
        for dr, dc in ((-2, 0), (0, 2), (2, 0), (0, -2)):
            nr, nc = row + dr, col + dc
            if 1 <= nr < last and 1 <= nc < last and (nr, nc) not in visited:
                candidates.append(((nr, nc), (row + dr // 2, col + dc // 2)))

        if not candidates:
            stack.pop()
            continue

        next_cell, wall_between = rng.choice(candidates)
        grid.set_cell_type(wall_between, CellType.EMPTY)
        grid.set_cell_type(next_cell, CellType.EMPTY)
        visited.add(next_cell)
        stack.append(next_cell)

    return grid


def generate_solvable_grid(size: int, wall_density: float = 0.25,
                           seed: Optional[int] = None) -> Tuple[Grid, Coord, Coord]:
    """
    Random walls with start and end placed, retried until end is reachable.

    Returns:
        Tuple of (grid, start_coord, end_coord)
    """
    from ..domain.solvers import breadth_first
    from ..domain.config import AlgoConfig

    rng = SeededRNG(seed)
    for _ in range(100):
        grid = create_empty_grid(size)
        add_random_walls(grid, wall_density, rng)
        start, end = place_start_and_end(grid, rng=rng)
        if breadth_first(start, end, grid, AlgoConfig(mark_cells=False)).found:
            grid.reset_search_states()
            return grid, start, end
    raise ValueError(f"Could not generate a solvable {size}x{size} grid at density {wall_density}")


def place_random_obstacle(grid: Grid, pattern: MovementPattern,
                          rng: Optional[SeededRNG] = None,
                          config: Optional[ObstacleConfig] = None,
                          attempts: int = 100) -> Optional[DynamicObstacle]:
    """
    Create an obstacle on a random empty cell.

    The obstacle is not marked on the grid; hand it to the planner for that.
    Returns None if no empty cell was hit within the given number of attempts.
    """
    if rng is None:
        rng = default_rng

    for _ in range(attempts):
        coord = rng.coord(grid.size)
        if grid.get_type(coord) == CellType.EMPTY:
            return DynamicObstacle(coord[0], coord[1], pattern, grid, rng=rng, config=config)

    logger.warning("No empty cell found for a %s obstacle after %d attempts", pattern.name, attempts)
    return None
