"""Path reconstruction and validation."""

from typing import List, Iterable
from .types import Coord, Grid, GridCell, CellType


def reconstruct_path(target: Coord, grid: Grid) -> List[GridCell]:
    """
    Reconstruct the path from target back to start using parent indices.
    Returns the cells from start to target (reversed from the parent chain).
    """
    path = []
    current = grid.get_cell(target)

    while current is not None:
        path.append(current)
        if current.parent is None:
            break
        current = grid.cell_at_index(current.parent)

    return list(reversed(path))


def mark_path(path: Iterable[GridCell]):
    """Mark path cells for display, leaving start and end untouched."""
    for cell in path:
        if cell.type not in (CellType.START, CellType.END):
            cell.type = CellType.PATH


def path_coords(path: Iterable[GridCell]) -> List[Coord]:
    return [cell.coord for cell in path]


def path_contains(path: Iterable[GridCell], coord: Coord) -> bool:
    """Check whether any cell of the path sits at the coordinate."""
    return any(cell.row == coord[0] and cell.col == coord[1] for cell in path)


def validate_path(path: List[Coord], grid: Grid) -> bool:
    """
    Validate that a path is walkable and connected.
    Returns True if path is valid.
    """
    if not path:
        return False

    for coord in path:
        if not grid.is_passable(coord):
            return False

    for i in range(1, len(path)):
        from_coord = path[i - 1]
        to_coord = path[i]
        if abs(to_coord[0] - from_coord[0]) + abs(to_coord[1] - from_coord[1]) != 1:
            return False

    return True
