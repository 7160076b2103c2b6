"""Exceptions raised by the grid engine."""

from typing import Optional
from .types import Coord, CellType


class InvalidPositionError(ValueError):
    """A coordinate is out of bounds or holds a cell type that is not allowed there."""

    def __init__(self, coord: Coord, cell_type: Optional[CellType] = None):
        self.coord = coord
        self.cell_type = cell_type
        if cell_type is None:
            message = f"Position {coord} is out of bounds"
        else:
            message = f"Position {coord} is not available (cell is {cell_type.value})"
        super().__init__(message)
