"""Moving obstacles with pattern-driven motion and trajectory prediction."""

import logging
from collections import deque
from typing import Optional, List, Tuple

from .types import (
    Coord, Grid, CellType, Direction, MovementPattern, OBSTACLE_ENTERABLE
)
from .config import ObstacleConfig
from .errors import InvalidPositionError
from .neighbors import step, clamp_to_grid
from ..utils.rng import SeededRNG, default_rng

logger = logging.getLogger(__name__)

MAX_TRAIL_LENGTH = 10


class DynamicObstacle:
    """
    An obstacle that occupies one grid cell and moves by a movement pattern.

    The cell it occupies is marked OBSTACLE; the type it covered is restored
    when it leaves. Motion is throttled by ``speed``: the pattern is applied
    once every ``speed`` calls to move().
    """

    def __init__(self, row: int, col: int, pattern: MovementPattern, grid: Grid,
                 rng: Optional[SeededRNG] = None,
                 config: Optional[ObstacleConfig] = None,
                 direction: Optional[Direction] = None):
        if not grid.is_valid_coord((row, col)):
            raise InvalidPositionError((row, col))

        self.grid = grid
        self.rng = rng or default_rng
        self.config = config or ObstacleConfig()
        self.pattern = pattern
        self.row = row
        self.col = col
        self._speed = self.config.speed
        self._move_counter = 0
        self._covered_type: Optional[CellType] = None

        # Patrol defaults to a horizontal segment of up to five cells around the start
        self.patrol_horizontal = True
        self.patrol_start = max(0, col - 2)
        self.patrol_end = min(grid.size - 1, col + 2)

        if direction is not None:
            self.direction = Direction(direction)
        elif pattern == MovementPattern.PATROL:
            self.direction = Direction.RIGHT
        else:
            self.direction = Direction(self.rng.randrange(4))

        self._trail: deque = deque(maxlen=self.config.trail_length)

    def __repr__(self) -> str:
        return f"DynamicObstacle({self.pattern.name}, row={self.row}, col={self.col}, dir={self.direction.name})"

    @property
    def position(self) -> Coord:
        return (self.row, self.col)

    @property
    def speed(self) -> int:
        return self._speed

    @speed.setter
    def speed(self, value: int):
        self._speed = max(1, int(value))

    @property
    def trail_length(self) -> int:
        return self._trail.maxlen

    @trail_length.setter
    def trail_length(self, value: int):
        length = max(1, min(MAX_TRAIL_LENGTH, int(value)))
        self._trail = deque(self._trail, maxlen=length)

    @property
    def trail(self) -> List[Coord]:
        """Previous positions, oldest first."""
        return list(self._trail)

    @property
    def is_placed(self) -> bool:
        return self._covered_type is not None

    # Grid marking

    def occupy(self):
        """Mark the current cell as held by this obstacle."""
        if self.is_placed:
            return
        cell = self.grid.get_cell(self.position)
        if cell.type not in OBSTACLE_ENTERABLE:
            raise InvalidPositionError(self.position, cell.type)
        self._covered_type = cell.type
        cell.type = CellType.OBSTACLE

    def vacate(self):
        """Remove the obstacle marking, restoring the covered cell type."""
        if not self.is_placed:
            return
        cell = self.grid.get_cell(self.position)
        if cell.type == CellType.OBSTACLE:
            cell.type = self._covered_type
        self._covered_type = None

    # Configuration

    def set_patrol_path(self, start: int, end: int, horizontal: bool):
        """
        Patrol along a row (horizontal) or column between start and end inclusive.

        The obstacle's current coordinate along that axis must lie in the segment.
        """
        if not (0 <= start <= end < self.grid.size):
            raise ValueError(f"Invalid patrol segment [{start}, {end}] for grid size {self.grid.size}")
        axis_value = self.col if horizontal else self.row
        if not (start <= axis_value <= end):
            raise ValueError(
                f"Obstacle at {self.position} is outside patrol segment [{start}, {end}]"
            )
        self.patrol_horizontal = horizontal
        self.patrol_start = start
        self.patrol_end = end
        self.direction = Direction.RIGHT if horizontal else Direction.DOWN

    # Motion

    def move(self, target_row: int, target_col: int) -> bool:
        """
        Advance one tick.

        Args:
            target_row: Row the CHASE pattern steers toward
            target_col: Column the CHASE pattern steers toward

        Returns:
            True if the obstacle changed cell this tick
        """
        self._move_counter += 1
        if self._move_counter < self._speed:
            return False
        self._move_counter = 0

        new_position, self.direction = self._next_position(
            self.position, self.direction, (target_row, target_col)
        )
        if new_position == self.position:
            return False

        self._relocate(new_position)
        return True

    def predict_path(self, steps: int) -> List[Coord]:
        """
        Predict the next ``steps`` positions without changing any state.

        LINEAR and PATROL replay their exact rule. RANDOM and CHASE follow the
        current heading for a few steps, then hold the last position.
        """
        predictions: List[Coord] = []
        if steps <= 0:
            return predictions

        position = self.position
        direction = self.direction

        if self.pattern in (MovementPattern.LINEAR, MovementPattern.PATROL):
            counter = self._move_counter
            for _ in range(steps):
                counter += 1
                if counter >= self._speed:
                    counter = 0
                    if self.pattern == MovementPattern.LINEAR:
                        position, direction = self._linear_step(position, direction)
                    else:
                        position, direction = self._patrol_step(position, direction)
                predictions.append(position)
        else:
            for i in range(steps):
                if i < self.config.confident_prediction_steps:
                    position = clamp_to_grid(step(position, direction), self.grid)
                predictions.append(position)

        return predictions

    def _next_position(self, position: Coord, direction: Direction,
                       target: Coord) -> Tuple[Coord, Direction]:
        if self.pattern == MovementPattern.LINEAR:
            return self._linear_step(position, direction)
        if self.pattern == MovementPattern.RANDOM:
            return self._random_step(position, direction)
        if self.pattern == MovementPattern.PATROL:
            return self._patrol_step(position, direction)
        return self._chase_step(position, direction, target)

    def _relocate(self, new_position: Coord):
        old_position = self.position
        if self.is_placed:
            old_cell = self.grid.get_cell(old_position)
            if old_cell.type == CellType.OBSTACLE:
                old_cell.type = self._covered_type

        new_cell = self.grid.get_cell(new_position)
        self._covered_type = new_cell.type
        new_cell.type = CellType.OBSTACLE

        self._trail.append(old_position)
        self.row, self.col = new_position
        logger.debug("%s obstacle moved %s -> %s", self.pattern.name, old_position, new_position)

    def _is_valid_move(self, coord: Coord) -> bool:
        """In bounds and enterable; the obstacle's own cell counts as free."""
        if coord == self.position:
            return True
        cell = self.grid.get_cell(coord)
        return cell is not None and cell.type in OBSTACLE_ENTERABLE

    # Movement patterns

    def _linear_step(self, position: Coord, direction: Direction) -> Tuple[Coord, Direction]:
        candidate = step(position, direction)
        if self._is_valid_move(candidate):
            return candidate, direction

        direction = direction.reversed()
        candidate = step(position, direction)
        if self._is_valid_move(candidate):
            return candidate, direction
        return position, direction

    def _random_step(self, position: Coord, direction: Direction) -> Tuple[Coord, Direction]:
        if self.rng.chance(self.config.turn_probability):
            direction = Direction(self.rng.randrange(4))

        candidate = step(position, direction)
        if self._is_valid_move(candidate):
            return candidate, direction

        for _ in range(4):
            direction = Direction(self.rng.randrange(4))
            candidate = step(position, direction)
            if self._is_valid_move(candidate):
                return candidate, direction
        return position, direction

    def _in_patrol_segment(self, coord: Coord) -> bool:
        axis_value = coord[1] if self.patrol_horizontal else coord[0]
        return self.patrol_start <= axis_value <= self.patrol_end

    def _patrol_step(self, position: Coord, direction: Direction) -> Tuple[Coord, Direction]:
        if self.patrol_horizontal:
            if direction not in (Direction.RIGHT, Direction.LEFT):
                direction = Direction.RIGHT
        elif direction not in (Direction.DOWN, Direction.UP):
            direction = Direction.DOWN

        candidate = step(position, direction)
        if self._in_patrol_segment(candidate) and self._is_valid_move(candidate):
            return candidate, direction

        direction = direction.reversed()
        candidate = step(position, direction)
        if self._in_patrol_segment(candidate) and self._is_valid_move(candidate):
            return candidate, direction
        return position, direction

    def _chase_step(self, position: Coord, direction: Direction,
                    target: Coord) -> Tuple[Coord, Direction]:
        vertical_diff = target[0] - position[0]
        horizontal_diff = target[1] - position[1]

        if abs(vertical_diff) > abs(horizontal_diff):
            direction = Direction.DOWN if vertical_diff > 0 else Direction.UP
        else:
            direction = Direction.RIGHT if horizontal_diff > 0 else Direction.LEFT

        candidate = step(position, direction)
        if self._is_valid_move(candidate):
            return candidate, direction

        for fallback in Direction:
            if fallback == direction:
                continue
            candidate = step(position, fallback)
            if self._is_valid_move(candidate):
                return candidate, fallback
        return position, direction
