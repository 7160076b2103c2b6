"""A* planner that tracks moving obstacles and replans when its path is threatened."""

import logging
from typing import Optional, List, Dict

from .types import Coord, Grid, GridCell, CellType, PlannerStats, OBSTACLE_ENTERABLE
from .config import AlgoConfig, PlannerConfig
from .errors import InvalidPositionError
from .astar import AStarAlgorithm
from .obstacle import DynamicObstacle
from .path import path_contains, path_coords

logger = logging.getLogger(__name__)


class AdaptivePlanner:
    """
    Owns the start/end pair, the obstacle list and the current path.

    Replanning is level-triggered: any tick in which a moved obstacle lands
    on, or is predicted to cross, the current path sets ``needs_replanning``.
    The flag stays set until adapt_path() finds a new path.
    """

    def __init__(self, grid: Grid, config: Optional[PlannerConfig] = None):
        self.grid = grid
        self.config = config or PlannerConfig()
        self.start: Optional[Coord] = None
        self.end: Optional[Coord] = None
        self._obstacles: List[DynamicObstacle] = []
        self._current_path: List[GridCell] = []
        self._needs_replanning = False
        self.stats = PlannerStats()

    @property
    def obstacles(self) -> List[DynamicObstacle]:
        return list(self._obstacles)

    @property
    def current_path(self) -> List[GridCell]:
        return list(self._current_path)

    @property
    def current_path_coords(self) -> List[Coord]:
        return path_coords(self._current_path)

    @property
    def needs_replanning(self) -> bool:
        return self._needs_replanning

    @property
    def replan_count(self) -> int:
        return self.stats.replan_count

    @property
    def successful_paths(self) -> int:
        return self.stats.successful_paths

    @property
    def failed_paths(self) -> int:
        return self.stats.failed_paths

    @property
    def success_rate(self) -> float:
        return self.stats.success_rate

    def set_start_end(self, start: Coord, end: Coord):
        """
        Sets start and end points for path finding and marks them START/END.

        The endpoint cells must be free (not WALL or OBSTACLE) so obstacles
        cannot later step onto them. Endpoints from a previous call are cleared.
        """
        allowed = OBSTACLE_ENTERABLE | {CellType.START, CellType.END}
        for name, coord in (("Start", start), ("End", end)):
            if not self.grid.is_valid_coord(coord):
                raise ValueError(f"{name} coordinate {coord} is out of bounds")
            cell_type = self.grid.get_type(coord)
            if cell_type not in allowed:
                raise InvalidPositionError(coord, cell_type)
        if start == end:
            raise ValueError("Start and end positions are the same")

        for old in (self.start, self.end):
            if old is not None and old not in (start, end) \
                    and self.grid.get_type(old) in (CellType.START, CellType.END):
                self.grid.set_cell_type(old, CellType.EMPTY)

        self.grid.set_cell_type(start, CellType.START)
        self.grid.set_cell_type(end, CellType.END)
        self.start = start
        self.end = end

    # Obstacles

    def add_obstacle(self, obstacle: DynamicObstacle):
        """Track an obstacle and mark its cell. An already tracked obstacle is ignored."""
        if obstacle in self._obstacles:
            return
        obstacle.occupy()
        self._obstacles.append(obstacle)
        logger.debug("Added %r", obstacle)

    def remove_obstacle(self, obstacle: DynamicObstacle):
        obstacle.vacate()
        self._obstacles.remove(obstacle)

    def clear_obstacles(self):
        """Remove all obstacles, restoring the cells they covered."""
        for obstacle in self._obstacles:
            obstacle.vacate()
        self._obstacles.clear()

    def update_obstacles(self, target_row: int, target_col: int) -> bool:
        """
        Tick every obstacle once.

        Args:
            target_row: Row that CHASE obstacles steer toward
            target_col: Column that CHASE obstacles steer toward

        Returns:
            True if any obstacle moved
        """
        any_moved = False
        for obstacle in self._obstacles:
            if obstacle.move(target_row, target_col):
                any_moved = True
                self._check_path_collision(obstacle)
        return any_moved

    def _check_path_collision(self, obstacle: DynamicObstacle):
        """Flag a replan if the obstacle is on, or predicted to cross, the path."""
        if not self._current_path:
            return

        if path_contains(self._current_path, obstacle.position):
            logger.info("Obstacle at %s blocks the current path", obstacle.position)
            self._needs_replanning = True
            return

        for predicted in obstacle.predict_path(self.config.prediction_steps):
            if path_contains(self._current_path, predicted):
                logger.info("Obstacle at %s predicted to cross the path at %s",
                            obstacle.position, predicted)
                self._needs_replanning = True
                return

    # Planning

    def find_path(self) -> List[GridCell]:
        """
        Run A* from start to end.

        Returns:
            Cells from start to end inclusive, or an empty list if end is unreachable
        """
        if self.start is None or self.end is None:
            raise ValueError("Start and end must be set before planning")

        algorithm = AStarAlgorithm(AlgoConfig(heuristic="manhattan"))
        algorithm.initialize(self.start, self.end, self.grid)
        result = algorithm.run_complete(self.grid)

        if not result.found:
            self.stats.failed_paths += 1
            logger.info("No path from %s to %s (%d cells explored)",
                        self.start, self.end, result.nodes_explored)
            return []

        self.stats.successful_paths += 1
        logger.debug("Path of %d cells found, %d cells explored",
                     len(algorithm.path), result.nodes_explored)
        return algorithm.path

    def adapt_path(self) -> bool:
        """
        Replan if there is no path yet or a replan is pending.

        Returns:
            True if a valid path is held afterwards, False if replanning failed
            (the stale path is kept)
        """
        if self._current_path and not self._needs_replanning:
            return True

        new_path = self.find_path()
        if not new_path:
            return False

        self._current_path = new_path
        self._needs_replanning = False
        self.stats.replan_count += 1
        return True

    def reset_path(self):
        """Drop the current path and any pending replan."""
        self._current_path = []
        self._needs_replanning = False

    def predict_danger_zones(self) -> Dict[Coord, float]:
        """
        Cells the obstacles are predicted to reach, with a confidence that
        drops with each step of look-ahead. Start, end and blocked cells are skipped.
        """
        zones: Dict[Coord, float] = {}
        for obstacle in self._obstacles:
            for i, coord in enumerate(obstacle.predict_path(self.config.prediction_steps)):
                if not self.grid.is_passable(coord) or coord in (self.start, self.end):
                    continue
                confidence = self.config.danger_base_confidence - self.config.danger_confidence_decay * i
                if confidence <= 0:
                    continue
                zones[coord] = max(zones.get(coord, 0.0), confidence)
        return zones

    def get_predictions(self) -> Dict[int, List[Coord]]:
        """Predicted positions per obstacle, keyed by its index in the obstacle list."""
        return {
            i: obstacle.predict_path(self.config.prediction_steps)
            for i, obstacle in enumerate(self._obstacles)
        }
