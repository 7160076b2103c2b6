"""Headless controller that drives the planner, the obstacles and the RL agent per tick."""

import logging
from dataclasses import dataclass, field
from typing import Optional, List, Dict

from ..domain.types import Grid, Coord, CellType, MovementPattern, PathfindingResult
from ..domain.config import RLConfig, PlannerConfig, ObstacleConfig
from ..domain.obstacle import DynamicObstacle
from ..domain.planner import AdaptivePlanner
from ..domain.qlearning import QLearningAgent
from ..utils.grid_factory import create_empty_grid, place_start_and_end, place_random_obstacle
from ..utils.rng import SeededRNG
from .fsm import EngineStateMachine, EngineState

logger = logging.getLogger(__name__)


@dataclass
class TickReport:
    """Outcome of one adaptive-mode tick."""
    obstacles_moved: bool = False
    replanned: bool = False
    path_available: bool = True


@dataclass
class EngineSnapshot:
    """Everything a display layer needs to draw one frame."""
    state: EngineState
    path: List[Coord] = field(default_factory=list)
    needs_replanning: bool = False
    obstacles: List[Coord] = field(default_factory=list)
    predictions: Dict[int, List[Coord]] = field(default_factory=dict)
    danger_zones: Dict[Coord, float] = field(default_factory=dict)
    trails: Dict[int, List[Coord]] = field(default_factory=dict)
    replan_count: int = 0
    planner_success_rate: float = 0.0
    current_episode: int = 0
    num_episodes: int = 0
    training_success_rate: float = 0.0
    average_steps: float = 0.0
    agent_position: Optional[Coord] = None
    heat_map: Dict[Coord, float] = field(default_factory=dict)

    @property
    def training_progress(self) -> float:
        return self.current_episode / self.num_episodes if self.num_episodes > 0 else 0.0


class SimulationController:
    """
    Owns one grid and the three subsystems that share it.

    A host calls tick_adaptive() or tick_training() on its own schedule and
    reads snapshot() to draw. Nothing here blocks or starts threads.
    """

    def __init__(self, size: int = 20, seed: Optional[int] = None,
                 grid: Optional[Grid] = None,
                 start: Optional[Coord] = None, end: Optional[Coord] = None,
                 rl_config: Optional[RLConfig] = None,
                 planner_config: Optional[PlannerConfig] = None,
                 obstacle_config: Optional[ObstacleConfig] = None):
        self._rng = SeededRNG(seed)
        self._obstacle_rng = self._rng.spawn()
        self._obstacle_config = obstacle_config or ObstacleConfig()

        self.grid = grid if grid is not None else create_empty_grid(size)
        self.start, self.end = self._resolve_endpoints(start, end)

        self.planner = AdaptivePlanner(self.grid, planner_config)
        self.planner.set_start_end(self.start, self.end)
        self.agent = QLearningAgent(self.grid, rl_config, rng=self._rng.spawn())

        self._state_machine = EngineStateMachine()
        self._setup_state_callbacks()

    def _resolve_endpoints(self, start: Optional[Coord], end: Optional[Coord]) -> tuple[Coord, Coord]:
        existing_start = self.grid.find_first(CellType.START)
        existing_end = self.grid.find_first(CellType.END)
        if start is None and end is None and existing_start and existing_end:
            return existing_start, existing_end

        last = self.grid.size - 1
        if start is None:
            start = existing_start or (0, 0)
        if end is None:
            end = existing_end or (last, last)

        # Exactly one START and one END may exist on the grid
        for coord in self.grid.coords_of_type(CellType.START) + self.grid.coords_of_type(CellType.END):
            self.grid.set_cell_type(coord, CellType.EMPTY)
        return place_start_and_end(self.grid, start, end)

    def _setup_state_callbacks(self):
        for state in EngineState:
            self._state_machine.on_state_enter(state, self._log_state_entered)

    def _log_state_entered(self, context: Optional[Dict]):
        logger.info("Engine state: %s", self._state_machine.get_state_description())

    @property
    def state(self) -> EngineState:
        return self._state_machine.current_state

    # Obstacles

    def add_obstacle(self, row: int, col: int, pattern: MovementPattern) -> DynamicObstacle:
        """Place an obstacle at a specific cell."""
        self._stop_adaptive()
        obstacle = DynamicObstacle(row, col, pattern, self.grid,
                                   rng=self._obstacle_rng, config=self._obstacle_config)
        self.planner.add_obstacle(obstacle)
        return obstacle

    def add_random_obstacle(self, pattern: MovementPattern) -> Optional[DynamicObstacle]:
        """Place an obstacle on a random empty cell; None if none was found."""
        self._stop_adaptive()
        obstacle = place_random_obstacle(self.grid, pattern, rng=self._obstacle_rng,
                                         config=self._obstacle_config)
        if obstacle is not None:
            self.planner.add_obstacle(obstacle)
        return obstacle

    def clear_obstacles(self):
        self._stop_adaptive()
        self.planner.clear_obstacles()

    # Adaptive mode

    def start_adaptive(self) -> bool:
        """Plan an initial path and enter adaptive mode. False if no path exists."""
        if not self._state_machine.is_idle():
            return False

        self.planner.reset_path()
        if not self.planner.adapt_path():
            logger.warning("No initial path from %s to %s", self.start, self.end)
            return False
        return self._state_machine.start_adaptive()

    def tick_adaptive(self) -> TickReport:
        """Move the obstacles once and replan if the path was hit or is threatened."""
        if not self._state_machine.is_adaptive():
            return TickReport(path_available=bool(self.planner.current_path))

        moved = self.planner.update_obstacles(self.start[0], self.start[1])
        report = TickReport(obstacles_moved=moved)

        if moved or self.planner.needs_replanning:
            replans_before = self.planner.replan_count
            report.path_available = self.planner.adapt_path()
            report.replanned = self.planner.replan_count > replans_before
            if not report.path_available:
                logger.warning("Path blocked and no alternative found; keeping the stale path")

        return report

    def _stop_adaptive(self):
        if self._state_machine.is_adaptive():
            self._state_machine.reset_to_idle()

    # Training

    def start_training(self, episodes: Optional[int] = None) -> bool:
        """Reset the agent and enter training mode."""
        if not self._state_machine.is_idle():
            return False
        if episodes is not None:
            self.agent.num_episodes = episodes
        self.agent.start_training(self.start, self.end)
        return self._state_machine.start_training()

    def tick_training(self) -> bool:
        """Advance training by one transition. True when training is over."""
        if not self._state_machine.is_training():
            return True
        done = self.agent.train_step()
        if done:
            self._state_machine.reset_to_idle()
        return done

    def run_training(self, episodes: Optional[int] = None) -> bool:
        """Train to completion without an external scheduler."""
        if not self.start_training(episodes):
            return False
        while not self.tick_training():
            pass
        return True

    def find_learned_path(self) -> PathfindingResult:
        return self.agent.find_path()

    def stop(self):
        """Stop whatever is running and return to idle."""
        if self._state_machine.is_training():
            self.agent.stop_training()
        self._state_machine.reset_to_idle()

    def snapshot(self) -> EngineSnapshot:
        """Collect the data a display layer reads after each tick."""
        obstacles = self.planner.obstacles
        return EngineSnapshot(
            state=self.state,
            path=self.planner.current_path_coords,
            needs_replanning=self.planner.needs_replanning,
            obstacles=[obstacle.position for obstacle in obstacles],
            predictions=self.planner.get_predictions(),
            danger_zones=self.planner.predict_danger_zones(),
            trails={i: obstacle.trail for i, obstacle in enumerate(obstacles)},
            replan_count=self.planner.replan_count,
            planner_success_rate=self.planner.success_rate,
            current_episode=self.agent.current_episode,
            num_episodes=self.agent.num_episodes,
            training_success_rate=self.agent.success_rate,
            average_steps=self.agent.average_steps,
            agent_position=self.agent.position,
            heat_map=self.agent.visualize_heat_map(),
        )
