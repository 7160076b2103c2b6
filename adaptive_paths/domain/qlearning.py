"""Q-Learning agent that learns a grid movement policy one transition at a time."""

import logging
from dataclasses import replace
from enum import Enum
from typing import Optional, List, Dict

import numpy as np

from .types import (
    Coord, Grid, CellType, Direction, Episode, TrainingResult, PathfindingResult,
    NUM_ACTIONS, BLOCKING
)
from .config import RLConfig
from .neighbors import step
from ..utils.rng import SeededRNG, default_rng

logger = logging.getLogger(__name__)


class TrainingPhase(Enum):
    """Training state of the agent."""
    NOT_TRAINING = "not_training"
    TRAINING = "training"


class QLearningAgent:
    """
    Tabular Q-Learning over (row, col) states and the four cardinal actions.

    Training is resumable: train_step() advances exactly one environment
    transition so an external scheduler can drive it once per tick.
    """

    def __init__(self, grid: Grid, config: Optional[RLConfig] = None,
                 rng: Optional[SeededRNG] = None):
        self.grid = grid
        self.config = replace(config) if config is not None else RLConfig()
        self.rng = rng or default_rng
        self.q_table: Dict[Coord, np.ndarray] = {}
        self.epsilon = self.config.epsilon
        self.phase = TrainingPhase.NOT_TRAINING
        self.training_history: List[Episode] = []

        self.start: Optional[Coord] = None
        self.end: Optional[Coord] = None
        self.position: Optional[Coord] = None
        self.current_episode = 0
        self.current_step = 0
        self._episode_reward = 0.0
        self._epsilon_used = self.epsilon

    @property
    def is_training(self) -> bool:
        return self.phase == TrainingPhase.TRAINING

    @property
    def num_episodes(self) -> int:
        return self.config.max_episodes

    @num_episodes.setter
    def num_episodes(self, value: int):
        if self.is_training:
            raise RuntimeError("Episode budget cannot change while training")
        if value < 0:
            raise ValueError(f"Episode budget must be >= 0, got {value}")
        self.config.max_episodes = value

    @property
    def max_episode_steps(self) -> int:
        return 2 * self.grid.size * self.grid.size

    # Q-table access

    def get_q_values(self, state: Coord) -> np.ndarray:
        """Action values for a state; unseen states read as zeros."""
        values = self.q_table.get(state)
        if values is None:
            return np.zeros(NUM_ACTIONS)
        return values

    def best_action(self, state: Coord) -> Direction:
        """Greedy action; ties go to the lowest action index."""
        return Direction(int(np.argmax(self.get_q_values(state))))

    def _initialize_q_table(self):
        """Seed every reachable cell with small random action values."""
        self.q_table = {}
        for cell in self.grid:
            if cell.type in BLOCKING:
                continue
            self.q_table[cell.coord] = np.array(
                [self.rng.random() * self.config.q_init_scale for _ in range(NUM_ACTIONS)]
            )

    # Training

    def start_training(self, start: Coord, end: Coord):
        """Reset episode state and the Q-table and enter the training phase."""
        for name, coord in (("Start", start), ("End", end)):
            if not self.grid.is_valid_coord(coord):
                raise ValueError(f"{name} coordinate {coord} is out of bounds")

        self.start = start
        self.end = end
        self.current_episode = 0
        self.current_step = 0
        self.position = start
        self.epsilon = self.config.epsilon
        self.training_history = []
        self._initialize_q_table()
        self.phase = TrainingPhase.TRAINING
        logger.info("Training started: %d episodes from %s to %s",
                    self.num_episodes, start, end)

    def stop_training(self):
        """Leave the training phase; the learned table is kept."""
        if self.is_training:
            logger.info("Training stopped at episode %d/%d", self.current_episode, self.num_episodes)
        self.phase = TrainingPhase.NOT_TRAINING

    def train_step(self) -> bool:
        """
        Execute one environment transition.

        Returns:
            True once the whole training run is complete
        """
        if not self.is_training:
            logger.debug("train_step() called while not training")
            return True
        if self.current_episode >= self.num_episodes:
            self._finish_training()
            return True

        if self.current_step == 0:
            self._reset_episode()

        state = self.position
        action = self.select_action(state)
        next_state, reward, done = self._apply_action(state, action)
        self.position = next_state

        self.update_q_value(state, action, reward, next_state)
        self._episode_reward += reward
        self.current_step += 1

        if done or self.current_step > self.max_episode_steps:
            self._finish_episode(reached_goal=done)
            if self.current_episode >= self.num_episodes:
                self._finish_training()
                return True

        return False

    def select_action(self, state: Coord) -> Direction:
        """Epsilon-greedy action selection."""
        if self.rng.chance(self.epsilon):
            return Direction(self.rng.randrange(NUM_ACTIONS))
        return self.best_action(state)

    def update_q_value(self, state: Coord, action: Direction, reward: float, next_state: Coord):
        """Q(s,a) += alpha * (r + gamma * max Q(s') - Q(s,a))"""
        values = self.q_table.get(state)
        if values is None:
            values = np.zeros(NUM_ACTIONS)
            self.q_table[state] = values

        next_max = float(np.max(self.get_q_values(next_state)))
        target = reward + self.config.discount_factor * next_max
        values[action] += self.config.learning_rate * (target - values[action])

    def decay_epsilon(self):
        """Decay epsilon for less exploration over time."""
        self.epsilon = max(self.config.epsilon_min, self.epsilon * self.config.epsilon_decay)

    def _is_open(self, coord: Coord) -> bool:
        cell = self.grid.get_cell(coord)
        return cell is not None and cell.type not in BLOCKING

    def _apply_action(self, state: Coord, action: Direction) -> tuple[Coord, float, bool]:
        """Return (next_state, reward, done); illegal moves leave the agent in place."""
        next_state = step(state, action)
        if not self._is_open(next_state):
            return state, self.config.reward_wall, False
        if next_state == self.end:
            return next_state, self.config.reward_goal, True
        return next_state, self.config.reward_step, False

    def _reset_episode(self):
        self.position = self.start
        self.current_step = 0
        self._episode_reward = 0.0
        self._epsilon_used = self.epsilon

    def _finish_episode(self, reached_goal: bool):
        episode = Episode(
            number=self.current_episode,
            steps=self.current_step,
            total_reward=self._episode_reward,
            reached_goal=reached_goal,
            epsilon_used=self._epsilon_used,
        )
        self.training_history.append(episode)
        logger.debug("Episode %d: %d steps, goal=%s, reward=%.2f",
                     episode.number, episode.steps, reached_goal, episode.total_reward)

        self.current_episode += 1
        self.current_step = 0
        self.decay_epsilon()

        if self.current_episode % 50 == 0:
            logger.info("Episode %d: recent success rate %.1f%%, epsilon %.3f",
                        self.current_episode, self.recent_success_rate(50) * 100, self.epsilon)

    def _finish_training(self):
        if self.is_training:
            logger.info("Training complete: %d episodes, success rate %.1f%%",
                        self.current_episode, self.success_rate * 100)
        self.phase = TrainingPhase.NOT_TRAINING

    # Policy queries

    def find_path(self) -> PathfindingResult:
        """
        Follow the greedy policy from start.

        Stops at the end cell, after N*N steps, or at the first illegal move;
        the last two give a partial path with found=False.
        """
        if self.start is None or self.end is None:
            return PathfindingResult(found=False)

        current = self.start
        path = [current]
        max_steps = self.grid.size * self.grid.size
        steps = 0

        while current != self.end and steps < max_steps:
            next_coord = step(current, self.best_action(current))
            if not self._is_open(next_coord):
                break
            current = next_coord
            path.append(current)
            steps += 1

        return PathfindingResult(
            path=path,
            path_cost=float(steps),
            steps_taken=steps,
            found=(current == self.end),
        )

    def visualize_heat_map(self) -> Dict[Coord, float]:
        """
        Normalised max action value per open cell.

        Values are divided by the largest value in the table; cells at or
        below the threshold are left out. Empty when nothing significant
        has been learned yet.
        """
        threshold = self.config.heat_map_threshold
        max_q = max((float(np.max(values)) for values in self.q_table.values()), default=0.0)
        if max_q <= threshold:
            return {}

        heat_map: Dict[Coord, float] = {}
        for cell in self.grid:
            if cell.type in (CellType.WALL, CellType.START, CellType.END, CellType.OBSTACLE):
                continue
            normalized = float(np.max(self.get_q_values(cell.coord))) / max_q
            if normalized > threshold:
                heat_map[cell.coord] = min(1.0, normalized)
        return heat_map

    # Metrics

    @property
    def success_rate(self) -> float:
        if not self.training_history:
            return 0.0
        return sum(1 for ep in self.training_history if ep.reached_goal) / len(self.training_history)

    @property
    def average_steps(self) -> float:
        if not self.training_history:
            return 0.0
        return sum(ep.steps for ep in self.training_history) / len(self.training_history)

    def recent_success_rate(self, window: int = 50) -> float:
        recent = self.training_history[-window:]
        if not recent:
            return 0.0
        return sum(1 for ep in recent if ep.reached_goal) / len(recent)

    def training_result(self) -> TrainingResult:
        """Summary of the episodes recorded since the last start_training()."""
        episodes = list(self.training_history)
        total_reward = sum(ep.total_reward for ep in episodes)
        return TrainingResult(
            episodes=episodes,
            total_episodes=len(episodes),
            successful_episodes=sum(1 for ep in episodes if ep.reached_goal),
            average_reward=total_reward / len(episodes) if episodes else 0.0,
            final_epsilon=self.epsilon,
            stopped_early=len(episodes) < self.num_episodes,
        )

    def train(self, start: Coord, end: Coord, episodes: Optional[int] = None) -> TrainingResult:
        """Run a complete training session synchronously."""
        if episodes is not None:
            self.num_episodes = episodes
        self.start_training(start, end)
        while not self.train_step():
            pass
        return self.training_result()
