"""Configuration dataclasses for the planner, obstacles and RL agent."""

from dataclasses import dataclass

from .heuristics import HeuristicId


@dataclass
class AlgoConfig:
    """Configuration for the grid searches."""
    heuristic: HeuristicId = "manhattan"
    mark_cells: bool = True  # write VISITED/CONSIDERING/PATH types for display


@dataclass
class ObstacleConfig:
    """Configuration for dynamic obstacles."""
    speed: int = 1                      # ticks between moves
    trail_length: int = 5               # remembered previous positions (1-10)
    turn_probability: float = 0.2       # RANDOM pattern: chance of a new heading per move
    confident_prediction_steps: int = 3  # RANDOM/CHASE: steps extrapolated before holding still

    def __post_init__(self):
        if self.speed < 1:
            raise ValueError(f"Obstacle speed must be >= 1, got {self.speed}")
        if not (1 <= self.trail_length <= 10):
            raise ValueError(f"Trail length must be between 1 and 10, got {self.trail_length}")
        if not (0.0 <= self.turn_probability <= 1.0):
            raise ValueError(f"Turn probability must be in [0, 1], got {self.turn_probability}")


@dataclass
class PlannerConfig:
    """Configuration for the adaptive planner."""
    prediction_steps: int = 5           # obstacle look-ahead checked against the path
    danger_base_confidence: float = 0.8
    danger_confidence_decay: float = 0.1

    def __post_init__(self):
        if self.prediction_steps < 0:
            raise ValueError(f"Prediction steps must be >= 0, got {self.prediction_steps}")


@dataclass
class RLConfig:
    """Configuration for the Q-Learning agent."""
    learning_rate: float = 0.1
    discount_factor: float = 0.9
    epsilon: float = 0.3
    epsilon_decay: float = 0.99
    epsilon_min: float = 0.1
    max_episodes: int = 500
    reward_goal: float = 10.0
    reward_wall: float = -1.0
    reward_step: float = -0.1
    q_init_scale: float = 0.1           # seed Q-values are drawn from [0, q_init_scale)
    heat_map_threshold: float = 0.1     # below this the heat map is not worth showing

    def __post_init__(self):
        if not (0.0 < self.learning_rate <= 1.0):
            raise ValueError(f"Learning rate must be in (0, 1], got {self.learning_rate}")
        if not (0.0 <= self.discount_factor <= 1.0):
            raise ValueError(f"Discount factor must be in [0, 1], got {self.discount_factor}")
        if not (0.0 <= self.epsilon_min <= self.epsilon <= 1.0):
            raise ValueError(
                f"Expected 0 <= epsilon_min <= epsilon <= 1, got {self.epsilon_min} and {self.epsilon}"
            )
        if self.max_episodes < 0:
            raise ValueError(f"Episode budget must be >= 0, got {self.max_episodes}")
