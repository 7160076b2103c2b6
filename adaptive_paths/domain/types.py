"""Core type definitions shared by the planner, the obstacles and the RL agent."""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional, Tuple, List, Dict, Iterator

# Coordinate type for grid positions: (row, col)
Coord = Tuple[int, int]


class CellType(Enum):
    """Cell types. OBSTACLE marks a cell held by a moving obstacle."""
    EMPTY = "empty"
    WALL = "wall"
    START = "start"
    END = "end"
    VISITED = "visited"
    CONSIDERING = "considering"
    PATH = "path"
    OBSTACLE = "obstacle"


# Cell types cleared back to EMPTY before a new search
SEARCH_STATES = frozenset({CellType.VISITED, CellType.CONSIDERING, CellType.PATH})

# Cell types an obstacle may move onto
OBSTACLE_ENTERABLE = frozenset({CellType.EMPTY}) | SEARCH_STATES

# Cell types nothing can walk through
BLOCKING = frozenset({CellType.WALL, CellType.OBSTACLE})


class Direction(IntEnum):
    """Cardinal directions, also used as the RL action space."""
    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3

    def reversed(self) -> "Direction":
        return Direction((self + 2) % 4)


DIRECTION_DELTAS: Dict[Direction, Coord] = {
    Direction.UP: (-1, 0),
    Direction.RIGHT: (0, 1),
    Direction.DOWN: (1, 0),
    Direction.LEFT: (0, -1),
}

NUM_ACTIONS = len(Direction)


class MovementPattern(Enum):
    """Movement policies for dynamic obstacles."""
    LINEAR = "linear"   # straight line, bounce back on contact
    RANDOM = "random"   # wander, occasionally turning
    PATROL = "patrol"   # oscillate along a fixed segment
    CHASE = "chase"     # step toward a target coordinate


@dataclass
class GridCell:
    """A single grid cell with its search scratch fields."""
    row: int
    col: int
    type: CellType = CellType.EMPTY
    distance: float = float("inf")
    g_score: float = float("inf")
    f_score: float = float("inf")
    parent: Optional[int] = None  # flat index of the predecessor cell

    @property
    def coord(self) -> Coord:
        return (self.row, self.col)

    def reset_search(self):
        """Reset search scratch fields."""
        self.distance = float("inf")
        self.g_score = float("inf")
        self.f_score = float("inf")
        self.parent = None

    def is_passable(self) -> bool:
        """Check if this cell can be traversed by a search or the agent."""
        return self.type not in BLOCKING


@dataclass
class Grid:
    """Square N x N grid stored as a flat, row-major list of cells."""
    size: int
    cells: List[GridCell] = field(default_factory=list)

    def __post_init__(self):
        if self.size <= 0:
            raise ValueError(f"Grid size must be positive, got {self.size}")
        if not self.cells:
            self.cells = [GridCell(r, c) for r in range(self.size) for c in range(self.size)]
        elif len(self.cells) != self.size * self.size:
            raise ValueError(
                f"Expected {self.size * self.size} cells for size {self.size}, got {len(self.cells)}"
            )

    def __iter__(self) -> Iterator[GridCell]:
        return iter(self.cells)

    def is_valid_coord(self, coord: Coord) -> bool:
        """Check if coordinate is within grid bounds."""
        row, col = coord
        return 0 <= row < self.size and 0 <= col < self.size

    def index_of(self, coord: Coord) -> int:
        return coord[0] * self.size + coord[1]

    def get_cell(self, coord: Coord) -> Optional[GridCell]:
        """Get cell at coordinate, returns None if out of bounds."""
        if not self.is_valid_coord(coord):
            return None
        return self.cells[self.index_of(coord)]

    def cell_at_index(self, index: int) -> GridCell:
        return self.cells[index]

    def get_type(self, coord: Coord) -> Optional[CellType]:
        cell = self.get_cell(coord)
        return cell.type if cell else None

    def set_cell_type(self, coord: Coord, cell_type: CellType):
        """Set the type of the cell at the given coordinate."""
        cell = self.get_cell(coord)
        if cell is None:
            raise ValueError(f"Coordinate {coord} is out of bounds for a {self.size}x{self.size} grid")
        cell.type = cell_type

    def is_passable(self, coord: Coord) -> bool:
        cell = self.get_cell(coord)
        return cell is not None and cell.is_passable()

    def find_first(self, cell_type: CellType) -> Optional[Coord]:
        """Coordinate of the first cell of the given type, in row-major order."""
        for cell in self.cells:
            if cell.type == cell_type:
                return cell.coord
        return None

    def coords_of_type(self, cell_type: CellType) -> List[Coord]:
        return [cell.coord for cell in self.cells if cell.type == cell_type]

    def reset_search_states(self):
        """Clear scratch fields everywhere and drop search visualisation types."""
        for cell in self.cells:
            if cell.type in SEARCH_STATES:
                cell.type = CellType.EMPTY
            cell.reset_search()


@dataclass
class PathfindingResult:
    """Result of a pathfinding operation."""
    path: Optional[List[Coord]] = None
    path_cost: float = 0.0
    nodes_explored: int = 0
    steps_taken: int = 0
    found: bool = False

    @property
    def success(self) -> bool:
        """Whether pathfinding was successful."""
        return self.found and self.path is not None and len(self.path) > 0

    @property
    def path_length(self) -> int:
        return len(self.path) if self.path else 0


@dataclass
class Episode:
    """Represents a single training episode."""
    number: int
    steps: int
    total_reward: float
    reached_goal: bool
    epsilon_used: float


@dataclass
class TrainingResult:
    """Summary of an RL training run."""
    episodes: List[Episode]
    total_episodes: int
    successful_episodes: int
    average_reward: float
    final_epsilon: float
    stopped_early: bool = False

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        return self.successful_episodes / self.total_episodes if self.total_episodes > 0 else 0.0

    @property
    def average_steps(self) -> float:
        return sum(ep.steps for ep in self.episodes) / len(self.episodes) if self.episodes else 0.0


@dataclass
class PlannerStats:
    """Counters exposed by the adaptive planner."""
    replan_count: int = 0
    successful_paths: int = 0
    failed_paths: int = 0

    @property
    def success_rate(self) -> float:
        total = self.successful_paths + self.failed_paths
        return self.successful_paths / total if total > 0 else 0.0
