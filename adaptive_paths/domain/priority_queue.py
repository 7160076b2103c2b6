"""Priority queue for the grid searches with deterministic tie-breaking."""

import heapq
from typing import List, Tuple, Optional
from dataclasses import dataclass

from .types import Coord


@dataclass
class PriorityItem:
    """
    Item in the priority queue with proper comparison for tie-breaking.

    Comparison order:
    1. priority (lower is better)
    2. h_cost (lower is better - favor cells closer to the goal)
    3. coord (row, then column, for determinism)
    """
    priority: float
    h_cost: float
    coord: Coord
    item_id: int
    removed: bool = False

    def __lt__(self, other: 'PriorityItem') -> bool:
        """Define comparison for heap ordering."""
        if self.priority != other.priority:
            return self.priority < other.priority
        if self.h_cost != other.h_cost:
            return self.h_cost < other.h_cost
        return self.coord < other.coord


class PriorityQueue:
    """
    Binary heap keyed by flat cell index.

    Lowering a score re-inserts the cell and marks the old entry removed,
    so the heap never needs an in-place decrease-key.
    """

    def __init__(self):
        self._heap: List[PriorityItem] = []
        self._entry_finder: dict[int, PriorityItem] = {}

    def is_empty(self) -> bool:
        """Check if the queue is empty."""
        return len(self._entry_finder) == 0

    def size(self) -> int:
        """Get the number of items in the queue."""
        return len(self._entry_finder)

    def __len__(self) -> int:
        return self.size()

    def put(self, item_id: int, priority: float, h_cost: float, coord: Coord):
        """
        Add an item to the queue or update its priority.
        An existing entry with lower or equal priority is kept.
        """
        existing = self._entry_finder.get(item_id)
        if existing is not None:
            if existing.priority <= priority:
                return
            existing.removed = True

        entry = PriorityItem(priority, h_cost, coord, item_id)
        self._entry_finder[item_id] = entry
        heapq.heappush(self._heap, entry)

    def get(self) -> Optional[Tuple[int, Coord]]:
        """
        Remove and return the item with lowest priority.
        Returns None if queue is empty.
        """
        while self._heap:
            entry = heapq.heappop(self._heap)
            if not entry.removed:
                del self._entry_finder[entry.item_id]
                return (entry.item_id, entry.coord)
        return None

    def contains(self, item_id: int) -> bool:
        """Check if an item is in the queue."""
        return item_id in self._entry_finder

    def get_priority(self, item_id: int) -> Optional[float]:
        """Get the priority of an item in the queue, or None if not present."""
        entry = self._entry_finder.get(item_id)
        return entry.priority if entry else None

    def coords(self) -> List[Coord]:
        """Coordinates of all live entries, for visualization."""
        return [entry.coord for entry in self._entry_finder.values()]
