"""Seeded randomness shared by obstacle motion, exploration and grid generation."""

import random
from typing import Optional, Sequence, List, TypeVar

T = TypeVar("T")


class SeededRNG:
    """
    Thin wrapper over random.Random.

    Every component that draws random numbers takes one of these, so a run
    is reproduced by seeding the root generator and handing out spawn()ed
    children in a fixed order.
    """

    def __init__(self, seed: Optional[int] = None):
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    def reseed(self, seed: Optional[int]):
        self._seed = seed
        self._rng.seed(seed)

    def random(self) -> float:
        """Float in [0.0, 1.0)."""
        return self._rng.random()

    def chance(self, probability: float) -> bool:
        """True with the given probability."""
        return self._rng.random() < probability

    def randrange(self, n: int) -> int:
        """Integer in [0, n)."""
        return self._rng.randrange(n)

    def coord(self, size: int):
        """Uniform (row, col) on a size x size grid."""
        return (self._rng.randrange(size), self._rng.randrange(size))

    def choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(seq)

    def sample(self, population: Sequence[T], k: int) -> List[T]:
        return self._rng.sample(population, k)

    def spawn(self) -> "SeededRNG":
        """Child generator seeded from this one, for components that need their own stream."""
        return SeededRNG(self._rng.getrandbits(32))


# Used when a component is built without its own generator
default_rng = SeededRNG()


def set_global_seed(seed: Optional[int]):
    default_rng.reseed(seed)
