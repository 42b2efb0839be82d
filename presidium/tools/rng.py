"""
Injectable random source for committee simulation.

Elections and votes draw their perturbations from an explicit generator
so that tests can replay them with a fixed seed.
"""

import random
from typing import Protocol, runtime_checkable


@runtime_checkable
class RandomSource(Protocol):
    """The subset of :class:`random.Random` the simulation uses."""

    def random(self) -> float:
        ...

    def randint(self, a: int, b: int) -> int:
        ...

    def uniform(self, a: float, b: float) -> float:
        ...


class DeterministicRNG:
    """Wraps :mod:`random` with deterministic replay support."""

    def __init__(self, seed: int) -> None:
        self._seed = seed & 0xFFFFFFFF
        # Deterministic pseudo-RNG is acceptable for game mechanics
        self._random = random.Random(self._seed)

    @property
    def seed(self) -> int:
        return self._seed

    def random(self) -> float:
        return self._random.random()

    def randint(self, a: int, b: int) -> int:
        return self._random.randint(a, b)

    def uniform(self, a: float, b: float) -> float:
        return self._random.uniform(a, b)

    def choice(self, seq):
        return self._random.choice(seq)


def make_rng(rng: RandomSource | None = None) -> RandomSource:
    """Return the given source, or a fresh unseeded one private to the caller."""
    if rng is not None:
        return rng
    return random.Random()


__all__ = ["DeterministicRNG", "RandomSource", "make_rng"]
