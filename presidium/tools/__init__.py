"""Utility tools for the committee simulation."""

from .rng import DeterministicRNG, RandomSource, make_rng

__all__ = [
    "DeterministicRNG",
    "RandomSource",
    "make_rng",
]
