"""
Random sources for the Tesouro engine.

Every coin flip, weighted draw and reshuffle goes through a RandomSource,
so a game can be replayed from a seed or driven by a fixed script in tests.

Usage:
    rng = SeededRandom(42)
    rng.next()                 # float in [0, 1)
    choose_index(rng, 5)       # int in [0, 5)
    shuffle(rng, cards)        # new list, Fisher-Yates order
"""

import random
from typing import Protocol, Sequence, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class RandomSource(Protocol):
    """
    Source of uniform floats in [0, 1).

    Implementations:
    - SeededRandom: random.Random behind a seed (production, replays)
    - ScriptedRandom: fixed sequence of values (testing)
    """

    def next(self) -> float:
        """Return the next float in [0, 1)."""
        ...


class SeededRandom:
    """RandomSource backed by a private random.Random instance."""

    def __init__(self, seed: int | None = None):
        self.seed = seed
        self._random = random.Random(seed)

    def next(self) -> float:
        return self._random.random()


class ScriptedRandom:
    """
    RandomSource that replays a fixed list of values.

    Once the script runs out it either cycles (cycle=True) or keeps
    returning the fallback value.
    """

    def __init__(self, values: Sequence[float], cycle: bool = False, fallback: float = 0.0):
        for value in values:
            if not 0.0 <= value < 1.0:
                raise ValueError(f"Scripted value out of range [0, 1): {value}")
        self._values = list(values)
        self._cycle = cycle
        self._fallback = fallback
        self._position = 0
        self.calls = 0

    def next(self) -> float:
        self.calls += 1
        if self._position < len(self._values):
            value = self._values[self._position]
            self._position += 1
            return value
        if self._cycle and self._values:
            self._position = 1
            return self._values[0]
        return self._fallback

    @property
    def remaining(self) -> int:
        """Values left before the script is exhausted."""
        return max(0, len(self._values) - self._position)


def choose_index(rng: RandomSource, length: int) -> int:
    """Uniform index in [0, length)."""
    if length <= 0:
        raise ValueError("Cannot choose from an empty sequence")
    return min(int(rng.next() * length), length - 1)


def choose(rng: RandomSource, items: Sequence[T]) -> T:
    """Uniform pick from a non-empty sequence."""
    return items[choose_index(rng, len(items))]


def flip(rng: RandomSource, chance: float = 0.5) -> bool:
    """True with probability `chance`."""
    return rng.next() < chance


def shuffle(rng: RandomSource, items: Sequence[T]) -> list[T]:
    """Fisher-Yates shuffle returning a new list; the input is untouched."""
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = choose_index(rng, i + 1)
        result[i], result[j] = result[j], result[i]
    return result
