"""Randomness helpers for the engine."""

from .rng import RandomSource, SeededRandom, ScriptedRandom, choose, choose_index, flip, shuffle

__all__ = [
    "RandomSource",
    "SeededRandom",
    "ScriptedRandom",
    "choose",
    "choose_index",
    "flip",
    "shuffle",
]
