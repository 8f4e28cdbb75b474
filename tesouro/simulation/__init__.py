"""Simulation module for seeded autoplay balance testing."""

from .player import AutoPlayer
from .personas import PERSONAS
from .runner import run_simulation, play_game, SimulationReport, GameOutcome

__all__ = [
    "AutoPlayer",
    "PERSONAS",
    "run_simulation",
    "play_game",
    "SimulationReport",
    "GameOutcome",
]
