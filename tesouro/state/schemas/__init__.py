"""
Schema contracts for the Tesouro turn engine.

- TurnEvent: one append-only log entry produced by a command
- CommandResult: what every command returns (accepted or rejected)
"""

from .event import TurnEvent
from .result import CommandResult

__all__ = [
    "TurnEvent",
    "CommandResult",
]
