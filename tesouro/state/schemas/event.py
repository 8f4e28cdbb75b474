"""
TurnEvent schema: individual entries in the engine's event log.

A single command produces one or more events: a card play, the income
and decay of a turn, a disaster firing, a reshuffle. Events are the
record of what happened; they never mutate state themselves.

Events serve two audiences:
1. Audit log: ordered, append-only history on the game snapshot
2. Player feed: the `summary` line the UI shows
"""

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field


class TurnEvent(BaseModel):
    """A single event produced while applying a command."""
    event_id: str = Field(default_factory=lambda: str(uuid4())[:8])
    event_type: str  # e.g., "card.played", "turn.ended", "disaster.triggered"
    turn: int = 0
    payload: dict = Field(default_factory=dict)
    # Payload varies by event_type:
    # card.played: {"card_id": "plant_tree", "cost": 3, "xp_gain": 9}
    # turn.ended: {"income": 11, "visitors": 57, "equilibrium": 37.62}
    # disaster.triggered: {"disaster_id": "flood", "disaster_count": 2}

    # Human-readable summary for player feed
    summary: str = ""

    timestamp: datetime = Field(default_factory=datetime.now)
