"""
Event bus for Tesouro engine state changes.

Decouples the turn engine from whatever is watching it (rich CLI,
headless runner, API, simulation stats). The engine emits after a
command has committed; listeners never see a half-applied state.

Usage:
    from .event_bus import get_event_bus, EventType

    bus = get_event_bus()
    bus.on(EventType.DISASTER_TRIGGERED, my_handler)

    # Engine side
    bus.emit(EventType.DISASTER_TRIGGERED, turn=4, disaster="flood")

    def my_handler(event: GameEvent):
        print(f"Disaster {event.data['disaster']} on turn {event.turn}")
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Engine events that can be published."""

    # Card events
    CARD_PLAYED = "card.played"
    CARD_DISCARDED = "card.discarded"
    DECK_RESHUFFLED = "deck.reshuffled"

    # Turn events
    TURN_ENDED = "turn.ended"
    DISASTER_TRIGGERED = "disaster.triggered"
    LEVEL_UP = "level.up"

    # Interaction events
    EVENT_SCHEDULED = "event.scheduled"
    EVENT_RESOLVED = "event.resolved"
    COUNCIL_SCHEDULED = "council.scheduled"
    COUNCIL_RESOLVED = "council.resolved"

    # Reward events
    REWARD_OFFERED = "reward.offered"
    REWARD_PICKED = "reward.picked"
    REWARD_SKIPPED = "reward.skipped"

    # Game events
    GAME_OVER = "game.over"
    VICTORY = "game.victory"
    GAME_RESET = "game.reset"
    BIOME_CHANGED = "biome.changed"


@dataclass
class GameEvent:
    """
    Event payload for the event bus.

    Attributes:
        type: The event type (from EventType enum)
        data: Event-specific payload as dict
        session_id: Session the event belongs to (set by outer surfaces)
        turn: Turn counter when the event occurred
        timestamp: When the event was emitted
    """

    type: EventType
    data: dict = field(default_factory=dict)
    session_id: str = ""
    turn: int = 0
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"[{self.type.value}] {self.data}"


EventHandler = Callable[[GameEvent], None]


class EventBus:
    """
    Synchronous event bus.

    Listeners are called immediately on emit(), in subscription order.
    A listener that raises is logged and skipped; the rest still run.
    """

    def __init__(self, history_limit: int = 100):
        self._listeners: dict[EventType, list[EventHandler]] = {}
        self._history: list[GameEvent] = []
        self._history_limit = history_limit

    def on(self, event_type: EventType, handler: EventHandler) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The type of event to listen for
            handler: Callback function that receives GameEvent
        """
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        if handler not in self._listeners[event_type]:
            self._listeners[event_type].append(handler)

    def on_all(self, handler: EventHandler) -> None:
        """Subscribe one handler to every event type."""
        for event_type in EventType:
            self.on(event_type, handler)

    def off(self, event_type: EventType, handler: EventHandler) -> None:
        if event_type in self._listeners and handler in self._listeners[event_type]:
            self._listeners[event_type].remove(handler)

    def emit(
        self,
        event_type: EventType,
        session_id: str = "",
        turn: int = 0,
        **data,
    ) -> GameEvent:
        """
        Emit an event to all subscribers.

        Args:
            event_type: The type of event
            session_id: Session context (optional)
            turn: Turn counter (optional)
            **data: Event-specific data

        Returns:
            The emitted GameEvent
        """
        event = GameEvent(
            type=event_type,
            data=data,
            session_id=session_id,
            turn=turn,
        )

        self._history.append(event)
        if len(self._history) > self._history_limit:
            self._history = self._history[-self._history_limit :]

        for handler in list(self._listeners.get(event_type, [])):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Error in event bus handler for {event_type.value}")

        return event

    def clear(self) -> None:
        """Clear all listeners. Useful for testing."""
        self._listeners.clear()

    def get_history(self, event_type: EventType | None = None) -> list[GameEvent]:
        """
        Get recent event history.

        Args:
            event_type: Filter by type, or None for all events
        """
        if event_type is None:
            return list(self._history)
        return [e for e in self._history if e.type == event_type]

    def listener_count(self, event_type: EventType) -> int:
        """Get number of listeners for an event type."""
        return len(self._listeners.get(event_type, []))


# Global singleton instance
_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get the global event bus instance."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    """Reset the global event bus. Useful for testing."""
    global _event_bus
    _event_bus = None
