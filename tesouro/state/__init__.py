"""State, catalog and persistence for the Tesouro engine."""

from .schema import (
    Pillar,
    Rarity,
    CardType,
    ChoiceType,
    CouncilStance,
    ProfileAxis,
    TurnPhase,
    Effect,
    Condition,
    Card,
    EventChoice,
    EventDef,
    CouncilOption,
    CouncilDef,
    DisasterDef,
    BiomeDef,
    Bars,
    DeckState,
    ProfileScores,
    EduMetrics,
    GameState,
    round_half_up,
)
from .catalog import (
    Catalog,
    CatalogError,
    UnknownCardError,
    load_catalog,
    default_catalog,
)
from .store import SessionRecord, SessionStore, JsonSessionStore, MemorySessionStore
from .event_bus import (
    EventBus,
    EventType,
    GameEvent,
    get_event_bus,
    reset_event_bus,
)

__all__ = [
    # Schema
    "Pillar",
    "Rarity",
    "CardType",
    "ChoiceType",
    "CouncilStance",
    "ProfileAxis",
    "TurnPhase",
    "Effect",
    "Condition",
    "Card",
    "EventChoice",
    "EventDef",
    "CouncilOption",
    "CouncilDef",
    "DisasterDef",
    "BiomeDef",
    "Bars",
    "DeckState",
    "ProfileScores",
    "EduMetrics",
    "GameState",
    "round_half_up",
    # Catalog
    "Catalog",
    "CatalogError",
    "UnknownCardError",
    "load_catalog",
    "default_catalog",
    # Store
    "SessionRecord",
    "SessionStore",
    "JsonSessionStore",
    "MemorySessionStore",
    # Events
    "EventBus",
    "EventType",
    "GameEvent",
    "get_event_bus",
    "reset_event_bus",
]
