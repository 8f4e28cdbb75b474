"""
Pydantic models for Tesouro game state and catalog data.

Catalog entries (cards, events, councils, disasters, biomes) are frozen:
they are read-only input to the engine. GameState is the mutable snapshot
the turn engine copies, mutates and commits on every command.

Everything serializes to plain JSON so callers can persist snapshots.
"""

import math
from enum import Enum
from typing import ClassVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .schemas.event import TurnEvent


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class Pillar(str, Enum):
    """The three coupled resource axes."""
    NATURE = "nature"                  # Natureza, weighted 0.4
    INFRASTRUCTURE = "infrastructure"  # Infraestrutura, weighted 0.3
    GOVERNANCE = "governance"          # Organização, weighted 0.3


class Rarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    LEGENDARY = "legendary"


class CardType(str, Enum):
    BUILD = "build"
    ACTION = "action"
    EVENT = "event"
    POLICY = "policy"


class ChoiceType(str, Enum):
    """Risk category of an event choice."""
    SMART = "smart"
    QUICK = "quick"
    RISKY = "risky"    # Fair coin; half effect on failure


class CouncilStance(str, Enum):
    """Reporting tag on council options. Never changes the outcome."""
    SUSTAINABLE = "sustainable"
    NEUTRAL = "neutral"
    RISKY = "risky"


class ProfileAxis(str, Enum):
    """Play-style axes, in tie-break order."""
    EXPLORER = "explorer"
    BUILDER = "builder"
    GUARDIAN = "guardian"
    SCIENTIST = "scientist"


class TurnPhase(str, Enum):
    """Phase state machine for the turn engine."""
    IDLE = "idle"                                        # No pending interaction
    AWAITING_EVENT_CHOICE = "awaiting_event_choice"
    AWAITING_COUNCIL_CHOICE = "awaiting_council_choice"
    AWAITING_REWARD_PICK = "awaiting_reward_pick"
    GAME_OVER = "game_over"                              # Terminal
    VICTORY = "victory"                                  # Terminal

    @property
    def is_terminal(self) -> bool:
        return self in (TurnPhase.GAME_OVER, TurnPhase.VICTORY)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def generate_id() -> str:
    """Generate a short unique ID."""
    return str(uuid4())[:8]


def round_half_up(value: float) -> int:
    """Round with .5 going up, so -2.5 -> -2 and 2.5 -> 3."""
    return math.floor(value + 0.5)


# -----------------------------------------------------------------------------
# Effects and conditions
# -----------------------------------------------------------------------------

class Effect(BaseModel):
    """Delta vector applied to bars, coins and experience."""
    model_config = ConfigDict(frozen=True)

    nature: float = 0
    infrastructure: float = 0
    governance: float = 0
    coins: int = 0
    xp: int = 0

    def pillar(self, pillar: Pillar) -> float:
        return getattr(self, pillar.value)

    def scaled(self, factor: float) -> "Effect":
        """Every component multiplied by factor and rounded independently."""
        return Effect(
            nature=round_half_up(self.nature * factor),
            infrastructure=round_half_up(self.infrastructure * factor),
            governance=round_half_up(self.governance * factor),
            coins=round_half_up(self.coins * factor),
            xp=round_half_up(self.xp * factor),
        )

    @property
    def has_negative_pillar(self) -> bool:
        return any(self.pillar(p) < 0 for p in Pillar)

    @property
    def positive_total(self) -> float:
        """Sum of the positive pillar components (card score)."""
        return sum(max(0, self.pillar(p)) for p in Pillar)


class Condition(BaseModel):
    """
    Declarative predicate over a single pillar.

    Exactly one comparison is set, e.g. {pillar: nature, below: 60}.
    """
    model_config = ConfigDict(frozen=True)

    pillar: Pillar
    below: float | None = None
    at_or_below: float | None = None
    above: float | None = None
    at_least: float | None = None

    COMPARISONS: ClassVar[tuple[str, ...]] = ("below", "at_or_below", "above", "at_least")

    @model_validator(mode="after")
    def _one_comparison(self) -> "Condition":
        set_fields = [name for name in self.COMPARISONS if getattr(self, name) is not None]
        if len(set_fields) != 1:
            raise ValueError(
                f"Condition on {self.pillar.value} needs exactly one of "
                f"{', '.join(self.COMPARISONS)}; got {set_fields or 'none'}"
            )
        return self

    def holds(self, bars: "Bars") -> bool:
        value = bars.get(self.pillar)
        if self.below is not None:
            return value < self.below
        if self.at_or_below is not None:
            return value <= self.at_or_below
        if self.above is not None:
            return value > self.above
        return value >= self.at_least


# -----------------------------------------------------------------------------
# Catalog entries
# -----------------------------------------------------------------------------

class Card(BaseModel):
    """A card definition. Relocated between piles, never mutated."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    emoji: str = ""
    type: CardType = CardType.BUILD
    category: Pillar
    rarity: Rarity = Rarity.COMMON
    cost: int = Field(default=0, ge=0)
    effects: Effect = Field(default_factory=Effect)
    description: str = ""
    flavor: str = ""
    exhaust: bool = False                  # One-time use: exhaust pile after play
    biome_only: str | None = None          # Reward pool restriction
    min_level: int | None = None           # Reward pool restriction
    tags: tuple[str, ...] = ()

    @field_validator("effects")
    @classmethod
    def _no_negative_xp(cls, effects: Effect) -> Effect:
        if effects.xp < 0:
            raise ValueError(f"card xp must be non-negative, got {effects.xp}")
        return effects


class EventChoice(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    type: ChoiceType
    emoji: str = ""
    effects: Effect = Field(default_factory=Effect)
    message: str = ""


class EventDef(BaseModel):
    """Multi-choice interaction; risky choices roll for half effect."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    emoji: str = ""
    description: str = ""
    biome: str | None = None               # Only scheduled in this biome
    condition: Condition | None = None     # Eligibility over current bars
    choices: tuple[EventChoice, ...] = Field(min_length=2, max_length=3)

    def is_eligible(self, bars: "Bars", biome: str) -> bool:
        if self.biome is not None and self.biome != biome:
            return False
        return self.condition is None or self.condition.holds(bars)


class CouncilOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    stance: CouncilStance = CouncilStance.NEUTRAL
    effects: Effect = Field(default_factory=Effect)
    feedback: str = ""


class CouncilDef(BaseModel):
    """Deterministic multi-choice interaction."""
    model_config = ConfigDict(frozen=True)

    id: str
    question: str
    emoji: str = ""
    condition: Condition | None = None
    options: tuple[CouncilOption, ...] = Field(min_length=2, max_length=3)

    def is_eligible(self, bars: "Bars") -> bool:
        return self.condition is None or self.condition.holds(bars)


class DisasterDef(BaseModel):
    """Penalty fired when its trigger pillar falls at or below a threshold."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    emoji: str = ""
    description: str = ""
    trigger: Condition
    effects: Effect


class BiomeDef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    emoji: str = ""
    description: str = ""
    start_bars: dict[Pillar, float] = Field(default_factory=dict)
    start_coins: int = 50
    starter_cards: tuple[str, ...] = ()    # Card ids added to the base deck


# -----------------------------------------------------------------------------
# Mutable game state
# -----------------------------------------------------------------------------

class Bars(BaseModel):
    """Pillar values, each kept in [0, 100] by the resource model."""
    nature: float = 50.0
    infrastructure: float = 30.0
    governance: float = 30.0

    def get(self, pillar: Pillar) -> float:
        return getattr(self, pillar.value)

    def set(self, pillar: Pillar, value: float) -> None:
        setattr(self, pillar.value, value)


class DeckState(BaseModel):
    """Four-pile card lifecycle. Every owned card is in exactly one pile."""
    draw_pile: list[Card] = Field(default_factory=list)
    hand: list[Card] = Field(default_factory=list)
    discard_pile: list[Card] = Field(default_factory=list)
    exhaust_pile: list[Card] = Field(default_factory=list)
    draw_count: int = 5                    # Cards drawn per turn
    max_hand: int = 7

    @property
    def owned_count(self) -> int:
        return (
            len(self.draw_pile) + len(self.hand)
            + len(self.discard_pile) + len(self.exhaust_pile)
        )


class ProfileScores(BaseModel):
    """Play-style counters. Only ever incremented."""
    explorer: int = 0
    builder: int = 0
    guardian: int = 0
    scientist: int = 0

    def get(self, axis: ProfileAxis) -> int:
        return getattr(self, axis.value)


class EduMetrics(BaseModel):
    """Telemetry counters for the end-of-game report."""
    pro_nature_decisions: int = 0
    pro_infra_decisions: int = 0
    pro_gov_decisions: int = 0
    excessive_building: int = 0            # Plays that tripped overdevelopment
    total_buildings: int = 0
    turns_in_green: int = 0                # Equilibrium >= 60 at end of turn
    turns_in_red: int = 0                  # Equilibrium < 30 at end of turn
    total_events_resolved: int = 0
    smart_choices: int = 0
    risky_choices: int = 0
    quick_choices: int = 0
    sustainable_councils: int = 0
    neutral_councils: int = 0
    risky_councils: int = 0


class GameState(BaseModel):
    """
    Complete engine snapshot.

    Created fresh at reset, mutated turn by turn through the engine,
    discarded at the next reset. Plain data; no behavior beyond
    convenience properties.
    """
    biome: str = "floresta"
    bars: Bars = Field(default_factory=Bars)
    coins: int = 50
    level: int = 1
    xp: int = 0
    turn: int = 0
    visitors: int = 10
    phase: TurnPhase = TurnPhase.IDLE
    state_version: int = 0

    disaster_count: int = 0
    game_over_reason: str | None = None
    victory_reason: str | None = None

    profile_scores: ProfileScores = Field(default_factory=ProfileScores)
    edu_metrics: EduMetrics = Field(default_factory=EduMetrics)

    deck: DeckState = Field(default_factory=DeckState)
    cards_played_this_turn: int = 0
    max_plays_per_turn: int = 3
    played_this_turn: list[Card] = Field(default_factory=list)
    total_cards_played: int = 0
    total_score: float = 0

    # Pending interactions
    pending_event: EventDef | None = None
    pending_council: CouncilDef | None = None
    reward_offer: list[Card] | None = None

    # Append-only, owned by the engine
    event_log: list[TurnEvent] = Field(default_factory=list)

    @property
    def is_game_over(self) -> bool:
        return self.phase == TurnPhase.GAME_OVER

    @property
    def is_victory(self) -> bool:
        return self.phase == TurnPhase.VICTORY
