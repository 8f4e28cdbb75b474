"""
Game systems for the Tesouro engine.

Leaf systems (deck, resources, rewards, resolver, profile) are pure
functions over state models. GameEngine in turns.py sequences them and
owns the snapshot.
"""

from .turns import GameEngine, EngineError, InvalidPhaseError, VALID_TRANSITIONS
from .resolver import Resolution, resolve_event_choice, resolve_council_option
from .resources import Economy, apply_effect, compute_equilibrium, compute_visitors
from .rewards import RARITY_WEIGHTS, pick_reward_pool, pick_random_cards

__all__ = [
    # Turn engine
    "GameEngine",
    "EngineError",
    "InvalidPhaseError",
    "VALID_TRANSITIONS",
    # Resolver
    "Resolution",
    "resolve_event_choice",
    "resolve_council_option",
    # Resources
    "Economy",
    "apply_effect",
    "compute_equilibrium",
    "compute_visitors",
    # Rewards
    "RARITY_WEIGHTS",
    "pick_reward_pool",
    "pick_random_cards",
]
