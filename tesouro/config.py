"""
Engine configuration.

Every tunable number the engine uses lives on EngineConfig. The defaults
reproduce the reference game balance; a YAML or JSON file can override
any subset of fields.
"""

import json
import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from .state.schema import Pillar, ProfileAxis, Rarity

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TESOURO_CONFIG"


class EngineConfig(BaseModel):
    """Numeric constants for the deck, economy, turn loop and rewards."""

    # Deck
    draw_count: int = Field(default=5, ge=1)
    max_hand: int = Field(default=7, ge=1)
    max_plays_per_turn: int = Field(default=3, ge=1)
    discard_rebate: int = 1                         # Coins for discarding a card
    discard_unplayed_on_redraw: bool = True         # False: unplayed hand vanishes

    # Resources
    decay: dict[Pillar, float] = Field(default_factory=lambda: {
        Pillar.NATURE: 0.5,
        Pillar.INFRASTRUCTURE: 0.3,
        Pillar.GOVERNANCE: 0.3,
    })
    overdevelopment_gap: float = 30
    overdevelopment_penalty: float = 3
    visitor_multiplier: float = 1.5
    income_divisor: float = 10
    income_base: int = 5
    min_xp_gain: int = 5
    level_thresholds: dict[int, int] = Field(default_factory=lambda: {
        1: 0, 2: 100, 3: 250, 4: 500, 5: 800,
    })

    # Termination
    game_over_equilibrium: float = 10
    game_over_disasters: int = 5
    victory_level: int = 5
    victory_equilibrium: float = 70
    victory_pillar_minimum: float = 50
    victory_visitors: int = 200

    # Scheduling
    event_turn_divisors: tuple[int, ...] = (2, 3)
    council_probability: float = Field(default=0.6, ge=0, le=1)
    risky_success_chance: float = Field(default=0.5, ge=0, le=1)
    risky_failure_scale: float = 0.5

    # Rewards
    reward_offer_size: int = Field(default=3, ge=0)
    rarity_weights: dict[Rarity, int] = Field(default_factory=lambda: {
        Rarity.COMMON: 4,
        Rarity.UNCOMMON: 3,
        Rarity.RARE: 2,
        Rarity.LEGENDARY: 1,
    })

    # Profile
    category_profile_increment: int = 3
    balanced_profile_increment: int = 2
    category_profiles: dict[Pillar, ProfileAxis] = Field(default_factory=lambda: {
        Pillar.NATURE: ProfileAxis.EXPLORER,
        Pillar.INFRASTRUCTURE: ProfileAxis.BUILDER,
        Pillar.GOVERNANCE: ProfileAxis.GUARDIAN,
    })

    default_biome: str = "floresta"

    def is_event_turn(self, turn: int) -> bool:
        """True if interactions may be scheduled after reaching `turn`."""
        return any(turn % divisor == 0 for divisor in self.event_turn_divisors)


DEFAULT_CONFIG = EngineConfig()


def get_config_path(path: Path | str | None = None) -> Path | None:
    """Resolve the config file: explicit path, then $TESOURO_CONFIG."""
    if path:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    return Path(env_path) if env_path else None


def load_config(path: Path | str | None = None) -> EngineConfig:
    """
    Load config from a YAML or JSON file, merged over the defaults.

    A missing file yields the defaults. A malformed file is logged and
    also yields the defaults, so a bad override never blocks a game.
    """
    config_path = get_config_path(path)
    if config_path is None or not config_path.exists():
        return EngineConfig()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            if config_path.suffix == ".json":
                saved = json.load(f)
            else:
                saved = yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError, OSError) as e:
        logger.warning(f"Could not read config {config_path}: {e}; using defaults")
        return EngineConfig()

    if saved is None:
        return EngineConfig()
    if not isinstance(saved, dict):
        logger.warning(f"Config {config_path} is not a mapping; using defaults")
        return EngineConfig()

    # Merge with defaults to handle missing keys
    merged = DEFAULT_CONFIG.model_dump()
    merged.update(saved)
    try:
        return EngineConfig.model_validate(merged)
    except ValidationError as e:
        logger.warning(f"Invalid config {config_path}: {e}; using defaults")
        return EngineConfig()


def save_config(config: EngineConfig, path: Path | str) -> bool:
    """Save config as YAML. Returns True on success."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(config.model_dump(mode="json"), f, sort_keys=False, allow_unicode=True)
        return True
    except OSError as e:
        logger.error(f"Could not save config to {path}: {e}")
        return False
