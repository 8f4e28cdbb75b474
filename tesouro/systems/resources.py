"""
Resource model: pillar bars, coins, experience and derived metrics.

Every bar mutation goes through apply_effect, which clamps to [0, 100]
and then applies the overdevelopment coupling. Nothing else writes bars.
"""

from pydantic import BaseModel, Field

from ..state.schema import Bars, Effect, Pillar, round_half_up

BAR_MIN = 0.0
BAR_MAX = 100.0

EQUILIBRIUM_WEIGHTS = {
    Pillar.NATURE: 0.4,
    Pillar.INFRASTRUCTURE: 0.3,
    Pillar.GOVERNANCE: 0.3,
}

DEFAULT_LEVEL_THRESHOLDS = {1: 0, 2: 100, 3: 250, 4: 500, 5: 800}

__all__ = [
    "BAR_MIN",
    "BAR_MAX",
    "EQUILIBRIUM_WEIGHTS",
    "Economy",
    "clamp",
    "round_half_up",
    "apply_effect",
    "is_overdeveloped",
    "compute_equilibrium",
    "level_for_xp",
    "grant_experience",
    "compute_visitors",
    "compute_income",
    "adjust_coins",
]


class Economy(BaseModel):
    """Coins, level and cumulative experience."""
    coins: int = Field(default=50, ge=0)
    level: int = Field(default=1, ge=1)
    xp: int = Field(default=0, ge=0)


def clamp(value: float, low: float = BAR_MIN, high: float = BAR_MAX) -> float:
    return max(low, min(high, value))


def is_overdeveloped(bars: Bars, gap: float = 30) -> bool:
    """Infrastructure has outrun nature by more than `gap`."""
    return bars.infrastructure > bars.nature + gap


def apply_effect(bars: Bars, effect: Effect, gap: float = 30, penalty: float = 3) -> Bars:
    """
    Add an effect's pillar components to the bars.

    Each pillar is clamped after the addition. If infrastructure then
    exceeds nature by more than `gap`, nature loses `penalty` (clamped
    again). Coins and xp on the effect are ignored here.

    Returns:
        New Bars; the input is untouched
    """
    result = Bars(
        nature=clamp(bars.nature + effect.nature),
        infrastructure=clamp(bars.infrastructure + effect.infrastructure),
        governance=clamp(bars.governance + effect.governance),
    )
    if is_overdeveloped(result, gap):
        result.nature = clamp(result.nature - penalty)
    return result


def compute_equilibrium(bars: Bars) -> float:
    return sum(weight * bars.get(pillar) for pillar, weight in EQUILIBRIUM_WEIGHTS.items())


def level_for_xp(xp: int, thresholds: dict[int, int] | None = None) -> int:
    """Highest level whose threshold is at or below xp."""
    thresholds = thresholds or DEFAULT_LEVEL_THRESHOLDS
    level = min(thresholds)
    for candidate, required in sorted(thresholds.items()):
        if xp >= required:
            level = candidate
    return level


def grant_experience(
    economy: Economy,
    amount: int,
    thresholds: dict[int, int] | None = None,
) -> Economy:
    """
    Add experience and recompute the level from scratch.

    Raises:
        ValueError: amount is negative (experience never drops)
    """
    if amount < 0:
        raise ValueError(f"Experience grant must be non-negative, got {amount}")
    xp = economy.xp + amount
    # Level never regresses, even on a hand-built state
    level = max(economy.level, level_for_xp(xp, thresholds))
    return economy.model_copy(update={"xp": xp, "level": level})


def compute_visitors(equilibrium: float, multiplier: float = 1.5) -> int:
    return round_half_up(max(0.0, equilibrium) * multiplier)


def compute_income(visitors: int, divisor: float = 10, base: int = 5) -> int:
    return round_half_up(visitors / divisor) + base


def adjust_coins(coins: int, delta: int) -> int:
    """Coin balance after delta, floored at 0."""
    return max(0, coins + delta)
