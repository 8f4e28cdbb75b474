"""
Profile and telemetry accumulator.

Read-only consumer of the engine: turns played cards and resolved
choices into counters, then ranks the counters. Nothing here gates a
mechanic.
"""

from ..state.schema import (
    Card,
    CardType,
    ChoiceType,
    CouncilStance,
    EduMetrics,
    GameState,
    Pillar,
    ProfileAxis,
    ProfileScores,
    round_half_up,
)
from .resources import compute_equilibrium, is_overdeveloped

DEFAULT_CATEGORY_PROFILES = {
    Pillar.NATURE: ProfileAxis.EXPLORER,
    Pillar.INFRASTRUCTURE: ProfileAxis.BUILDER,
    Pillar.GOVERNANCE: ProfileAxis.GUARDIAN,
}

# Equilibrium at which the scientist axis starts earning a bonus
SCIENTIST_BONUS_FLOOR = 50


# ─── Profile Scores ───────────────────────────────────────────────

def score_card_play(
    card: Card,
    category_increment: int = 3,
    balanced_increment: int = 2,
    category_profiles: dict[Pillar, ProfileAxis] | None = None,
) -> dict[ProfileAxis, int]:
    """
    Profile delta for one card play.

    The card's category earns its axis `category_increment`. A card with
    no negative pillar component also earns the scientist axis
    `balanced_increment`.
    """
    category_profiles = category_profiles or DEFAULT_CATEGORY_PROFILES
    delta: dict[ProfileAxis, int] = {}
    axis = category_profiles.get(card.category)
    if axis is not None:
        delta[axis] = delta.get(axis, 0) + category_increment
    if not card.effects.has_negative_pillar:
        delta[ProfileAxis.SCIENTIST] = delta.get(ProfileAxis.SCIENTIST, 0) + balanced_increment
    return delta


def add_scores(scores: ProfileScores, delta: dict[ProfileAxis, int]) -> ProfileScores:
    """Apply a delta. Negative entries are ignored; scores never drop."""
    update = {
        axis.value: scores.get(axis) + amount
        for axis, amount in delta.items()
        if amount > 0
    }
    return scores.model_copy(update=update)


def adjusted_scores(scores: ProfileScores, equilibrium: float) -> dict[ProfileAxis, int]:
    """Scores with the scientist equilibrium bonus folded in."""
    bonus = round_half_up(equilibrium / 10) if equilibrium >= SCIENTIST_BONUS_FLOOR else 0
    adjusted = {axis: scores.get(axis) for axis in ProfileAxis}
    adjusted[ProfileAxis.SCIENTIST] += bonus
    return adjusted


def dominant_profile(scores: ProfileScores, equilibrium: float) -> ProfileAxis:
    """Highest adjusted axis; ties go to the earlier axis in ProfileAxis."""
    adjusted = adjusted_scores(scores, equilibrium)
    best = ProfileAxis.EXPLORER
    for axis in ProfileAxis:
        if adjusted[axis] > adjusted[best]:
            best = axis
    return best


# ─── Telemetry ────────────────────────────────────────────────────

def record_card_play(metrics: EduMetrics, card: Card, state_after: GameState, gap: float = 30) -> EduMetrics:
    """Counters for one card play, evaluated against the post-play state."""
    result = metrics.model_copy()
    if card.category == Pillar.NATURE:
        result.pro_nature_decisions += 1
    elif card.category == Pillar.INFRASTRUCTURE:
        result.pro_infra_decisions += 1
    elif card.category == Pillar.GOVERNANCE:
        result.pro_gov_decisions += 1
    if card.type == CardType.BUILD:
        result.total_buildings += 1
    if is_overdeveloped(state_after.bars, gap):
        result.excessive_building += 1
    return result


def record_event_choice(metrics: EduMetrics, choice_type: ChoiceType) -> EduMetrics:
    result = metrics.model_copy()
    result.total_events_resolved += 1
    if choice_type == ChoiceType.SMART:
        result.smart_choices += 1
    elif choice_type == ChoiceType.RISKY:
        result.risky_choices += 1
    else:
        result.quick_choices += 1
    return result


def record_council_stance(metrics: EduMetrics, stance: CouncilStance) -> EduMetrics:
    result = metrics.model_copy()
    result.total_events_resolved += 1
    if stance == CouncilStance.SUSTAINABLE:
        result.sustainable_councils += 1
    elif stance == CouncilStance.RISKY:
        result.risky_councils += 1
    else:
        result.neutral_councils += 1
    return result


def record_turn_health(metrics: EduMetrics, equilibrium: float) -> EduMetrics:
    """Green at 60 and above, red below 30."""
    result = metrics.model_copy()
    if equilibrium >= 60:
        result.turns_in_green += 1
    if equilibrium < 30:
        result.turns_in_red += 1
    return result


def tendency(metrics: EduMetrics) -> str:
    """
    One-word play tendency for the end-of-game report.

    Returns one of: beginner, overbuilder, nature_guardian,
    organized_leader, urbanist, balanced, strategist.
    """
    total = metrics.pro_nature_decisions + metrics.pro_infra_decisions + metrics.pro_gov_decisions
    if total == 0:
        return "beginner"

    nature_pct = metrics.pro_nature_decisions / total
    infra_pct = metrics.pro_infra_decisions / total
    gov_pct = metrics.pro_gov_decisions / total

    if metrics.excessive_building > 5:
        return "overbuilder"
    if nature_pct > 0.5 and metrics.turns_in_green > 5:
        return "nature_guardian"
    if gov_pct > 0.4 and metrics.smart_choices > metrics.risky_choices:
        return "organized_leader"
    if infra_pct > 0.5:
        return "urbanist"

    spread = abs(nature_pct - 0.33) + abs(infra_pct - 0.33) + abs(gov_pct - 0.33)
    if spread < 0.3:
        return "balanced"
    return "strategist"


# ─── Derived views ────────────────────────────────────────────────

def alerts(state: GameState, gap: float = 30) -> list[str]:
    """Warning lines for the current state, most severe first."""
    if state.is_game_over:
        return [f"Game over: {state.game_over_reason}"]

    messages = []
    if state.bars.nature < 20:
        messages.append("Nature is almost destroyed!")
    elif state.bars.nature < 40:
        messages.append("Nature is in danger!")
    if is_overdeveloped(state.bars, gap):
        messages.append("Too much pollution!")
    if state.bars.governance < 15:
        messages.append("No organization left!")
    if state.disaster_count >= 3:
        messages.append(f"{state.disaster_count} disasters so far!")
    return messages


def edu_report(state: GameState) -> dict:
    """Summary of play style and decisions for the end-of-game screen."""
    metrics = state.edu_metrics
    equilibrium = compute_equilibrium(state.bars)
    decisions = metrics.pro_nature_decisions + metrics.pro_infra_decisions + metrics.pro_gov_decisions

    return {
        "turn": state.turn,
        "equilibrium": round(equilibrium, 1),
        "dominant_profile": dominant_profile(state.profile_scores, equilibrium).value,
        "profile_scores": {
            axis.value: score
            for axis, score in adjusted_scores(state.profile_scores, equilibrium).items()
        },
        "tendency": tendency(metrics),
        "total_decisions": decisions,
        "total_cards_played": state.total_cards_played,
        "total_score": state.total_score,
        "disaster_count": state.disaster_count,
        "metrics": metrics.model_dump(),
    }
