"""Rule-based player for simulation mode."""

from ..state.schema import (
    Card,
    CouncilDef,
    EventDef,
    GameState,
    Pillar,
)
from ..systems.resources import BAR_MAX, is_overdeveloped, apply_effect
from ..tools.rng import RandomSource, choose_index, flip
from .personas import get_persona


class AutoPlayer:
    """Chooses engine commands according to a persona."""

    def __init__(self, persona: str, rng: RandomSource):
        """
        Initialize the player.

        Args:
            persona: One of: balanced, builder, naturalist, random
            rng: Randomness for the random persona and tie-breaks
        """
        self.persona_name = persona
        self.persona = get_persona(persona)
        self.rng = rng
        self.decisions: list[str] = []

    @property
    def is_random(self) -> bool:
        return not self.persona["choice_order"]

    # ─── Cards ───────────────────────────────────────────────────

    def card_score(self, card: Card, state: GameState) -> float:
        """How much this persona wants to play `card` right now."""
        effects = card.effects
        focus = self.persona["focus"]
        if focus is not None:
            score = effects.pillar(Pillar(focus)) + 0.2 * effects.positive_total
        else:
            # Each point counts more on a low pillar
            score = sum(
                effects.pillar(p) * (BAR_MAX - state.bars.get(p)) / BAR_MAX
                for p in Pillar
            )
            if is_overdeveloped(apply_effect(state.bars, effects)):
                score -= 5
        return score

    def choose_card(self, state: GameState) -> int | None:
        """Hand index to play, or None to stop playing this turn."""
        if state.cards_played_this_turn >= state.max_plays_per_turn:
            return None
        affordable = [
            i for i, card in enumerate(state.deck.hand) if card.cost <= state.coins
        ]
        if not affordable:
            return None

        if self.is_random:
            if flip(self.rng, 0.25):
                return None
            return affordable[choose_index(self.rng, len(affordable))]

        best = max(affordable, key=lambda i: self.card_score(state.deck.hand[i], state))
        if self.card_score(state.deck.hand[best], state) <= 0:
            return None
        self.decisions.append(f"play:{state.deck.hand[best].id}")
        return best

    # ─── Interactions ────────────────────────────────────────────

    def _pick_by_order(self, tags: list[str], order: list[str]) -> int:
        if not order:
            return choose_index(self.rng, len(tags))
        for wanted in order:
            if wanted in tags:
                return tags.index(wanted)
        return 0

    def choose_event(self, event: EventDef) -> int:
        index = self._pick_by_order(
            [choice.type.value for choice in event.choices],
            self.persona["choice_order"],
        )
        self.decisions.append(f"event:{event.id}:{index}")
        return index

    def choose_council(self, council: CouncilDef) -> int:
        index = self._pick_by_order(
            [option.stance.value for option in council.options],
            self.persona["stance_order"],
        )
        self.decisions.append(f"council:{council.id}:{index}")
        return index

    def choose_reward(self, offer: list[Card], state: GameState) -> int | None:
        """Offer index to take, or None to skip."""
        if not offer or not self.persona["takes_rewards"]:
            return None
        if self.is_random:
            return choose_index(self.rng, len(offer))
        return max(range(len(offer)), key=lambda i: self.card_score(offer[i], state))

    def get_stats(self) -> dict:
        plays = sum(1 for d in self.decisions if d.startswith("play:"))
        return {
            "total_decisions": len(self.decisions),
            "cards_played": plays,
            "interactions": len(self.decisions) - plays,
        }
