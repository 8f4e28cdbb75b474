"""
Reward selector: weighted card offers after an event or council.

Selection weight falls with rarity (common 4 down to legendary 1). An
offer never repeats a card id.
"""

from ..state.catalog import Catalog
from ..state.schema import Card, Rarity
from ..tools.rng import RandomSource, choose_index

RARITY_WEIGHTS: dict[Rarity, int] = {
    Rarity.COMMON: 4,
    Rarity.UNCOMMON: 3,
    Rarity.RARE: 2,
    Rarity.LEGENDARY: 1,
}


def pick_reward_pool(catalog: Catalog, biome: str, level: int) -> list[Card]:
    """Cards available in `biome` at `level`, in catalog order."""
    return [
        card for card in catalog.cards
        if (card.biome_only is None or card.biome_only == biome)
        and (card.min_level is None or card.min_level <= level)
    ]


def pick_random_cards(
    pool: list[Card],
    n: int,
    rng: RandomSource,
    weights: dict[Rarity, int] | None = None,
) -> list[Card]:
    """
    Weighted sampling without replacement.

    Each card appears in a weighted list once per weight point. A draw
    removes that entry; a card whose id is already chosen is thrown away
    and the draw retried. Stops at n unique cards or when the weighted
    list runs dry.
    """
    weights = weights or RARITY_WEIGHTS
    weighted = [card for card in pool for _ in range(weights.get(card.rarity, 1))]

    chosen: list[Card] = []
    seen: set[str] = set()
    while len(chosen) < n and weighted:
        card = weighted.pop(choose_index(rng, len(weighted)))
        if card.id in seen:
            continue
        seen.add(card.id)
        chosen.append(card)
    return chosen


def build_offer_from_ids(catalog: Catalog, card_ids: list[str]) -> list[Card]:
    """
    Resolve a fixed offer of card ids (scripted scenarios).

    Raises:
        UnknownCardError: an id is not in the catalog
    """
    return catalog.cards_by_ids(card_ids, context="reward offer")
