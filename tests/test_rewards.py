"""Tests for the reward pool and weighted offers."""

import pytest

from tesouro.state.catalog import UnknownCardError
from tesouro.state.schema import Card, Pillar, Rarity
from tesouro.systems.rewards import build_offer_from_ids, pick_random_cards, pick_reward_pool
from tesouro.tools.rng import ScriptedRandom, SeededRandom


def _card(card_id: str, rarity: Rarity = Rarity.COMMON) -> Card:
    return Card(id=card_id, name=card_id, category=Pillar.NATURE, rarity=rarity)


class TestRewardPool:
    """Biome and level restrictions."""

    def test_excludes_other_biomes(self, catalog):
        pool = pick_reward_pool(catalog, "floresta", 5)
        assert all(card.biome_only in (None, "floresta") for card in pool)
        assert "fire_brigade" in {card.id for card in pool}
        assert "mangrove" not in {card.id for card in pool}

    def test_excludes_cards_above_level(self, catalog):
        ids = {card.id for card in pick_reward_pool(catalog, "floresta", 1)}
        assert "nature_reserve" not in ids
        assert "eco_law" not in ids
        assert "plant_tree" in ids

    def test_level_unlocks_cards(self, catalog):
        ids = {card.id for card in pick_reward_pool(catalog, "floresta", 2)}
        assert "nature_reserve" in ids


class TestPickRandomCards:
    """Weighted sampling without repeated ids."""

    def test_unique_ids(self, catalog):
        pool = pick_reward_pool(catalog, "praia", 5)
        for seed in range(20):
            offer = pick_random_cards(pool, 3, SeededRandom(seed))
            assert len(offer) == 3
            assert len({card.id for card in offer}) == 3

    def test_small_pool_returns_fewer(self):
        pool = [_card("a"), _card("b")]
        offer = pick_random_cards(pool, 3, ScriptedRandom([]))
        assert sorted(card.id for card in offer) == ["a", "b"]

    def test_empty_pool(self):
        assert pick_random_cards([], 3, ScriptedRandom([])) == []

    def test_weights_expand_entries(self):
        """Common gets four entries, legendary one: [a, a, a, a, b]."""
        pool = [_card("a"), _card("b", Rarity.LEGENDARY)]
        offer = pick_random_cards(pool, 1, ScriptedRandom([0.99]))
        assert [card.id for card in offer] == ["b"]

    def test_custom_weights(self):
        pool = [_card("a"), _card("b", Rarity.RARE)]
        weights = {Rarity.COMMON: 1, Rarity.RARE: 1}
        offer = pick_random_cards(pool, 1, ScriptedRandom([0.6]), weights)
        assert [card.id for card in offer] == ["b"]

    def test_zero_requested(self):
        assert pick_random_cards([_card("a")], 0, ScriptedRandom([])) == []


class TestBuildOffer:
    def test_resolves_ids(self, catalog):
        offer = build_offer_from_ids(catalog, ["plant_tree", "mangrove"])
        assert [card.id for card in offer] == ["plant_tree", "mangrove"]

    def test_unknown_id_raises(self, catalog):
        with pytest.raises(UnknownCardError) as exc:
            build_offer_from_ids(catalog, ["plant_tree", "golden_tree"])
        assert exc.value.card_id == "golden_tree"
