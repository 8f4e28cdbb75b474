"""Tests for the four-pile deck manager."""

import pytest

from tesouro.state.schema import DeckState
from tesouro.systems import deck as deck_manager
from tesouro.tools.rng import ScriptedRandom


@pytest.fixture
def cards(catalog):
    return catalog.cards_by_ids([
        "plant_tree", "create_park", "build_house", "dirty_transport",
        "cleanup_program", "edu_signs", "town_meeting", "eco_trail",
    ])


class TestInitialHand:
    """Opening split of a shuffled deck."""

    def test_splits_hand_and_draw(self, cards):
        deck = deck_manager.draw_initial_hand(cards, draw_count=5)
        assert [c.id for c in deck.hand] == [c.id for c in cards[:5]]
        assert len(deck.draw_pile) == 3
        assert deck.discard_pile == []
        assert deck.owned_count == len(cards)

    def test_deck_too_small_raises(self, cards):
        with pytest.raises(ValueError):
            deck_manager.draw_initial_hand(cards[:3], draw_count=5)

    def test_hand_capped_by_max_hand(self, cards):
        deck = deck_manager.draw_initial_hand(cards, draw_count=6, max_hand=4)
        assert len(deck.hand) == 4


class TestPlayAndDiscard:
    """Moving cards out of the hand."""

    def test_play_routes_to_discard(self, cards):
        deck = deck_manager.draw_initial_hand(cards)
        after, card = deck_manager.play_card(deck, 0)
        assert card.id == cards[0].id
        assert len(after.hand) == 4
        assert after.discard_pile[-1].id == card.id
        assert after.owned_count == deck.owned_count

    def test_exhaust_card_goes_to_exhaust_pile(self, catalog):
        deck = DeckState(hand=catalog.cards_by_ids(["eco_law", "plant_tree"]))
        after, card = deck_manager.play_card(deck, 0)
        assert card.exhaust
        assert [c.id for c in after.exhaust_pile] == ["eco_law"]
        assert after.discard_pile == []

    def test_discard_ignores_exhaust(self, catalog):
        deck = DeckState(hand=catalog.cards_by_ids(["eco_law"]))
        after, card = deck_manager.discard_card(deck, 0)
        assert [c.id for c in after.discard_pile] == ["eco_law"]
        assert after.exhaust_pile == []

    @pytest.mark.parametrize("index", [-1, 5, 99])
    def test_bad_index_is_noop(self, cards, index):
        deck = deck_manager.draw_initial_hand(cards)
        after, card = deck_manager.play_card(deck, index)
        assert card is None
        assert after == deck

    def test_input_deck_untouched(self, cards):
        deck = deck_manager.draw_initial_hand(cards)
        deck_manager.play_card(deck, 0)
        assert len(deck.hand) == 5


class TestDrawForTurn:
    """Per-turn redraw and reshuffle."""

    def test_no_reshuffle_with_enough_cards(self, catalog):
        deck = DeckState(
            hand=catalog.cards_by_ids(["plant_tree"] * 2),
            draw_pile=catalog.cards_by_ids(["create_park"] * 6),
        )
        rng = ScriptedRandom([])
        after, reshuffled = deck_manager.draw_for_turn(deck, rng)
        assert not reshuffled
        assert rng.calls == 0
        assert len(after.hand) == 5
        assert len(after.draw_pile) == 1
        assert [c.id for c in after.discard_pile] == ["plant_tree", "plant_tree"]

    def test_reshuffle_fills_hand(self, catalog):
        deck = DeckState(
            hand=catalog.cards_by_ids(["plant_tree"]),
            draw_pile=catalog.cards_by_ids(["create_park"] * 2),
            discard_pile=catalog.cards_by_ids(["build_house"] * 4),
        )
        after, reshuffled = deck_manager.draw_for_turn(deck, ScriptedRandom([], fallback=0.5))
        assert reshuffled
        assert len(after.hand) == 5
        assert after.discard_pile == []
        assert after.owned_count == deck.owned_count

    def test_small_deck_draws_what_exists(self, catalog):
        deck = DeckState(
            draw_pile=catalog.cards_by_ids(["create_park"] * 2),
            discard_pile=catalog.cards_by_ids(["build_house"]),
        )
        after, _ = deck_manager.draw_for_turn(deck, ScriptedRandom([]))
        assert len(after.hand) == 3
        assert after.draw_pile == []

    def test_unplayed_cards_dropped_when_not_discarding(self, catalog):
        deck = DeckState(
            hand=catalog.cards_by_ids(["plant_tree"] * 3),
            draw_pile=catalog.cards_by_ids(["create_park"] * 6),
        )
        after, _ = deck_manager.draw_for_turn(deck, ScriptedRandom([]), discard_unplayed=False)
        assert after.discard_pile == []
        assert after.owned_count == deck.owned_count - 3

    def test_exhaust_pile_never_reshuffled(self, catalog):
        deck = DeckState(
            draw_pile=catalog.cards_by_ids(["create_park"]),
            discard_pile=catalog.cards_by_ids(["plant_tree"] * 5),
            exhaust_pile=catalog.cards_by_ids(["eco_law"]),
        )
        after, reshuffled = deck_manager.draw_for_turn(deck, ScriptedRandom([]))
        assert reshuffled
        assert [c.id for c in after.exhaust_pile] == ["eco_law"]
        assert all(c.id != "eco_law" for c in after.hand + after.draw_pile)


class TestAddToDeck:
    def test_new_card_enters_discard(self, catalog):
        deck = DeckState()
        after = deck_manager.add_to_deck(deck, catalog.card("mangrove"))
        assert [c.id for c in after.discard_pile] == ["mangrove"]
        assert deck.discard_pile == []
