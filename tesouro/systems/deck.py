"""
Deck manager: the four-pile card lifecycle.

    draw_pile -> hand -> discard_pile -> (reshuffle) -> draw_pile
                      -> exhaust_pile (one-time cards, never return)

Every function returns a new DeckState and leaves its input untouched.
Bad hand indices come from player input, so they are ignored (the deck
comes back unchanged with no card) rather than raised.
"""

import logging

from ..state.schema import Card, DeckState
from ..tools.rng import RandomSource, shuffle

logger = logging.getLogger(__name__)


def draw_initial_hand(shuffled_deck: list[Card], draw_count: int = 5, max_hand: int = 7) -> DeckState:
    """
    Split an already shuffled deck into the opening hand and draw pile.

    Raises:
        ValueError: the deck is smaller than draw_count
    """
    if draw_count > len(shuffled_deck):
        raise ValueError(
            f"Cannot draw {draw_count} cards from a deck of {len(shuffled_deck)}"
        )
    hand_size = min(draw_count, max_hand)
    return DeckState(
        draw_pile=list(shuffled_deck[hand_size:]),
        hand=list(shuffled_deck[:hand_size]),
        draw_count=draw_count,
        max_hand=max_hand,
    )


def _take_from_hand(deck: DeckState, hand_index: int) -> tuple[DeckState, Card | None]:
    if not 0 <= hand_index < len(deck.hand):
        return deck, None
    result = deck.model_copy(deep=True)
    card = result.hand.pop(hand_index)
    return result, card


def play_card(deck: DeckState, hand_index: int) -> tuple[DeckState, Card | None]:
    """
    Remove a card from hand and route it to exhaust or discard.

    Returns:
        (new deck, played card), or (unchanged deck, None) on a bad index
    """
    result, card = _take_from_hand(deck, hand_index)
    if card is None:
        return deck, None
    if card.exhaust:
        result.exhaust_pile.append(card)
    else:
        result.discard_pile.append(card)
    return result, card


def discard_card(deck: DeckState, hand_index: int) -> tuple[DeckState, Card | None]:
    """Remove a card from hand to the discard pile, regardless of exhaust."""
    result, card = _take_from_hand(deck, hand_index)
    if card is None:
        return deck, None
    result.discard_pile.append(card)
    return result, card


def draw_for_turn(
    deck: DeckState,
    rng: RandomSource,
    discard_unplayed: bool = True,
) -> tuple[DeckState, bool]:
    """
    Replace the hand with a fresh draw.

    With discard_unplayed, leftover hand cards move to the discard pile
    first. Otherwise they are dropped, as the reference game did.

    If the draw pile holds fewer than draw_count cards, draw and discard
    piles are shuffled together into a new draw pile before drawing, so
    the hand is always full whenever enough cards exist.

    Returns:
        (new deck, whether a reshuffle happened)
    """
    result = deck.model_copy(deep=True)

    if discard_unplayed:
        result.discard_pile.extend(result.hand)
    elif result.hand:
        logger.debug(f"Dropping {len(result.hand)} unplayed cards on redraw")
    result.hand = []

    reshuffled = False
    if len(result.draw_pile) < result.draw_count:
        result.draw_pile = shuffle(rng, result.draw_pile + result.discard_pile)
        result.discard_pile = []
        reshuffled = True

    hand_size = min(result.draw_count, result.max_hand, len(result.draw_pile))
    result.hand = result.draw_pile[:hand_size]
    result.draw_pile = result.draw_pile[hand_size:]
    return result, reshuffled


def add_to_deck(deck: DeckState, card: Card) -> DeckState:
    """New cards enter circulation through the discard pile."""
    result = deck.model_copy(deep=True)
    result.discard_pile.append(card)
    return result


def all_cards(deck: DeckState) -> list[Card]:
    """Every owned card across the four piles."""
    return deck.draw_pile + deck.hand + deck.discard_pile + deck.exhaust_pile
