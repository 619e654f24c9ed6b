from __future__ import annotations

import random
from typing import Sequence

from .types import Card, Rank, Suit

_SUIT_ORDER: dict[Suit, int] = {suit: i for i, suit in enumerate(Suit)}

ATTACK_VALUES: dict[Rank, int] = {Rank.TWO: 2}
BLACK_JACK_VALUE = 5
POWER_RANKS = frozenset({Rank.QUEEN, Rank.KING, Rank.SEVEN})


def create_deck() -> list[Card]:
    """Return the 52 standard cards, suit-major in declaration order."""
    return [Card.of(suit, rank) for suit in Suit for rank in Rank]


def shuffle_deck(deck: Sequence[Card], rng: random.Random | None = None) -> list[Card]:
    """Fisher-Yates shuffle into a new list; `deck` is left untouched."""
    r = rng or random
    out = list(deck)
    for i in range(len(out) - 1, 0, -1):
        j = r.randrange(i + 1)
        out[i], out[j] = out[j], out[i]
    return out


def sort_hand(hand: Sequence[Card]) -> list[Card]:
    return sorted(hand, key=lambda c: (_SUIT_ORDER[c.suit], c.rank.value_order))


def is_black_jack(card: Card) -> bool:
    return card.rank == Rank.JACK and card.suit in (Suit.SPADES, Suit.CLUBS)


def is_attack_card(card: Card) -> bool:
    return card.rank == Rank.TWO or is_black_jack(card)


def attack_value(card: Card) -> int:
    if is_black_jack(card):
        return BLACK_JACK_VALUE
    return ATTACK_VALUES.get(card.rank, 0)


def is_power_card(card: Card) -> bool:
    return card.rank in POWER_RANKS
