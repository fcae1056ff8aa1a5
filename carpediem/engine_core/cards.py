"""
Cards - The 52-card universe and shuffling.

A card is identified by (value, suit). The deck enumeration order is fixed:
values ascending on the outside, suits in declared order on the inside.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import random


class Suit(Enum):
    """Card suits, in deck enumeration order."""
    CLUBS = "Clubs"
    DIAMONDS = "Diamonds"
    HEARTS = "Hearts"
    SPADES = "Spades"


ACE = 1
JACK = 11
QUEEN = 12
KING = 13

RANK_CHARS = "0A23456789TJQK"

RANK_NAMES = {
    ACE: "Ace",
    JACK: "Jack",
    QUEEN: "Queen",
    KING: "King",
}


@dataclass(frozen=True)
class Card:
    """
    A playing card.

    value: 1 = Ace, 11 = Jack, 12 = Queen, 13 = King.
    """
    value: int
    suit: Suit

    @property
    def key(self) -> str:
        """Asset key, e.g. 'AC' or 'KH'."""
        return card_key(self)

    @property
    def name(self) -> str:
        rank = RANK_NAMES.get(self.value, str(self.value))
        return f"{rank} of {self.suit.value}"

    @property
    def is_face(self) -> bool:
        return self.value > 10

    def __str__(self) -> str:
        return self.key


def card_key(card: Card) -> str:
    """
    Stable identifier used to map a card to a visual resource.

    Rank character from "0A23456789TJQK" plus the first letter of the suit.
    """
    return RANK_CHARS[card.value] + card.suit.value[0]


def generate_deck() -> list[Card]:
    """Build the ordered 52-card deck. Deterministic."""
    return [
        Card(value=value, suit=suit)
        for value in range(ACE, KING + 1)
        for suit in Suit
    ]


def shuffle(cards: list, rng: random.Random | None = None) -> list:
    """
    Shuffle cards in place (Fisher-Yates) and return the same list.

    Pass a seeded random.Random for reproducible games.
    """
    randint = (rng or random).randint
    for i in range(len(cards) - 1, 0, -1):
        j = randint(0, i)
        cards[i], cards[j] = cards[j], cards[i]
    return cards
