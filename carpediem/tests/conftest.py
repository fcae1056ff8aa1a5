"""
Pytest fixtures for Carpe Diem tests.
"""

import random

import pytest

from ..engine_core.cards import Card, Suit, generate_deck
from ..engine_core.state import GameState
from ..session import SessionManager, Session


def make_state(
    hand: list[Card] | None = None,
    draw_pile: list[Card] | None = None,
    **overrides,
) -> GameState:
    """
    Build a GameState with an explicit hand.

    The default hand is cheap and affordable from the starting resources:
    2 of Diamonds, 3 of Clubs, 4 of Diamonds, 5 of Clubs.
    """
    if hand is None:
        hand = [
            Card(2, Suit.DIAMONDS),
            Card(3, Suit.CLUBS),
            Card(4, Suit.DIAMONDS),
            Card(5, Suit.CLUBS),
        ]
    if draw_pile is None:
        draw_pile = [c for c in generate_deck() if c not in hand][:44]

    fields = {"day": 1}
    fields.update(overrides)
    return GameState(draw_pile=list(draw_pile), day_cards=list(hand), **fields)


@pytest.fixture
def state() -> GameState:
    """Day 1 with the default hand and starting resources."""
    return make_state()


@pytest.fixture
def face_hand_state() -> GameState:
    """Hand of Ace of Spades, Jack of Hearts, Queen of Clubs, King of Diamonds."""
    return make_state(hand=[
        Card(1, Suit.SPADES),
        Card(11, Suit.HEARTS),
        Card(12, Suit.CLUBS),
        Card(13, Suit.DIAMONDS),
    ])


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def manager() -> SessionManager:
    return SessionManager()


@pytest.fixture
def session(manager: SessionManager) -> Session:
    """A seeded session, day 1 dealt."""
    return manager.create_session(seed=42)
