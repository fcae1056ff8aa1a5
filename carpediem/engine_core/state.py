"""
Game State - The mutable record of a game in progress.

Design principles:
- One writer: the reducer mutates state in place
- Explicit: state is passed into the engine, never held globally
- Observable: snapshot() gives a plain-dict view for clients
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import random

from .cards import Card, generate_deck, shuffle
from .events import Event


HAND_SIZE = 4
DAYS = 13
DAILY_ACTION_POINTS = 5

STARTING_ENERGY = 3
STARTING_MONEY = 8

# Daily upkeep paid at EndDay
UPKEEP_MONEY = 4
UPKEEP_ENERGY = 1

# Lead card values above this all cost the same energy
MAX_CARD_ENERGY = 10


@dataclass(frozen=True)
class Resources:
    """A resource vector. Used for per-card deltas."""
    action_points: int = 0
    energy: int = 0
    money: int = 0
    victory_points: int = 0


@dataclass
class GameState:
    """
    Complete game state at a point in time.

    draw_pile is consumed from the end: the last card is the top.
    """
    day: int = 0
    victory_points: int = 0
    energy: int = STARTING_ENERGY
    money: int = STARTING_MONEY
    action_points: int = DAILY_ACTION_POINTS

    draw_pile: list[Card] = field(default_factory=list)
    day_cards: list[Card] = field(default_factory=list)
    used: list[bool] = field(default_factory=lambda: [False] * HAND_SIZE)

    game_ended: bool = False

    @property
    def resources(self) -> Resources:
        return Resources(
            action_points=self.action_points,
            energy=self.energy,
            money=self.money,
            victory_points=self.victory_points,
        )

    @property
    def is_last_day(self) -> bool:
        return self.day == DAYS

    def snapshot(self) -> dict[str, Any]:
        """Plain-dict view of the state (cards as keys)."""
        return {
            "day": self.day,
            "victory_points": self.victory_points,
            "energy": self.energy,
            "money": self.money,
            "action_points": self.action_points,
            "draw_pile_size": len(self.draw_pile),
            "day_cards": [card.key for card in self.day_cards],
            "used": list(self.used),
            "game_ended": self.game_ended,
        }


def new_game_state(rng: random.Random | None = None) -> tuple[GameState, Event]:
    """
    Create a fresh game and run the first day-begin.

    Returns (state, DayStart event). After construction state.day == 1.
    """
    state = GameState(draw_pile=shuffle(generate_deck(), rng))
    event = begin_day(state)
    return state, event


def begin_day(state: GameState) -> Event:
    """
    Start a new day: deal a hand and charge energy upkeep.

    Holding more energy than the lead card is worth costs one energy.
    Callers make sure the draw pile holds at least a full hand.
    """
    state.day += 1
    state.action_points = DAILY_ACTION_POINTS

    state.day_cards = [state.draw_pile.pop() for _ in range(HAND_SIZE)]
    state.used = [False] * HAND_SIZE

    first_card_energy = min(state.day_cards[0].value, MAX_CARD_ENERGY)
    energy_loss = 1 if state.energy > first_card_energy else 0
    state.energy -= energy_loss
    return Event.day_start(energy_loss)
