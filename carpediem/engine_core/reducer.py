"""
Reducer - Applies actions to game state.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- Synchronous: every call runs to completion and returns one Event
- Validates before applying: rejected actions leave state untouched
- Rejections are events, not exceptions
"""

from __future__ import annotations
from typing import Callable

from .cards import Card, Suit, ACE, JACK, QUEEN, KING
from .state import (
    GameState,
    Resources,
    HAND_SIZE,
    DAILY_ACTION_POINTS,
    UPKEEP_MONEY,
    UPKEEP_ENERGY,
    begin_day,
)
from .action import Action, ActionType
from .events import Event, Lacks, InvalidReason, NOT_ENOUGH_ACTION_POINTS


SUIT_ENERGY = {
    Suit.CLUBS: 1,
    Suit.DIAMONDS: 0,
    Suit.HEARTS: -1,
    Suit.SPADES: -3,
}

CARD_VICTORY_POINTS = {
    JACK: 10,
    QUEEN: 20,
    KING: 30,
    ACE: 50,
}

# Aces and face cards cost this much money to use
FACE_CARD_COST = 5


def card_money(card: Card) -> int:
    if card.value == ACE or card.is_face:
        return -FACE_CARD_COST
    return card.value


def get_delta(index: int, state: GameState) -> Resources:
    """
    Resource change from using the card in hand slot `index`.

    Depends only on the card and its slot: slot i costs i + 1 action points.
    Safe to call repeatedly for previews.
    """
    card = state.day_cards[index]
    return Resources(
        action_points=-(index + 1),
        energy=SUIT_ENERGY[card.suit],
        money=card_money(card),
        victory_points=CARD_VICTORY_POINTS.get(card.value, 0),
    )


def get_lacks(delta: Resources, state: GameState) -> Lacks | None:
    """Return the resources `delta` would drive negative, or None if affordable."""
    lacks = Lacks(
        action_points=state.action_points + delta.action_points < 0,
        energy=state.energy + delta.energy < 0,
        money=state.money + delta.money < 0,
    )
    if lacks.any:
        return lacks
    return None


def is_valid_index(index: object) -> bool:
    return (
        isinstance(index, int)
        and not isinstance(index, bool)
        and 0 <= index < HAND_SIZE
    )


class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState.
    """

    def __init__(self):
        self._handlers = self.handlers()

    def apply(self, state: GameState, action: Action) -> Event:
        """
        Apply an action to the game state.

        Returns the resulting Event. Out-of-contract actions produce
        an INVALID_ACTION event and no mutation.
        """
        invalid = self._validate_action(state, action)
        if invalid:
            return Event.invalid(invalid)

        handler = self._get_handler(action.action_type)
        return handler(state, action)

    def _validate_action(self, state: GameState, action: Action) -> InvalidReason | None:
        """
        Check the action is within contract for the current state.

        Returns the reason if invalid, None if valid.
        """
        if state.game_ended:
            return InvalidReason.GAME_OVER

        if action.action_type == ActionType.USE_CARD and not is_valid_index(action.index):
            return InvalidReason.CARD_INDEX_OUT_OF_RANGE

        if action.action_type == ActionType.BEGIN_NEXT_DAY and len(state.draw_pile) < HAND_SIZE:
            return InvalidReason.DRAW_PILE_EXHAUSTED

        return None

    def _get_handler(self, action_type: ActionType) -> Callable[[GameState, Action], Event]:
        """Get the handler function for an action type."""
        return self._handlers[action_type]

    def handlers(self) -> dict[ActionType, Callable[[GameState, Action], Event]]:
        return {
            ActionType.USE_CARD: self._handle_use_card,
            ActionType.FREELANCE: self._handle_freelance,
            ActionType.RECUPERATE: self._handle_recuperate,
            ActionType.END_DAY: self._handle_end_day,
            ActionType.BEGIN_NEXT_DAY: self._handle_begin_next_day,
        }

    def _handle_use_card(self, state: GameState, action: Action) -> Event:
        index = action.index
        if state.used[index]:
            return Event.card_already_used()

        delta = get_delta(index, state)
        lacks = get_lacks(delta, state)
        if lacks:
            return Event.not_enough_resources(lacks)

        state.action_points += delta.action_points
        state.energy += delta.energy
        state.money += delta.money
        state.victory_points += delta.victory_points
        state.used[index] = True

        return Event.use_card()

    def _handle_freelance(self, state: GameState, action: Action) -> Event:
        if state.action_points < 1:
            return NOT_ENOUGH_ACTION_POINTS

        state.action_points -= 1
        state.money += 1
        return Event.freelance()

    def _handle_recuperate(self, state: GameState, action: Action) -> Event:
        if state.action_points < 1:
            return NOT_ENOUGH_ACTION_POINTS

        state.action_points -= 1
        state.energy += 1
        return Event.recuperate()

    def _handle_end_day(self, state: GameState, action: Action) -> Event:
        """Charge upkeep, then decide lose / win / next day."""
        state.money -= UPKEEP_MONEY
        state.energy -= UPKEEP_ENERGY

        if state.money < 0 or state.energy < 0:
            state.game_ended = True
            return Event.lose()

        if state.is_last_day:
            state.game_ended = True
            return Event.win(score=state.victory_points + state.money)

        return Event.day_end()

    def _handle_begin_next_day(self, state: GameState, action: Action) -> Event:
        state.action_points = DAILY_ACTION_POINTS
        return begin_day(state)


_reducer = Reducer()


def apply_action(action: Action, state: GameState) -> Event:
    """
    Convenience function to apply an action.

    Usage:
        event = apply_action(Action.use_card(0), state)
        if event.is_rejection:
            # State is unchanged
            ...
    """
    return _reducer.apply(state, action)
