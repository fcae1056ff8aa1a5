"""
Engine Core - Deterministic rules for Carpe Diem.

The engine is the runtime that:
1. Builds and shuffles the deck
2. Creates GameState and deals each day's hand
3. Computes card deltas and affordability
4. Applies actions via the reducer and emits events
"""

from .cards import Card, Suit, card_key, generate_deck, shuffle
from .state import GameState, Resources, new_game_state, begin_day
from .action import Action, ActionType
from .events import Event, EventType, Lacks, InvalidReason
from .reducer import Reducer, apply_action, get_delta, get_lacks

__all__ = [
    "Card",
    "Suit",
    "card_key",
    "generate_deck",
    "shuffle",
    "GameState",
    "Resources",
    "new_game_state",
    "begin_day",
    "Action",
    "ActionType",
    "Event",
    "EventType",
    "Lacks",
    "InvalidReason",
    "Reducer",
    "apply_action",
    "get_delta",
    "get_lacks",
]
