"""
Events - Outcomes emitted by the rules engine.

Every call to apply_action returns exactly one Event. Rejections are
events too; the engine never raises for a rejected action.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any


class EventType(Enum):
    """Types of events emitted by the engine."""
    # Accepted player actions
    USE_CARD = "UseCard"
    FREELANCE = "Freelance"
    RECUPERATE = "Recuperate"

    # Recoverable rejections
    CARD_ALREADY_USED = "CardAlreadyUsed"
    NOT_ENOUGH_RESOURCES = "NotEnoughResources"
    INVALID_ACTION = "InvalidAction"  # Out-of-contract input

    # Day transitions
    DAY_START = "DayStart"
    DAY_END = "DayEnd"

    # Terminal outcomes
    WIN = "Win"
    LOSE = "Lose"


REJECTIONS = frozenset({
    EventType.CARD_ALREADY_USED,
    EventType.NOT_ENOUGH_RESOURCES,
    EventType.INVALID_ACTION,
})

TERMINAL = frozenset({EventType.WIN, EventType.LOSE})


class InvalidReason(Enum):
    """Why an action was out of contract."""
    GAME_OVER = "game_over"
    CARD_INDEX_OUT_OF_RANGE = "card_index_out_of_range"
    DRAW_PILE_EXHAUSTED = "draw_pile_exhausted"
    DRIVER_ONLY = "driver_only"  # BeginNextDay sent by a player


@dataclass(frozen=True)
class Lacks:
    """Per-resource flags: True where a delta would drive the resource negative."""
    action_points: bool
    energy: bool
    money: bool

    @property
    def any(self) -> bool:
        return self.action_points or self.energy or self.money


@dataclass(frozen=True)
class Event:
    """
    An engine event.

    Payload fields are only set for the event types that carry them:
    - DAY_START: energy_loss (0 or 1)
    - WIN: score
    - NOT_ENOUGH_RESOURCES: lacks
    - INVALID_ACTION: reason
    """
    event_type: EventType
    energy_loss: int | None = None
    score: int | None = None
    lacks: Lacks | None = None
    reason: InvalidReason | None = None

    @property
    def is_rejection(self) -> bool:
        return self.event_type in REJECTIONS

    @property
    def is_terminal(self) -> bool:
        return self.event_type in TERMINAL

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the tag under 'type' and only the fields in use."""
        data: dict[str, Any] = {"type": self.event_type.value}
        if self.energy_loss is not None:
            data["energy_loss"] = self.energy_loss
        if self.score is not None:
            data["score"] = self.score
        if self.lacks is not None:
            data["lacks"] = asdict(self.lacks)
        if self.reason is not None:
            data["reason"] = self.reason.value
        return data

    @classmethod
    def use_card(cls) -> Event:
        return cls(event_type=EventType.USE_CARD)

    @classmethod
    def card_already_used(cls) -> Event:
        return cls(event_type=EventType.CARD_ALREADY_USED)

    @classmethod
    def not_enough_resources(cls, lacks: Lacks) -> Event:
        return cls(event_type=EventType.NOT_ENOUGH_RESOURCES, lacks=lacks)

    @classmethod
    def freelance(cls) -> Event:
        return cls(event_type=EventType.FREELANCE)

    @classmethod
    def recuperate(cls) -> Event:
        return cls(event_type=EventType.RECUPERATE)

    @classmethod
    def day_start(cls, energy_loss: int) -> Event:
        return cls(event_type=EventType.DAY_START, energy_loss=energy_loss)

    @classmethod
    def day_end(cls) -> Event:
        return cls(event_type=EventType.DAY_END)

    @classmethod
    def win(cls, score: int) -> Event:
        return cls(event_type=EventType.WIN, score=score)

    @classmethod
    def lose(cls) -> Event:
        return cls(event_type=EventType.LOSE)

    @classmethod
    def invalid(cls, reason: InvalidReason) -> Event:
        return cls(event_type=EventType.INVALID_ACTION, reason=reason)


NOT_ENOUGH_ACTION_POINTS = Event.not_enough_resources(
    Lacks(action_points=True, energy=False, money=False)
)
