"""
Action System - Player and driver actions.

Actions represent:
1. Player actions (use a card, freelance, recuperate)
2. Day sequencing (end day, begin next day), normally sent by the driver

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ActionType(Enum):
    """Types of actions in the system."""
    # Player actions
    USE_CARD = "UseCard"
    FREELANCE = "Freelance"
    RECUPERATE = "Recuperate"

    # Day sequencing
    END_DAY = "EndDay"
    BEGIN_NEXT_DAY = "BeginNextDay"


@dataclass(frozen=True)
class Action:
    """
    A complete action to be applied to the game state.

    index is the hand slot (0..3) and is only meaningful for USE_CARD.
    """
    action_type: ActionType
    index: int | None = None

    @classmethod
    def use_card(cls, index: int) -> Action:
        """Factory for use-card action."""
        return cls(action_type=ActionType.USE_CARD, index=index)

    @classmethod
    def freelance(cls) -> Action:
        return cls(action_type=ActionType.FREELANCE)

    @classmethod
    def recuperate(cls) -> Action:
        return cls(action_type=ActionType.RECUPERATE)

    @classmethod
    def end_day(cls) -> Action:
        return cls(action_type=ActionType.END_DAY)

    @classmethod
    def begin_next_day(cls) -> Action:
        return cls(action_type=ActionType.BEGIN_NEXT_DAY)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Action:
        """
        Parse an action from its wire form, e.g. {"type": "UseCard", "index": 2}.

        Raises ValueError for unknown types or a missing/non-integer index.
        The range of the index is checked by the engine, not here.
        """
        raw_type = data.get("type")
        try:
            action_type = ActionType(raw_type)
        except ValueError:
            raise ValueError(f"Unknown action type: {raw_type!r}") from None

        if action_type != ActionType.USE_CARD:
            return cls(action_type=action_type)

        index = data.get("index")
        if isinstance(index, bool) or not isinstance(index, int):
            raise ValueError(f"UseCard requires an integer index, got {index!r}")
        return cls.use_card(index)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.action_type.value}
        if self.action_type == ActionType.USE_CARD:
            data["index"] = self.index
        return data
