"""
Game Loop - Drives day sequencing around the rules engine.

The engine never sequences days on its own. The loop:
1. Applies the submitted action
2. On DayEnd (game not over), immediately begins the next day
3. When action points reach 0 (game not over), schedules EndDay
4. Repeats until Win or Lose

EndDay may be delayed for pacing. The delay is cosmetic: dropping a
scheduled EndDay (cancel_pending) never leaves the state half-updated.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, TYPE_CHECKING
import logging
import time

from ..engine_core.action import Action, ActionType
from ..engine_core.events import Event, EventType, InvalidReason
from ..engine_core.reducer import apply_action

if TYPE_CHECKING:
    from .manager import Session

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """State of the game loop."""
    WAITING_ACTION = "waiting_action"
    END_DAY_PENDING = "end_day_pending"
    GAME_OVER = "game_over"


@dataclass
class TurnResult:
    """
    Result of one submission (or tick).

    events holds every event the engine produced, in order: the
    response to the submitted action first, then any follow-ups.
    """
    loop_state: LoopState
    events: list[Event] = field(default_factory=list)

    # Seconds until a scheduled EndDay fires
    end_day_due_in: float | None = None

    # Game over info
    outcome: str | None = None  # "win" or "lose"
    score: int | None = None

    @property
    def success(self) -> bool:
        """False when the submitted action was rejected."""
        return bool(self.events) and not self.events[0].is_rejection


class GameLoop:
    """
    The orchestration driver for one session.

    Usage:
        loop = GameLoop(session)
        loop.start()

        result = loop.submit(Action.use_card(0))
        if result.loop_state == LoopState.END_DAY_PENDING:
            # Later, from a timer
            result = loop.tick()
    """

    def __init__(
        self,
        session: Session,
        end_day_delay: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session = session
        self.end_day_delay = end_day_delay
        self._clock = clock
        self._end_day_due: float | None = None

    @property
    def state(self) -> LoopState:
        if self.session.game_state.game_ended:
            return LoopState.GAME_OVER
        if self._end_day_due is not None:
            return LoopState.END_DAY_PENDING
        return LoopState.WAITING_ACTION

    def status(self) -> TurnResult:
        """Current loop state without applying anything."""
        return self._result([])

    def start(self) -> TurnResult:
        """Report the DayStart produced when the game was created."""
        return self._result([self.session.initial_event])

    def submit(self, action: Action) -> TurnResult:
        """
        Apply a player action and any follow-ups it triggers.

        BeginNextDay is only ever sent by the loop itself after DayEnd;
        a player submitting it gets an InvalidAction and nothing changes.
        """
        if action.action_type == ActionType.BEGIN_NEXT_DAY:
            event = Event.invalid(InvalidReason.DRIVER_ONLY)
            self.session.record(action, event)
            logger.debug(
                "Session %s: rejected player %s",
                self.session.session_id, action.to_dict(),
            )
            return self._result([event])

        if action.action_type == ActionType.END_DAY:
            self._end_day_due = None

        event = self._apply(action)
        events = [event, *self._follow_up(event)]
        return self._result(events)

    def tick(self, now: float | None = None) -> TurnResult:
        """Fire a scheduled EndDay if it is due."""
        if self._end_day_due is None:
            return self._result([])

        now = self._clock() if now is None else now
        if now < self._end_day_due:
            return self._result([])

        self._end_day_due = None
        event = self._apply(Action.end_day())
        return self._result([event, *self._follow_up(event)])

    def cancel_pending(self):
        """Drop a scheduled EndDay without touching the game state."""
        if self._end_day_due is not None:
            logger.debug("Cancelled pending EndDay for %s", self.session.session_id)
        self._end_day_due = None

    def _apply(self, action: Action) -> Event:
        event = apply_action(action, self.session.game_state)
        self.session.record(action, event)

        if event.is_rejection:
            logger.debug(
                "Session %s: %s rejected with %s",
                self.session.session_id, action.to_dict(), event.to_dict(),
            )
        elif event.is_terminal:
            logger.info(
                "Session %s: game over on day %d (%s)",
                self.session.session_id, self.session.game_state.day, event.to_dict(),
            )
        return event

    def _follow_up(self, event: Event) -> list[Event]:
        """Events produced by the day-sequencing convention after `event`."""
        game_state = self.session.game_state
        if game_state.game_ended:
            return []

        if event.event_type == EventType.DAY_END:
            return [self._apply(Action.begin_next_day())]

        if game_state.action_points == 0 and self._end_day_due is None:
            if self.end_day_delay <= 0:
                end_event = self._apply(Action.end_day())
                return [end_event, *self._follow_up(end_event)]
            self._end_day_due = self._clock() + self.end_day_delay

        return []

    def _result(self, events: list[Event]) -> TurnResult:
        result = TurnResult(loop_state=self.state, events=events)

        if self._end_day_due is not None:
            result.end_day_due_in = max(0.0, self._end_day_due - self._clock())

        outcome = self.session.outcome
        if outcome is not None:
            result.outcome = "win" if outcome.event_type == EventType.WIN else "lose"
            result.score = outcome.score
        return result
