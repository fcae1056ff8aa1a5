"""
Session Manager - Creates and manages game sessions.

LIFECYCLE:
1. Client starts a session -> fresh shuffled game, first day dealt
2. During the game the client submits actions through a GameLoop
3. Game ends (Win/Lose) or the client abandons it
4. Session is removed; nothing is persisted

PERSISTENCE RULES:
- Game state lives in memory for the session's lifetime only
- Sessions share no mutable state; each has exactly one GameState
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import random
import time
import uuid

from ..engine_core.state import GameState, new_game_state
from ..engine_core.action import Action
from ..engine_core.events import Event, EventType

logger = logging.getLogger(__name__)


class SessionStatus(Enum):
    """State of a game session."""
    ACTIVE = "active"  # Game in progress
    GAME_OVER = "game_over"  # Win or Lose emitted
    ABANDONED = "abandoned"  # Ended before the game finished


@dataclass
class Session:
    """
    An ephemeral game session.

    Contains:
    - The canonical game state (mutated only by the engine)
    - The DayStart event produced when the game was created
    - Every (action, event) pair applied so far
    """
    session_id: str
    created_at: float
    game_state: GameState
    initial_event: Event

    status: SessionStatus = SessionStatus.ACTIVE
    seed: int | None = None

    history: list[tuple[Action, Event]] = field(default_factory=list)

    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    def record(self, action: Action, event: Event):
        self.history.append((action, event))
        if event.is_terminal:
            self.status = SessionStatus.GAME_OVER

    @property
    def outcome(self) -> Event | None:
        """The Win/Lose event, once the game has ended."""
        for _, event in reversed(self.history):
            if event.event_type in (EventType.WIN, EventType.LOSE):
                return event
        return None


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions with a fresh game
    - Track live sessions
    - Clean up ended or stale sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def create_session(self, seed: int | None = None) -> Session:
        """
        Create a new game session.

        Args:
            seed: Optional seed for a reproducible shuffle

        Returns:
            New Session with day 1 already dealt
        """
        rng = random.Random(seed) if seed is not None else None
        game_state, initial_event = new_game_state(rng)

        session = Session(
            session_id=str(uuid.uuid4()),
            created_at=time.time(),
            game_state=game_state,
            initial_event=initial_event,
            seed=seed,
        )
        self._sessions[session.session_id] = session
        logger.info("Created session %s (seed=%s)", session.session_id, seed)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and drop it from memory.

        Returns False if the session did not exist.
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False

        if session.status == SessionStatus.ACTIVE:
            session.status = SessionStatus.ABANDONED
        logger.info(
            "Ended session %s (reason=%s, status=%s)",
            session_id, reason, session.status.value,
        )
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of sessions with a game still in progress."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def list_sessions(self) -> list[str]:
        return list(self._sessions)

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        Drop sessions older than max_age_seconds.

        Returns the number of sessions removed.
        """
        current_time = time.time()
        to_remove = [
            session_id
            for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds
        ]

        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        return len(to_remove)
