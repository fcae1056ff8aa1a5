"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine calls
2. Manages sessions and their game loops
3. Serialises submissions per session (one writer per game)
4. Formats responses for clients

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import threading

from .schemas import (
    # Requests
    CreateSessionRequest,
    ActionRequest,
    # Responses
    SessionResponse,
    GameStateResponse,
    ActionResponse,
    PreviewResponse,
    # Shared
    CardInfo,
    ResourcesInfo,
    LacksInfo,
    HandSlot,
    EventInfo,
    # Enums
    SessionStatus,
)
from ..engine_core.action import Action
from ..engine_core.cards import Card
from ..engine_core.events import Event
from ..engine_core.reducer import get_delta, get_lacks, is_valid_index
from ..engine_core.state import DAYS
from ..session import SessionManager, Session, GameLoop, LoopState
from ..session.manager import SessionStatus as EngineSessionStatus

logger = logging.getLogger(__name__)


class SessionNotFoundError(KeyError):
    """Raised when a session ID is unknown or has been ended."""

    def __init__(self, session_id: str):
        super().__init__(session_id)
        self.session_id = session_id

    def __str__(self) -> str:
        return f"Session {self.session_id} not found"


def card_info(card: Card) -> CardInfo:
    return CardInfo(key=card.key, value=card.value, suit=card.suit.value, name=card.name)


def event_info(event: Event) -> EventInfo:
    return EventInfo(**event.to_dict())


@dataclass
class APIService:
    """
    Main API service for presentation clients.

    Usage:
        service = APIService()

        session = service.create_session(CreateSessionRequest(seed=7))
        response = service.submit_action(
            session.session_id, ActionRequest(type="UseCard", index=0)
        )
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    # Pacing delay before an automatic EndDay (0 = immediate)
    end_day_delay: float = 0.0

    # Game loops and write locks per session
    _game_loops: dict[str, GameLoop] = field(default_factory=dict)
    _locks: dict[str, threading.Lock] = field(default_factory=dict)

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """Create a new game session with day 1 dealt."""
        session = self.session_manager.create_session(seed=request.seed)

        game_loop = GameLoop(session, end_day_delay=self.end_day_delay)
        self._game_loops[session.session_id] = game_loop
        self._locks[session.session_id] = threading.Lock()

        start = game_loop.start()
        return self._session_to_response(session, events=start.events)

    def get_session(self, session_id: str) -> SessionResponse:
        session = self._get(session_id)
        return self._session_to_response(session)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_sessions()

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        """End a session, dropping any scheduled EndDay."""
        game_loop = self._game_loops.pop(session_id, None)
        if game_loop:
            game_loop.cancel_pending()
        self._locks.pop(session_id, None)
        return self.session_manager.end_session(session_id, reason)

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        removed = self.session_manager.cleanup_stale_sessions(max_age_seconds)
        live = set(self.session_manager.list_sessions())
        for session_id in [sid for sid in self._game_loops if sid not in live]:
            self._game_loops.pop(session_id).cancel_pending()
            self._locks.pop(session_id, None)
        return removed

    def get_game_state(self, session_id: str) -> GameStateResponse:
        session = self._get(session_id)
        return self._game_state_response(session)

    def submit_action(self, session_id: str, request: ActionRequest) -> ActionResponse:
        """
        Apply an action through the session's game loop.

        Raises ValueError if the action payload is malformed.
        """
        session = self._get(session_id)
        action = Action.from_dict(request.to_payload())

        with self._locks[session_id]:
            result = self._game_loops[session_id].submit(action)

        return ActionResponse(
            session_id=session_id,
            success=result.success,
            events=[event_info(e) for e in result.events],
            game_state=self._game_state_response(session),
        )

    def tick(self, session_id: str) -> ActionResponse:
        """Fire a scheduled EndDay if it is due."""
        session = self._get(session_id)
        with self._locks[session_id]:
            result = self._game_loops[session_id].tick()

        return ActionResponse(
            session_id=session_id,
            success=True,
            events=[event_info(e) for e in result.events],
            game_state=self._game_state_response(session),
        )

    def preview_card(self, session_id: str, index: int) -> PreviewResponse:
        """
        Delta and shortfalls for a hand slot, without mutating state.

        Raises ValueError for an index outside 0-3.
        """
        session = self._get(session_id)
        if not is_valid_index(index):
            raise ValueError(f"Card index out of range: {index}")

        game_state = session.game_state
        delta = get_delta(index, game_state)
        lacks = get_lacks(delta, game_state)

        return PreviewResponse(
            session_id=session_id,
            index=index,
            card=card_info(game_state.day_cards[index]),
            used=game_state.used[index],
            delta=ResourcesInfo.model_validate(delta),
            lacks=LacksInfo.model_validate(lacks) if lacks else None,
            affordable=lacks is None and not game_state.used[index],
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _get(self, session_id: str) -> Session:
        session = self.session_manager.get_session(session_id)
        if not session or session_id not in self._game_loops:
            raise SessionNotFoundError(session_id)
        return session

    def _status(self, session: Session) -> SessionStatus:
        if session.status == EngineSessionStatus.GAME_OVER:
            return SessionStatus.GAME_OVER
        if session.status == EngineSessionStatus.ABANDONED:
            return SessionStatus.ABANDONED

        game_loop = self._game_loops.get(session.session_id)
        if game_loop and game_loop.state == LoopState.END_DAY_PENDING:
            return SessionStatus.END_DAY_PENDING
        return SessionStatus.ACTIVE

    def _game_state_response(self, session: Session) -> GameStateResponse:
        game_state = session.game_state
        game_loop = self._game_loops.get(session.session_id)
        result = game_loop.status() if game_loop else None

        return GameStateResponse(
            session_id=session.session_id,
            status=self._status(session),
            day=game_state.day,
            days_total=DAYS,
            resources=ResourcesInfo.model_validate(game_state.resources),
            hand=[
                HandSlot(index=i, card=card_info(card), used=game_state.used[i])
                for i, card in enumerate(game_state.day_cards)
            ],
            draw_pile_size=len(game_state.draw_pile),
            game_ended=game_state.game_ended,
            end_day_due_in=result.end_day_due_in if result else None,
            outcome=result.outcome if result else None,
            score=result.score if result else None,
        )

    def _session_to_response(
        self,
        session: Session,
        events: list[Event] | None = None,
    ) -> SessionResponse:
        return SessionResponse(
            session_id=session.session_id,
            status=self._status(session),
            created_at=session.created_at,
            seed=session.seed,
            actions_taken=len(session.history),
            events=[event_info(e) for e in events or []],
            game_state=self._game_state_response(session),
        )
