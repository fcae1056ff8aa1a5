"""
Session Module - Manages ephemeral game sessions.

A session represents one play-through of a game:
- Created when a client starts a game
- Holds the canonical game state
- Driven by a GameLoop that sequences days
- Destroyed when the game ends or is abandoned

Sessions are EPHEMERAL: nothing is persisted.
"""

from .manager import SessionManager, Session, SessionStatus
from .game_loop import GameLoop, LoopState, TurnResult

__all__ = [
    "SessionManager",
    "Session",
    "SessionStatus",
    "GameLoop",
    "LoopState",
    "TurnResult",
]
