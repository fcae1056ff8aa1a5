"""
API Module - HTTP interface for presentation clients.

Exposes the engine via REST API. A client:
1. Creates a game session
2. Reads the game state (hand, resources, day)
3. Previews cards and submits actions
4. Receives events, including day transitions and the final outcome

All state is session-scoped. Nothing is persisted.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    ActionRequest,
    # Responses
    SessionResponse,
    GameStateResponse,
    ActionResponse,
    PreviewResponse,
    ErrorResponse,
    # Shared
    CardInfo,
    ResourcesInfo,
    LacksInfo,
    EventInfo,
)
from .service import APIService, SessionNotFoundError
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "ActionRequest",
    # Responses
    "SessionResponse",
    "GameStateResponse",
    "ActionResponse",
    "PreviewResponse",
    "ErrorResponse",
    # Shared
    "CardInfo",
    "ResourcesInfo",
    "LacksInfo",
    "EventInfo",
    # Service
    "APIService",
    "SessionNotFoundError",
    "create_app",
]
