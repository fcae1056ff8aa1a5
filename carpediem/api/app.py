"""
FastAPI Application - REST API for presentation clients.

Endpoints:
    POST   /api/v1/sessions                       Create game session
    GET    /api/v1/sessions                       List sessions
    GET    /api/v1/sessions/{id}                  Get session status
    DELETE /api/v1/sessions/{id}                  End session
    GET    /api/v1/sessions/{id}/state            Get game state
    POST   /api/v1/sessions/{id}/actions          Apply an action
    GET    /api/v1/sessions/{id}/preview/{index}  Preview a hand slot
    POST   /api/v1/sessions/{id}/tick             Fire a due EndDay
    WS     /api/v1/sessions/{id}/ws               WebSocket for event updates

Day Sequencing:
    The server drives day transitions. After an action, a DayEnd is
    followed by the next day's DayStart in the same response. When action
    points run out, EndDay fires immediately, or after
    CARPEDIEM_END_DAY_DELAY seconds (status end_day_pending; call /tick).

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Optional, Union
import json
import logging
import os

from fastapi import FastAPI, Path, Query, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from .service import APIService, SessionNotFoundError
from .schemas import (
    # Request models
    CreateSessionRequest,
    ActionRequest,
    # Response models
    SessionResponse,
    GameStateResponse,
    ActionResponse,
    PreviewResponse,
    ErrorResponse,
    SessionListResponse,
    EndSessionResponse,
    HealthResponse,
    # Enums
    ErrorCode,
)

logger = logging.getLogger(__name__)

# Environment configuration
CARPEDIEM_ENV = os.getenv("CARPEDIEM_ENV", "development")
CARPEDIEM_END_DAY_DELAY = float(os.getenv("CARPEDIEM_END_DAY_DELAY", "0"))
CARPEDIEM_SESSION_TTL = int(os.getenv("CARPEDIEM_SESSION_TTL", "3600"))
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")


def create_app(service: Optional[APIService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Carpe Diem API",
        description="""
Single-player resource-management card game.

Spend action points across a hand of four cards to collect victory points
over 13 days without running out of money or energy.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `INVALID_ACTION` | Action payload could not be parsed |

Rule rejections (`CardAlreadyUsed`, `NotEnoughResources`, `InvalidAction`)
are not HTTP errors: they come back as events with `success=false`.
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService(end_day_delay=CARPEDIEM_END_DAY_DELAY)
    app.state.service = api_service

    # WebSocket connections
    ws_connections: dict[str, list[WebSocket]] = {}

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(SessionNotFoundError)
    async def session_not_found(request, exc: SessionNotFoundError) -> JSONResponse:
        return make_error_response(ErrorCode.SESSION_NOT_FOUND, str(exc), status_code=404)

    async def broadcast_to_session(session_id: str, message: dict):
        """Broadcast a message to all WebSocket connections for a session."""
        if session_id in ws_connections:
            dead_connections = []
            for ws in ws_connections[session_id]:
                try:
                    await ws.send_json(message)
                except (WebSocketDisconnect, RuntimeError):
                    dead_connections.append(ws)
            for ws in dead_connections:
                ws_connections[session_id].remove(ws)

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        tags=["Sessions"],
        summary="Create a new game session",
    )
    async def create_session(body: Optional[CreateSessionRequest] = None) -> SessionResponse:
        """
        Create a new game session.

        The deck is shuffled and day 1 is dealt; the response carries the
        initial DayStart event. Pass `seed` for a reproducible game.
        """
        api_service.cleanup_stale_sessions(CARPEDIEM_SESSION_TTL)
        return api_service.create_session(body or CreateSessionRequest())

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List sessions",
    )
    async def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> SessionResponse:
        return api_service.get_session(session_id)

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a game session",
    )
    async def end_session(
        session_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndSessionResponse:
        """End a game session and release resources."""
        success = api_service.end_session(session_id, reason)
        ws_connections.pop(session_id, None)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get current game state",
    )
    async def get_game_state(session_id: str) -> GameStateResponse:
        return api_service.get_game_state(session_id)

    @app.post(
        "/api/v1/sessions/{session_id}/actions",
        response_model=ActionResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Malformed action"},
            404: {"model": ErrorResponse, "description": "Session not found"},
        },
        tags=["Game"],
        summary="Apply an action",
    )
    async def submit_action(
        session_id: str,
        body: ActionRequest,
    ) -> Union[ActionResponse, JSONResponse]:
        """
        Apply an action and any day transitions it triggers.

        **Request Body:**
        ```json
        {"type": "UseCard", "index": 2}
        ```
        """
        try:
            response = api_service.submit_action(session_id, body)
        except ValueError as e:
            return make_error_response(ErrorCode.INVALID_ACTION, str(e))

        await broadcast_to_session(session_id, {
            "type": "events",
            "payload": response.model_dump(mode="json"),
        })
        return response

    @app.get(
        "/api/v1/sessions/{session_id}/preview/{index}",
        response_model=PreviewResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Preview using a hand slot",
    )
    async def preview_card(
        session_id: str,
        index: Annotated[int, Path(description="Hand slot", ge=0, le=3)],
    ) -> PreviewResponse:
        """Resource delta and shortfalls for a card, without applying it."""
        return api_service.preview_card(session_id, index)

    @app.post(
        "/api/v1/sessions/{session_id}/tick",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Fire a scheduled EndDay if due",
    )
    async def tick(session_id: str) -> ActionResponse:
        response = api_service.tick(session_id)
        if response.events:
            await broadcast_to_session(session_id, {
                "type": "events",
                "payload": response.model_dump(mode="json"),
            })
        return response

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        WebSocket for real-time updates.

        Messages from server:
        - state_update: Current game state (on connect)
        - events: Events produced by an action or tick
        - error: Error occurred

        Messages from client:
        - ping: Keep-alive
        """
        await websocket.accept()

        try:
            state = api_service.get_game_state(session_id)
        except SessionNotFoundError as e:
            await websocket.send_json({"type": "error", "payload": {"message": str(e)}})
            await websocket.close()
            return

        ws_connections.setdefault(session_id, []).append(websocket)
        try:
            await websocket.send_json({
                "type": "state_update",
                "payload": state.model_dump(mode="json"),
            })

            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })
                    continue
                if message.get("type") == "ping":
                    await websocket.send_json({"type": "pong"})

        except WebSocketDisconnect:
            logger.debug("WebSocket closed for session %s", session_id)
        finally:
            connections = ws_connections.get(session_id, [])
            if websocket in connections:
                connections.remove(websocket)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="carpediem",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Carpe Diem API",
            "version": __version__,
            "environment": CARPEDIEM_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn carpediem.api.app:app
app = create_app()
