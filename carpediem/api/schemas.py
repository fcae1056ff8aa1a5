"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between presentation clients and the
engine. All responses include explicit types for OpenAPI schema generation.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has expired
- INVALID_ACTION: Action payload could not be parsed
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    ACTIVE = "active"
    END_DAY_PENDING = "end_day_pending"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


class ActionName(str, Enum):
    """Player action tags accepted by POST /actions (BeginNextDay is sent by the game loop)."""
    USE_CARD = "UseCard"
    FREELANCE = "Freelance"
    RECUPERATE = "Recuperate"
    END_DAY = "EndDay"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_ACTION = "INVALID_ACTION"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """Card information for display."""
    key: str = Field(description="Asset key, e.g. 'AC' or 'KH'")
    value: int = Field(ge=1, le=13)
    suit: str
    name: str

    model_config = {"from_attributes": True}


class ResourcesInfo(BaseModel):
    """A resource vector (current values or a delta)."""
    action_points: int = 0
    energy: int = 0
    money: int = 0
    victory_points: int = 0

    model_config = {"from_attributes": True}


class LacksInfo(BaseModel):
    """Per-resource shortfall flags."""
    action_points: bool = False
    energy: bool = False
    money: bool = False

    model_config = {"from_attributes": True}


class HandSlot(BaseModel):
    """One slot of the day's hand."""
    index: int
    card: CardInfo
    used: bool = False


class EventInfo(BaseModel):
    """An engine event."""
    type: str = Field(description="UseCard, DayStart, Win, NotEnoughResources, ...")
    energy_loss: Optional[int] = None
    score: Optional[int] = None
    lacks: Optional[LacksInfo] = None
    reason: Optional[str] = None


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a new game session."""
    seed: Optional[int] = Field(None, description="Seed for a reproducible shuffle")


class ActionRequest(BaseModel):
    """Request to apply an action."""
    type: ActionName = Field(..., description="Action tag")
    index: Optional[int] = Field(None, description="Hand slot 0-3, UseCard only")

    def to_payload(self) -> dict[str, Any]:
        return {"type": self.type.value, "index": self.index}


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class GameStateResponse(BaseModel):
    """Complete game state for display."""
    session_id: str
    status: SessionStatus
    day: int
    days_total: int = 13
    resources: ResourcesInfo
    hand: list[HandSlot] = Field(default_factory=list)
    draw_pile_size: int = 0
    game_ended: bool = False
    end_day_due_in: Optional[float] = None
    outcome: Optional[str] = Field(None, description="win or lose once the game has ended")
    score: Optional[int] = None
    api_version: str = "v1"


class SessionResponse(BaseModel):
    """Response containing session information."""
    session_id: str
    status: SessionStatus
    created_at: float = 0.0
    seed: Optional[int] = None
    actions_taken: int = 0
    events: list[EventInfo] = Field(default_factory=list)
    game_state: Optional[GameStateResponse] = None
    api_version: str = "v1"


class ActionResponse(BaseModel):
    """Response after applying an action."""
    session_id: str
    success: bool = Field(description="False when the action was rejected")
    events: list[EventInfo] = Field(default_factory=list)
    game_state: GameStateResponse
    api_version: str = "v1"


class PreviewResponse(BaseModel):
    """What using a hand slot would do, without applying it."""
    session_id: str
    index: int
    card: CardInfo
    used: bool
    delta: ResourcesInfo
    lacks: Optional[LacksInfo] = None
    affordable: bool
    api_version: str = "v1"


class SessionListResponse(BaseModel):
    """Response listing sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
