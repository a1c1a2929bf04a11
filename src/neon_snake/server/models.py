"""Pydantic models for API request/response schemas."""

from __future__ import annotations

import enum

from pydantic import BaseModel, Field


class SessionStatus(str, enum.Enum):
    """Lifecycle states for a play session."""

    RUNNING = "running"
    CLOSED = "closed"


class CreateSessionRequest(BaseModel):
    """Request body for POST /sessions."""

    seed: int | None = None
    columns: int = Field(default=32, ge=8, le=128)
    rows: int = Field(default=24, ge=8, le=128)
    frame_rate: int = Field(default=60, ge=1, le=120)


class CommandRequest(BaseModel):
    """Request body for POST /sessions/{session_id}/commands."""

    command: str = Field(min_length=1, max_length=32)


class CommandResponse(BaseModel):
    accepted: bool
    phase: str


class SessionSummary(BaseModel):
    """Compact session info for list endpoints."""

    session_id: str
    status: SessionStatus
    phase: str
    frame_rate: int
    clients: int


class ErrorResponse(BaseModel):
    """Standard error envelope."""

    detail: str
