"""REST API route handlers for play-session management."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from neon_snake.server.models import (
    CommandRequest,
    CommandResponse,
    CreateSessionRequest,
    ErrorResponse,
    SessionSummary,
)

router = APIRouter(prefix="/sessions", tags=["sessions"])

_NOT_FOUND = {404: {"model": ErrorResponse}}


def _get_manager(request: Request):
    return request.app.state.session_manager


@router.post("", status_code=201)
async def create_session(body: CreateSessionRequest, request: Request) -> SessionSummary:
    """Create a new session and start its frame loop."""
    manager = _get_manager(request)
    try:
        session = manager.create_session(
            seed=body.seed,
            columns=body.columns,
            rows=body.rows,
            frame_rate=body.frame_rate,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return session.summary()


@router.get("")
async def list_sessions(request: Request) -> list[SessionSummary]:
    return _get_manager(request).list_sessions()


@router.get("/{session_id}", responses=_NOT_FOUND)
async def get_session(session_id: str, request: Request) -> dict:
    """Session summary plus the current game snapshot."""
    session = _get_manager(request).get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found.")
    async with session.lock:
        snapshot = session.orchestrator.snapshot()
    return {**session.summary().model_dump(mode="json"), "state": snapshot}


@router.post("/{session_id}/commands", responses=_NOT_FOUND)
async def send_command(
    session_id: str, body: CommandRequest, request: Request,
) -> CommandResponse:
    """Apply start, toggle_pause, restart or a debug spawn command."""
    manager = _get_manager(request)
    session = manager.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found.")
    try:
        accepted = await manager.command(session_id, body.command)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=f"Unknown command {body.command!r}.") from exc
    return CommandResponse(accepted=accepted, phase=session.orchestrator.phase.value)


@router.delete("/{session_id}", status_code=204, responses=_NOT_FOUND)
async def close_session(session_id: str, request: Request) -> None:
    try:
        await _get_manager(request).close_session(session_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
