"""WebSocket handler streaming frames and accepting player input."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from neon_snake.server.session_manager import SessionManager
from neon_snake.snake import Direction

logger = logging.getLogger(__name__)

ws_router = APIRouter()


def _get_manager(ws: WebSocket) -> SessionManager:
    return ws.app.state.session_manager


@ws_router.websocket("/sessions/{session_id}/play")
async def play(websocket: WebSocket, session_id: str) -> None:
    """Send intents and commands, receive a snapshot every frame."""
    session = _get_manager(websocket).get_session(session_id)
    if session is None:
        await websocket.close(code=4004, reason="Session not found.")
        return

    await websocket.accept()
    session.clients.append(websocket)
    logger.info("Client connected to session %s.", session_id)

    # Send the current snapshot so the client can draw immediately.
    async with session.lock:
        snapshot = session.orchestrator.snapshot()
    await websocket.send_text(
        json.dumps({"snapshot": snapshot, "events": []}, separators=(",", ":")),
    )

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                continue
            if not isinstance(msg, dict):
                continue

            direction_str = msg.get("direction")
            command = msg.get("command")
            async with session.lock:
                if isinstance(direction_str, str):
                    try:
                        direction = Direction.parse(direction_str)
                    except ValueError:
                        continue
                    session.orchestrator.set_direction(direction)
                elif isinstance(command, str):
                    try:
                        session.orchestrator.handle_command(command)
                    except ValueError:
                        logger.debug("Ignoring unknown command %r.", command)
    except WebSocketDisconnect:
        logger.info("Client disconnected from session %s.", session_id)
    finally:
        if websocket in session.clients:
            session.clients.remove(websocket)
