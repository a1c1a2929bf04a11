"""In-memory session registry and per-session async frame loops."""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from dataclasses import dataclass, field

from starlette.websockets import WebSocket, WebSocketState

from neon_snake.config import GameConfig, GridConfig
from neon_snake.economy import Storage
from neon_snake.orchestrator import GameOrchestrator
from neon_snake.server.models import SessionStatus, SessionSummary

logger = logging.getLogger(__name__)

_MAX_SESSIONS = 32


@dataclass
class GameSession:
    """One orchestrator plus the sockets watching it."""

    session_id: str
    orchestrator: GameOrchestrator
    frame_rate: int
    status: SessionStatus = SessionStatus.RUNNING
    clients: list[WebSocket] = field(default_factory=list)
    created_at: float = field(default_factory=time.monotonic)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    _task: asyncio.Task | None = field(default=None, repr=False)

    def summary(self) -> SessionSummary:
        return SessionSummary(
            session_id=self.session_id,
            status=self.status,
            phase=self.orchestrator.phase.value,
            frame_rate=self.frame_rate,
            clients=len(self.clients),
        )


class SessionManager:
    """Central registry managing all live play sessions."""

    def __init__(
        self,
        max_sessions: int = _MAX_SESSIONS,
        storage: Storage | None = None,
    ) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be >= 1.")
        self._sessions: dict[str, GameSession] = {}
        self._max_sessions = max_sessions
        self._storage = storage
        self._flush_lock = asyncio.Lock()

    def create_session(
        self,
        seed: int | None = None,
        columns: int = 32,
        rows: int = 24,
        frame_rate: int = 60,
    ) -> GameSession:
        """Create a session and start its frame loop."""
        if len(self._sessions) >= self._max_sessions:
            raise ValueError("Session limit reached. Try again later.")

        config = GameConfig(grid=GridConfig(columns=columns, rows=rows))
        session = GameSession(
            session_id=uuid.uuid4().hex[:12],
            orchestrator=GameOrchestrator(config, seed=seed, storage=self._storage),
            frame_rate=frame_rate,
        )
        self._sessions[session.session_id] = session
        session._task = asyncio.create_task(self._frame_loop(session))
        logger.info(
            "Session %s created (%dx%d @ %d fps).",
            session.session_id, columns, rows, frame_rate,
        )
        return session

    def get_session(self, session_id: str) -> GameSession | None:
        return self._sessions.get(session_id)

    def list_sessions(self) -> list[SessionSummary]:
        return [s.summary() for s in self._sessions.values()]

    async def command(self, session_id: str, command: str) -> bool:
        """Apply a named command. Raises KeyError or ValueError."""
        session = self._sessions.get(session_id)
        if session is None:
            raise KeyError(f"Session {session_id} not found.")
        async with session.lock:
            return session.orchestrator.handle_command(command)

    async def close_session(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise KeyError(f"Session {session_id} not found.")
        session.status = SessionStatus.CLOSED
        if session._task and not session._task.done():
            session._task.cancel()
            await asyncio.gather(session._task, return_exceptions=True)
        await self._close_connections(session)
        logger.info("Session %s closed.", session_id)

    async def flush_storage(self) -> None:
        """Write buffered storage changes from a worker thread."""
        if self._storage is None:
            return
        async with self._flush_lock:
            payload = self._storage.take_pending()
            if payload is not None:
                await asyncio.to_thread(self._storage.write, payload)

    async def _frame_loop(self, session: GameSession) -> None:
        """Advance the orchestrator at the session frame rate."""
        interval = 1.0 / session.frame_rate
        last = time.monotonic()
        try:
            while session.status == SessionStatus.RUNNING:
                await asyncio.sleep(interval)
                now = time.monotonic()
                async with session.lock:
                    events = session.orchestrator.advance(now - last)
                    snapshot = session.orchestrator.snapshot()
                last = now
                await self.flush_storage()
                if session.clients:
                    await self._broadcast(session, {
                        "snapshot": snapshot,
                        "events": [e.to_dict() for e in events],
                    })
        except asyncio.CancelledError:
            logger.info("Frame loop cancelled for session %s.", session.session_id)
        except Exception:
            logger.exception("Frame loop error in session %s.", session.session_id)
            session.status = SessionStatus.CLOSED

    async def _broadcast(self, session: GameSession, message: dict) -> None:
        """Send a frame message to every connected client."""
        payload = json.dumps(message, separators=(",", ":"))
        dead: list[WebSocket] = []
        # Iterate over a snapshot so disconnect handlers can mutate the list.
        for ws in list(session.clients):
            try:
                if ws.client_state == WebSocketState.CONNECTED:
                    await ws.send_text(payload)
            except Exception:
                dead.append(ws)
        for ws in dead:
            if ws in session.clients:
                session.clients.remove(ws)

    async def _close_connections(self, session: GameSession) -> None:
        for ws in list(session.clients):
            try:
                if ws.client_state == WebSocketState.CONNECTED:
                    await ws.close(code=1000, reason="Session closed.")
            except Exception:
                logger.warning("Failed closing client socket in session %s.", session.session_id)
        session.clients.clear()

    async def cleanup(self) -> None:
        """Cancel every frame loop and drop all sessions."""
        for session_id in list(self._sessions):
            await self.close_session(session_id)
        await self.flush_storage()
        logger.info("SessionManager cleanup complete.")
