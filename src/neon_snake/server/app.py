"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from neon_snake.economy import Storage
from neon_snake.server.routes import router
from neon_snake.server.session_manager import SessionManager
from neon_snake.server.websocket import ws_router


def create_app(storage: Storage | None = None) -> FastAPI:
    """Build and return the FastAPI application."""

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        app.state.session_manager = SessionManager(storage=storage)
        yield
        await app.state.session_manager.cleanup()

    app = FastAPI(
        title="Neon Snake API", version="0.1.0", lifespan=_lifespan,
    )
    app.include_router(router)
    app.include_router(ws_router)
    return app
