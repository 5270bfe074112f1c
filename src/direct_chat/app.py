from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from direct_chat.api.middleware.correlation_id import CorrelationIdMiddleware
from direct_chat.api.v1.routers import (
    conversations,
    health,
    messages,
    realtime,
    users,
)
from direct_chat.application.exceptions import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from direct_chat.config import settings
from direct_chat.infrastructure.db.session import engine
from direct_chat.infrastructure.ws.presence import InMemoryPresenceRegistry
from direct_chat.services.routing_service import RealtimeRouter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    logger.info("Realtime presence ready")

    yield

    app.state.presence.clear()
    await engine.dispose()
    logger.info("Presence cleared, database pool closed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Direct Chat Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    # one registry per app instance, shared by every handler
    app.state.presence = InMemoryPresenceRegistry()
    app.state.router = RealtimeRouter(
        app.state.presence,
        push_timeout=settings.PUSH_TIMEOUT_SECONDS,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(conversations.router)
    app.include_router(messages.router)
    app.include_router(users.router)
    app.include_router(realtime.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ConflictError)
    async def _conflict(_req: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})

    @app.exception_handler(PersistenceError)
    async def _persistence(_req: Request, exc: PersistenceError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"detail": exc.detail})
