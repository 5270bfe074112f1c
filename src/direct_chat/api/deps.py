"""FastAPI dependency injection helpers."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Annotated, AsyncContextManager, AsyncIterator, Callable

from fastapi import Depends
from starlette.requests import HTTPConnection

from direct_chat.application.uow import UnitOfWork
from direct_chat.infrastructure.db.session import AsyncSessionLocal
from direct_chat.infrastructure.db.uow import SqlAlchemyUoW
from direct_chat.infrastructure.ws.presence import InMemoryPresenceRegistry
from direct_chat.services.routing_service import RealtimeRouter

UoWFactory = Callable[[], AsyncContextManager[UnitOfWork]]


@asynccontextmanager
async def open_uow() -> AsyncIterator[UnitOfWork]:
    async with AsyncSessionLocal() as session:
        async with SqlAlchemyUoW(session) as uow:
            yield uow


async def get_uow() -> AsyncIterator[UnitOfWork]:
    async with open_uow() as uow:
        yield uow


def get_uow_factory() -> UoWFactory:
    """Per-event units of work for long-lived WebSocket handlers."""
    return open_uow


def get_presence(conn: HTTPConnection) -> InMemoryPresenceRegistry:
    return conn.app.state.presence


def get_router(conn: HTTPConnection) -> RealtimeRouter:
    return conn.app.state.router


UoWDep = Annotated[UnitOfWork, Depends(get_uow)]
UoWFactoryDep = Annotated[UoWFactory, Depends(get_uow_factory)]
PresenceDep = Annotated[InMemoryPresenceRegistry, Depends(get_presence)]
RouterDep = Annotated[RealtimeRouter, Depends(get_router)]
