"""Timeout and error translation around a unit of work."""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from direct_chat.application.exceptions import AppError, PersistenceError
from direct_chat.application.uow import UnitOfWork
from direct_chat.config import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def persistence_guard(
    uow: UnitOfWork,
    action: str,
    *,
    timeout: float | None = None,
    **context: Any,
) -> AsyncIterator[None]:
    """Bound the enclosed store calls and turn store failures into PersistenceError.

    ``action`` completes the phrase "Failed to ..." in the caller-facing
    detail; ``context`` only reaches the log.
    """
    limit = settings.STORE_TIMEOUT_SECONDS if timeout is None else timeout
    try:
        async with asyncio.timeout(limit):
            yield
    except AppError:
        await _safe_rollback(uow)
        raise
    except Exception as exc:
        await _safe_rollback(uow)
        logger.exception("Store failure during %r (%s)", action, _fmt(context))
        raise PersistenceError(f"Failed to {action}") from exc


async def _safe_rollback(uow: UnitOfWork) -> None:
    try:
        await uow.rollback()
    except Exception:
        logger.warning("Rollback failed", exc_info=True)


def _fmt(context: dict[str, Any]) -> str:
    return ", ".join(f"{k}={v}" for k, v in context.items())
