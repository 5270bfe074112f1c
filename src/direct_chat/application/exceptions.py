from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    pass


class ConflictError(AppError):
    pass


class ValidationError(AppError):
    pass


class PersistenceError(AppError):
    """Store unreachable, timed out or rejected the write.

    ``detail`` is safe to return to callers; the cause is only logged.
    """
