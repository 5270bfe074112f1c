"""Process-wide logging setup.

Every record gets a ``correlation_id`` attribute taken from the request
context, so handler logs and store failures can be tied back to one request.
"""
from __future__ import annotations

import logging
from logging.config import dictConfig

from direct_chat.api.middleware.correlation_id import correlation_id_ctx

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | [%(correlation_id)s] %(message)s"


class CorrelationIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_ctx.get() or "-"
        return True


def configure_logging(level: str = "INFO") -> None:
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {
                "correlation_id": {"()": CorrelationIdFilter},
            },
            "formatters": {
                "default": {"format": LOG_FORMAT},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "filters": ["correlation_id"],
                },
            },
            "root": {
                "level": level.upper(),
                "handlers": ["console"],
            },
        }
    )
