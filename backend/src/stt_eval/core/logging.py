"""Structured logging setup built on structlog."""

import logging
import sys

import structlog


def configure_logging(log_level: str | None = None) -> None:
    """Configure structlog to emit JSON lines at the configured level.

    Args:
        log_level: Level name. Defaults to ``settings.log_level``.
    """
    if log_level is None:
        from stt_eval.core.config import settings

        log_level = settings.log_level

    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Get a structlog logger bound to the module name."""
    return structlog.get_logger(name)
