"""Structured logging configuration using structlog."""

import logging
import sys

import structlog

from studentms.core.config import get_settings

_configured = False


def configure_logging(force: bool = False) -> None:
    """Configure structlog with appropriate processors and output format."""
    global _configured
    if _configured and not force:
        return

    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.app_debug:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        # JSON output for container log aggregators
        processors = shared_processors + [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # stdlib factory so loggers carry a .name (needed by add_logger_name)
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )
    _configured = True


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    configure_logging()
    return structlog.get_logger(name)


# ── Request context ──────────────────────────────────────────────────────────

REQUEST_ID_HEADER = "X-Request-ID"


def bind_request_context(request_id: str) -> None:
    """Start a fresh log context for one request; every event carries request_id."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)


def bind_user(user_id: object) -> None:
    """Attach the authenticated account to the rest of the request's log events."""
    structlog.contextvars.bind_contextvars(user_id=str(user_id))
