"""Structured logging configuration.

Loggers are structlog bound loggers routed through the stdlib ``logging``
module, so third-party libraries (SQLAlchemy) share the same handler. Call
``configure_logging()`` once at process start; ``get_logger()`` is safe to use
at import time.
"""

import logging
import os
import sys

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import Processor

DEFAULT_LOG_LEVEL = "WARNING"


def _build_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _select_renderer(json_output: bool) -> Processor:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """Configure structlog and the root stdlib handler.

    Args:
        level: Log level name. Falls back to BUDGETMATCH_LOG_LEVEL, then WARNING.
        json_output: Emit JSON lines. Falls back to BUDGETMATCH_LOG_JSON.
    """
    if level is None:
        level = os.environ.get("BUDGETMATCH_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    if json_output is None:
        json_output = os.environ.get("BUDGETMATCH_LOG_JSON", "") in ("1", "true", "yes")

    processors = _build_processors()

    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=_select_renderer(json_output),
        foreign_pre_chain=processors,
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    logging.basicConfig(
        handlers=[handler],
        level=getattr(logging, level.upper(), logging.WARNING),
        force=True,
    )


def get_logger(name: str | None = None) -> BoundLogger:
    """Get a structured logger."""
    return structlog.get_logger(name)
