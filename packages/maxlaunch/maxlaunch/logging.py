"""maxlaunch — Structured logging configuration.

Uses structlog for structured, levelled logging with consistent key names
across the engine.  All log entries include:
    - timestamp (ISO-8601)
    - level
    - logger (Python logger name)
    - strategy (bound via a context variable while a loop runs)

Logs go to stderr: the engine has no structured stdout output.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import Any

import structlog
from structlog.types import EventDict, WrappedLogger

_ctx_strategy: ContextVar[str | None] = ContextVar("strategy", default=None)


def bind_strategy_context(strategy: str | None) -> None:
    """Bind the running strategy name to the current async task."""
    _ctx_strategy.set(strategy)


def clear_strategy_context() -> None:
    _ctx_strategy.set(None)


# ---------------------------------------------------------------------------
# Custom processors
# ---------------------------------------------------------------------------


def _inject_context_vars(
    _logger: WrappedLogger, _method: str, event_dict: EventDict
) -> EventDict:
    """Add ContextVar values to every log record."""
    if (strategy := _ctx_strategy.get()) is not None:
        event_dict.setdefault("strategy", strategy)
    return event_dict


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def configure_logging(level: str = "warning", format: str = "console") -> None:
    """Configure structlog and stdlib logging.

    Call once at CLI startup, before any log statements.

    Args:
        level:  One of debug, info, warning, error, critical.
        format: ``"console"`` for human-readable output, ``"json"`` for
                one JSON object per line.
    """
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _inject_context_vars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [stream_handler]
    root_logger.setLevel(level.upper())

    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger for *name*.

    Usage::

        log = get_logger(__name__)
        log.info("window_maximized", handle="0x04000003", cycle=3)
    """
    return structlog.get_logger(name)
