"""
Structured logging for Score Sync.

Every module logs through ``get_logger(__name__)`` with snake_case event names
and keyword fields; coordinators bind ``sport`` once and reuse the bound
logger. Output is coloured console lines in dev and one JSON object per line
elsewhere.
"""
from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from shared.config import Environment, Settings, get_settings

QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderers(settings: Settings) -> list[structlog.types.Processor]:
    if settings.environment == Environment.DEV:
        return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]
    # JSON lines need the traceback flattened into the event dict
    return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


def _level(settings: Settings) -> int:
    if settings.debug:
        return logging.DEBUG
    return getattr(logging, settings.log_level.upper(), logging.INFO)


def setup_logging(service_name: str, settings: Settings | None = None) -> None:
    """
    Route structlog and stdlib logging through one stdout handler.

    Binds ``service``, ``instance_id`` and the configured ``sports`` to every
    entry via contextvars. Safe to call again; the root handler is replaced.
    """
    settings = settings or get_settings()
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *_renderers(settings)],
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(_level(settings))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    context: dict[str, Any] = {
        "service": service_name,
        "instance_id": settings.instance_id,
        "sports": [s.value for s in settings.sports],
    }
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**context)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
