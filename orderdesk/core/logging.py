"""
structlog setup.

Production writes one JSON object per line; development and test use the
console renderer. Request-scoped fields (request_id, method, path) are
merged in from contextvars bound by RequestContextMiddleware.
"""
import logging
import sys
from typing import Optional

import structlog
from structlog.types import Processor

from orderdesk.core.config import Settings, settings as default_settings

# Third-party loggers that would otherwise repeat what we already log
_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite", "asyncio")


def _renderer(config: Settings) -> list[Processor]:
    if config.environment == "production":
        return [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    return [structlog.dev.ConsoleRenderer(colors=config.environment != "test")]


def configure_logging(config: Optional[Settings] = None) -> None:
    """Route structlog through stdlib logging at the configured level."""
    config = config or default_settings

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            *_renderer(config),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    level = logging.getLevelName(config.log_level)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
