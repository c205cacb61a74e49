"""
Structured Logging Setup

Logs are emitted through structlog on top of the stdlib logging module,
so records from SQLAlchemy and from our own code share one pipeline.

Logging belongs to the infrastructure edges (storage, wiring). The user
and release services report failures by raising, never by logging.
"""

import logging
import sys
from typing import Optional

import structlog


_configured = False


def configure_logging(level: str = "INFO", json: bool = True) -> None:
    """
    Configure structlog and the root logger.

    Only the first call has an effect, so tests and repeated calls to
    `create_app_components` don't stack handlers.

    Args:
        level: Level name (e.g. "DEBUG", "INFO"). Case insensitive.
        json: Render JSON lines; otherwise a human friendly console format.
    """
    global _configured
    if _configured:
        return

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger bound to `name`."""
    return structlog.get_logger(name)
