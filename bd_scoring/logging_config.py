"""Logging bootstrap for stdlib logging and structlog."""
import logging
from typing import Optional

import structlog

from bd_scoring.config import get_settings

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Route stdlib and structlog output through one handler.

    Scoring modules emit structlog events; services log through stdlib.
    Both end up on the root logger configured here. ``level`` defaults to
    ``Settings.log_level``.
    """
    level = level or get_settings().log_level
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=_FORMAT)
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
