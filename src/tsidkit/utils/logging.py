from __future__ import annotations

import logging
import os
from typing import Optional, cast

import structlog
from structlog.dev import ConsoleRenderer
from structlog.stdlib import BoundLogger
from structlog.types import Processor

from tsidkit._version import __version__ as TSIDKIT_VERSION

# Parent of every logger created through get_logger()
LIBRARY_LOGGER = "tsidkit"
LIBRARY_LEVEL_ENV = "TSIDKIT_LOG_LEVEL"
DEFAULT_LIBRARY_LEVEL = "WARNING"


def _coerce_level(level: str | int) -> int:
    """Translate a string/int level into the numeric logging level."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if isinstance(resolved, str):
            raise ValueError(f"Invalid log level: {level}")
        return int(resolved)
    return int(level)


def configure_logging(
    level: str | int = "INFO",
    json_output: bool = True,
    library_level: Optional[str | int] = None,
) -> None:
    """
    Route structlog through stdlib logging with JSON (or console) rendering.

    ``level`` applies to the root logger. tsidkit's own loggers get
    ``library_level`` (default ``TSIDKIT_LOG_LEVEL``, else WARNING), so an
    application logging at INFO does not see a line for every generator the
    presets build. Records below a logger's level are dropped before
    rendering.
    """
    if library_level is None:
        library_level = os.getenv(LIBRARY_LEVEL_ENV, DEFAULT_LIBRARY_LEVEL)
    root_level = _coerce_level(level)
    tsidkit_level = _coerce_level(library_level)

    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=(
                structlog.processors.JSONRenderer() if json_output else ConsoleRenderer()
            ),
            foreign_pre_chain=pre_chain,
        )
    )

    logging.basicConfig(level=root_level, handlers=[handler], force=True)
    logging.getLogger(LIBRARY_LOGGER).setLevel(tsidkit_level)


def get_logger(name: str) -> BoundLogger:
    """
    Return a structlog logger with service metadata bound.

    ``name`` should be the module's ``__name__`` so the logger sits under
    ``tsidkit`` and follows its level.
    """
    service_name = os.getenv("SERVICE_NAME", LIBRARY_LOGGER)
    return cast(
        BoundLogger,
        structlog.get_logger(name).bind(
            service_name=service_name, version=TSIDKIT_VERSION
        ),
    )
