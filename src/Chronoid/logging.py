# logging.py

import logging
import os
from logging.handlers import RotatingFileHandler

import structlog
from structlog.contextvars import merge_contextvars

from Chronoid.config import Settings


def _handler_level(name: str | None, default: int) -> int | None:
    if (name or "").upper() == "NONE":
        return None
    return getattr(logging, (name or "").upper(), default)


def setup_logging(settings: Settings | None = None) -> None:
    """Initialize structlog + stdlib logging.

    Defaults: INFO level, JSON to the console, no file. With settings, the
    [logging] section controls per-handler levels ("NONE" disables a handler)
    and the rotating JSONL file.
    """
    level_name = (settings.logging_level if settings else "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.captureWarnings(True)

    # ProcessorFormatter renders BOTH structlog and stdlib records as JSON
    processor_formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.add_log_level,
            merge_contextvars,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        foreign_pre_chain=[
            structlog.processors.add_log_level,
            merge_contextvars,
        ],
    )

    root_handlers: list[logging.Handler] = []
    enabled = True if settings is None else settings.logging_enabled
    if enabled:
        console_lvl = _handler_level(settings.logging_console if settings else level_name, level)
        if console_lvl is not None:
            ch = logging.StreamHandler()
            ch.setLevel(console_lvl)
            ch.setFormatter(processor_formatter)
            root_handlers.append(ch)

        file_lvl = _handler_level(settings.logging_file if settings else "NONE", level)
        if file_lvl is not None and settings is not None:
            path = settings.logging_file_path
            os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
            fh = RotatingFileHandler(
                path,
                maxBytes=settings.logging_max_bytes,
                backupCount=settings.logging_backup_count,
            )
            fh.setLevel(file_lvl)
            fh.setFormatter(processor_formatter)
            root_handlers.append(fh)

    if not root_handlers:
        root_handlers.append(logging.NullHandler())

    # force=True replaces any prior configuration
    logging.basicConfig(level=level, handlers=root_handlers, force=True)

    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
