"""Structured logging setup for Greeter."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, TextIO

import structlog
from structlog.types import Processor

from .config import Settings


class _TeeLoggerFactory:
    """Logger factory that writes to stdout and, when configured, a log file."""

    def __init__(self, file_path: Path | None = None) -> None:
        self._file: TextIO | None = None
        if file_path is not None:
            self._file = open(file_path, "a", buffering=1)  # line-buffered

    def __call__(self, *args: Any, **kwargs: Any) -> "_TeeLogger":
        return _TeeLogger(self._file)


class _TeeLogger:
    """Logger that writes each message to stdout and an optional file."""

    def __init__(self, file: TextIO | None) -> None:
        self._file = file

    def msg(self, message: str) -> None:
        print(message, flush=True)
        if self._file is not None:
            self._file.write(message + "\n")

    log = debug = info = warn = warning = msg
    fatal = failure = err = error = critical = msg


def setup_logging(settings: Settings, level: str | None = None) -> None:
    """
    Set up structured logging for the application.

    Args:
        settings: Application settings (logging section is used)
        level: Log level override (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    log_level = (level or settings.logging.level).upper()
    log_format = settings.logging.format

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    log_file: Path | None = None
    if settings.logging.file:
        log_file = Path(settings.logging.file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=settings.logging.max_size_mb * 1024 * 1024,
                backupCount=settings.logging.backup_count,
            )
        )

    # Standard library logging carries uvicorn and httpx records
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level),
        handlers=handlers,
        force=True,
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, log_level)),
        context_class=dict,
        logger_factory=_TeeLoggerFactory(log_file),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a logger instance.

    Args:
        name: Logger name (usually __name__ of the calling module)

    Returns:
        Configured structured logger
    """
    return structlog.get_logger(name)
