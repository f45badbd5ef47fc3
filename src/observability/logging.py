"""Structured logging for render batches.

Console output follows the export verbosity: the same threshold that decides
which log lines reach the progress panel decides which structlog events are
printed. Every event emitted while a batch is active carries its batch_id.
"""

import logging
import sys
from typing import TextIO

import structlog

from src.settings.app import ExportSettings, LogVerbosity, get_settings


_VERBOSITY_LEVELS = {
    LogVerbosity.ALL: logging.INFO,
    LogVerbosity.WARNING: logging.WARNING,
    LogVerbosity.ERROR: logging.ERROR,
    LogVerbosity.NONE: logging.CRITICAL,
}


def level_for_verbosity(verbosity: LogVerbosity) -> int:
    """Translate an export verbosity into a stdlib logging level.

    Args:
        verbosity: Configured export verbosity.

    Returns:
        Matching logging level.
    """
    return _VERBOSITY_LEVELS[verbosity]


def configure_logging(
    settings: ExportSettings | None = None,
    output: TextIO = sys.stderr,
) -> None:
    """Configure structlog from the export settings.

    Args:
        settings: Export settings; log_level and json_logs are read from it.
            Environment-derived settings are used when omitted.
        output: Output stream (default: stderr).
    """
    settings = settings or get_settings()
    level = level_for_verbosity(settings.log_level)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if settings.json_logs:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=output, level=level)


def bind_batch_context(batch_id: str) -> None:
    """Tag every subsequent event with ``batch_id``."""
    structlog.contextvars.bind_contextvars(batch_id=batch_id)


def clear_batch_context() -> None:
    structlog.contextvars.unbind_contextvars("batch_id")
