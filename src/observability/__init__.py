"""Structured logging for render batches."""

from src.observability.logging import (
    bind_batch_context,
    clear_batch_context,
    configure_logging,
    level_for_verbosity,
)


__all__ = [
    "bind_batch_context",
    "clear_batch_context",
    "configure_logging",
    "level_for_verbosity",
]
