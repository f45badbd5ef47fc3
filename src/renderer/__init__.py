"""Batch rendering and post-processing of documents into static HTML.

Surface-bound entry points live in ``src.renderer.api``.
"""

from src.renderer.errors import (
    BatchCancelledError,
    FatalSessionError,
    LoadError,
    RenderError,
    RenderErrorClass,
    StageTimeoutError,
    SurfaceUnavailableError,
)
from src.renderer.headings import make_heading_trees
from src.renderer.io import AtomicWriter
from src.renderer.media import create_media_page, extension_to_tag, is_convertable
from src.renderer.models import (
    Document,
    DocumentKind,
    LogEntry,
    LogLevel,
    RenderOptions,
    RenderResult,
)
from src.renderer.post_process import PostProcessor, post_process_html
from src.renderer.waiter import PollingWaiter, wait_until


__all__ = [
    "AtomicWriter",
    "BatchCancelledError",
    "Document",
    "DocumentKind",
    "FatalSessionError",
    "LoadError",
    "LogEntry",
    "LogLevel",
    "PollingWaiter",
    "PostProcessor",
    "RenderError",
    "RenderErrorClass",
    "RenderOptions",
    "RenderResult",
    "StageTimeoutError",
    "SurfaceUnavailableError",
    "create_media_page",
    "extension_to_tag",
    "is_convertable",
    "make_heading_trees",
    "post_process_html",
    "wait_until",
]
