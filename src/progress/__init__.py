"""Progress reporting for render batches."""

from src.progress.log import ProgressLog, stringify
from src.progress.panel import FileListItem, ProgressPanel


__all__ = [
    "FileListItem",
    "ProgressLog",
    "ProgressPanel",
    "stringify",
]
