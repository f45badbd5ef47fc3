"""Leveled log, progress and error channel for render batches.

Every line lands in the cumulative text log regardless of verbosity. Lines
that pass the verbosity threshold are also written to the console through
structlog and mirrored into the active batch's progress panel.
"""

import json
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from src.renderer.constants import PROGRESS_COLOR
from src.renderer.io import AtomicWriter, WrittenFile
from src.renderer.models import LogEntry, LogLevel
from src.settings.app import ExportSettings, LogVerbosity


if TYPE_CHECKING:
    from src.renderer.session import BatchSession


logger = structlog.get_logger()

_PASSING_VERBOSITY = {
    LogLevel.INFO: {LogVerbosity.ALL},
    LogLevel.WARNING: {LogVerbosity.WARNING, LogVerbosity.ALL},
    LogLevel.ERROR: {LogVerbosity.ERROR, LogVerbosity.WARNING, LogVerbosity.ALL},
    LogLevel.FATAL: set(LogVerbosity),
}


def stringify(message: object) -> str:
    """Convert a log message of any type to text.

    Args:
        message: String, exception or JSON-serializable object.

    Returns:
        Text representation.
    """
    if isinstance(message, str):
        return message
    if isinstance(message, BaseException):
        return f"{type(message).__name__}: {message}"
    return json.dumps(message, default=str).replace("\n", "\n\t\t")


def _settings_table(settings: ExportSettings) -> str:
    data = settings.model_dump(mode="json")
    data["files_to_export"] = len(settings.files_to_export)

    rows: list[tuple[str, str]] = []
    for key, value in data.items():
        if isinstance(value, dict):
            rows.extend((f"{key}.{sub}", str(sub_value)) for sub, sub_value in value.items())
        else:
            rows.append((key, str(value)))

    width = max(len(name) for name, _ in rows) + 3
    lines = []
    for index, (name, value) in enumerate(rows):
        pad = "-" if index % 2 == 0 else " "
        lines.append(f"{(name + ' ').ljust(width, pad)}{value}")
    return "\n".join(lines) + "\n"


class ProgressLog:
    """Cumulative export log with batch-scoped UI feedback."""

    def __init__(self, verbosity: LogVerbosity = LogVerbosity.ALL) -> None:
        """Initialize the log.

        Args:
            verbosity: Threshold for console and panel output.
        """
        self._verbosity = verbosity
        self._entries: list[LogEntry] = []
        self._lines: list[str] = []
        self._session: BatchSession | None = None
        self._log = logger.bind(component="export_log")

    @property
    def verbosity(self) -> LogVerbosity:
        return self._verbosity

    @verbosity.setter
    def verbosity(self, value: LogVerbosity) -> None:
        self._verbosity = value

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        """All entries recorded so far, oldest first."""
        return tuple(self._entries)

    @property
    def full_log(self) -> str:
        """The cumulative text log."""
        return "".join(self._lines)

    def attach(self, session: "BatchSession") -> None:
        """Route panel output and fatal errors to ``session``."""
        self._session = session

    def info(self, title: str, message: object = "") -> None:
        """Record an info line."""
        self._record(LogLevel.INFO, title, message)

    def warning(self, title: str, message: object = "") -> None:
        """Record a warning."""
        self._record(LogLevel.WARNING, title, message)

    def error(self, title: str, message: object = "", fatal: bool = False) -> None:
        """Record an error.

        Fatal errors always pass the verbosity threshold, mark the active
        batch as errored and invalidate its render surface.

        Args:
            title: Error title.
            message: Error message or exception.
            fatal: Whether the batch cannot continue.
        """
        self._record(LogLevel.FATAL if fatal else LogLevel.ERROR, title, message)

    def progress(
        self,
        fraction: float,
        message: str,
        sub_message: str,
        color: str = PROGRESS_COLOR,
    ) -> None:
        """Update the batch progress indicator.

        Args:
            fraction: Progress between 0 and 1.
            message: Main message.
            sub_message: Secondary message.
            color: Progress bar colour.
        """
        payload = {"fraction": fraction, "message": message, "subMessage": sub_message}
        self._lines.append(f"Progress\t{stringify(payload)}\n")
        if self._session is not None:
            self._session.report_progress(fraction, message, sub_message, color)

    def set_file_list(
        self,
        items: Sequence[str],
        title: str | None = None,
        icons: Sequence[str] | str | None = None,
        render_as_markdown: bool = False,
    ) -> None:
        """Show the list of items currently being processed."""
        if self._session is not None:
            self._session.show_file_list(items, title, icons, render_as_markdown)

    def debug_info(self, settings: ExportSettings) -> str:
        """Build a debug report of the log and the active settings.

        Args:
            settings: Settings to include.

        Returns:
            Report text.
        """
        return f"Log:\n{self.full_log}\n\nSettings:\n{_settings_table(settings)}\n"

    def write_debug_info(self, path: Path, settings: ExportSettings) -> WrittenFile:
        """Write the debug report to ``path`` atomically."""
        writer = AtomicWriter(path.parent)
        return writer.write(path, self.debug_info(settings))

    def _record(self, level: LogLevel, title: str, message: object) -> None:
        text = stringify(message)
        entry = LogEntry(level=level, title=title, message=text)
        self._entries.append(entry)
        self._lines.append(f"{level.prefix} {title}\t{text}\n")

        if self._verbosity in _PASSING_VERBOSITY[level]:
            self._emit(entry)
            if self._session is not None:
                self._session.show_log_entry(entry)

        if level is LogLevel.FATAL and self._session is not None:
            self._session.invalidate_surface()

    def _emit(self, entry: LogEntry) -> None:
        fields = {"title": entry.title, "message": entry.message}
        if entry.level is LogLevel.INFO:
            self._log.info("export_log", **fields)
        elif entry.level is LogLevel.WARNING:
            self._log.warning("export_warning", **fields)
        elif entry.level is LogLevel.ERROR:
            self._log.error("export_error", **fields)
        else:
            self._log.critical("export_fatal_error", **fields)
