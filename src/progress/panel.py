"""Visible progress panel mounted in the render window during a batch."""

from collections.abc import Sequence
from dataclasses import dataclass

import structlog
from bs4 import Tag
from jinja2 import Environment, PackageLoader, select_autoescape

from src.renderer.constants import (
    ERROR_BOX_COLOR,
    ERROR_COLOR,
    INFO_BOX_COLOR,
    INFO_COLOR,
    PROGRESS_COLOR,
    WARNING_BOX_COLOR,
    WARNING_COLOR,
)
from src.renderer.dom import first_element_child, parse_fragment, set_style
from src.renderer.inline_markdown import render_markdown_simple
from src.renderer.models import LogLevel


logger = structlog.get_logger()

_LEVEL_COLORS = {
    LogLevel.INFO: (INFO_COLOR, INFO_BOX_COLOR),
    LogLevel.WARNING: (WARNING_COLOR, WARNING_BOX_COLOR),
    LogLevel.ERROR: (ERROR_COLOR, ERROR_BOX_COLOR),
    LogLevel.FATAL: (ERROR_COLOR, ERROR_BOX_COLOR),
}


@dataclass(frozen=True)
class FileListItem:
    label: str
    icon: str | None = None
    markup: bool = False


def _render_element(html: str) -> Tag:
    for node in parse_fragment(html):
        if isinstance(node, Tag):
            return node
    raise ValueError("Template rendered no element")


class ProgressPanel:
    """Progress bar, messages, log list and file list for one batch.

    Templates are loaded from src/progress/templates/ with auto-escaping
    enabled so log messages and file names are never interpreted as markup.
    """

    def __init__(self, heading: str = "Generating HTML") -> None:
        """Initialize the panel.

        Args:
            heading: Initial heading message.
        """
        self._env = Environment(
            loader=PackageLoader("src.progress", "templates"),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._element = _render_element(
            self._env.get_template("panel.html").render(heading=heading)
        )
        self._file_list: Tag | None = None
        self._log_showing = False
        self._log = logger.bind(component="progress_panel")

    @property
    def element(self) -> Tag:
        """Root element of the panel."""
        return self._element

    @property
    def log_showing(self) -> bool:
        return self._log_showing

    def report(
        self,
        fraction: float,
        message: str,
        sub_message: str,
        color: str = PROGRESS_COLOR,
    ) -> None:
        """Update the progress bar and messages.

        Args:
            fraction: Progress between 0 and 1.
            message: Main message.
            sub_message: Secondary message.
            color: Progress bar colour.
        """
        bar = self._element.select_one("progress")
        if bar is not None:
            bar["value"] = f"{max(0.0, min(1.0, fraction)):g}"
            set_style(bar, background_color="transparent", color=color)

        heading = self._element.select_one(".html-progress-inner h1")
        if heading is not None:
            heading.string = message

        sub = self._element.select_one("span.html-progress-sub")
        if sub is not None:
            sub.string = sub_message

    def append_log(self, level: LogLevel, title: str, message: str) -> bool:
        """Append a colour-coded log entry.

        Args:
            level: Severity of the entry.
            title: Entry title.
            message: Entry message.

        Returns:
            True if this entry made the log list visible.
        """
        container = self._element.select_one(".html-progress-log")
        if container is None:
            self._log.error("log_container_missing")
            return False

        color, background = _LEVEL_COLORS[level]
        item = _render_element(
            self._env.get_template("log_item.html").render(
                level=level.value.lower(),
                title=title,
                message=message,
                color=color,
                background=background,
            )
        )
        container.append(item)

        if self._log_showing:
            return False
        set_style(container, display="flex")
        self._log_showing = True
        return True

    def set_file_list(
        self,
        items: Sequence[str],
        title: str | None = None,
        icons: Sequence[str] | str | None = None,
        render_as_markdown: bool = False,
    ) -> Tag:
        """Render the "currently processing" list, replacing any previous one.

        Args:
            items: Labels to show.
            title: Optional list title.
            icons: One icon for every item, or one icon per item.
            render_as_markdown: Render labels as inline markdown.

        Returns:
            The new list element.
        """
        entries = []
        for index, label in enumerate(items):
            if isinstance(icons, str):
                icon = icons
            elif icons is not None and index < len(icons):
                icon = icons[index]
            else:
                icon = None
            if render_as_markdown:
                entries.append(FileListItem(render_markdown_simple(label), icon, markup=True))
            else:
                entries.append(FileListItem(label, icon))

        list_el = _render_element(
            self._env.get_template("file_list.html").render(title=title, items=entries)
        )
        content = self._element.select_one(".html-progress-content")
        if content is None:
            content = first_element_child(self._element) or self._element

        if self._file_list is not None:
            self._file_list.decompose()
        content.insert(0, list_el)
        self._file_list = list_el
        return list_el
