"""Data models for the batch render pipeline."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import PurePosixPath

from bs4 import Tag
from pydantic import BaseModel, ConfigDict

from src.renderer.constants import VIEWABLE_MEDIA_EXTENSIONS


class DocumentKind(str, Enum):
    """Kind of document, as reported by the render surface's view.

    - MARKDOWN: Section-rendered markdown note
    - CANVAS: Node/edge canvas board
    - DRAWING: Excalidraw-style drawing
    - GENERIC: Any other plugin view, taken wholesale after settling
    - MEDIA: Viewable attachment, never loaded into the surface
    """

    MARKDOWN = "markdown"
    CANVAS = "canvas"
    DRAWING = "excalidraw"
    GENERIC = "generic"
    MEDIA = "attachment"

    @classmethod
    def from_view_type(cls, view_type: str) -> "DocumentKind":
        """Map a surface view type string to a kind.

        Unknown view types (e.g. ``kanban``) fall back to GENERIC.

        Args:
            view_type: View type reported by the surface.

        Returns:
            The matching document kind.
        """
        try:
            kind = cls(view_type)
        except ValueError:
            return cls.GENERIC
        if kind is cls.MEDIA:
            return cls.GENERIC
        return kind

    @classmethod
    def from_extension(cls, extension: str) -> "DocumentKind":
        """Guess a kind from a file extension.

        Args:
            extension: Extension with or without the leading dot.

        Returns:
            The document kind implied by the extension.
        """
        ext = extension.lower().lstrip(".")
        if ext == "md":
            return cls.MARKDOWN
        if ext == "canvas":
            return cls.CANVAS
        if ext in ("drawing", "excalidraw"):
            return cls.DRAWING
        if ext in VIEWABLE_MEDIA_EXTENSIONS:
            return cls.MEDIA
        return cls.GENERIC


@dataclass(frozen=True)
class Document:
    """Handle to a document in the store.

    Attributes:
        path: Logical path of the document (forward slashes).
    """

    path: str

    @property
    def extension(self) -> str:
        """Lower-case extension without the dot."""
        return PurePosixPath(self.path).suffix.lstrip(".").lower()

    @property
    def name(self) -> str:
        """File name including extension."""
        return PurePosixPath(self.path).name

    @property
    def kind(self) -> DocumentKind:
        """Kind implied by the extension."""
        return DocumentKind.from_extension(self.extension)

    @property
    def is_media(self) -> bool:
        """Whether the document is a viewable media attachment."""
        return self.kind is DocumentKind.MEDIA


class RenderOptions(BaseModel):
    """Options for a single render call.

    Defaults are applied once when the options are built and never mutated
    afterwards; derived copies are made with ``model_copy``.

    Attributes:
        container: Destination element the result is appended to.
        post_process: Run the static post-processing pipeline.
        make_headers_trees: Nest content under collapsible headings.
        create_document_container: Keep the outer document wrapper.
        create_pusher_element: Append a spacer element to the sizer.
        display_progress: Show the compact progress window during the batch.
        inline_html: Inline every embedded document instead of referencing it.
        files_to_export: Paths selected for export. None uses the settings.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    container: Tag | None = None
    post_process: bool = True
    make_headers_trees: bool = False
    create_document_container: bool = True
    create_pusher_element: bool = False
    display_progress: bool = True
    inline_html: bool = False
    files_to_export: frozenset[str] | None = None

    @classmethod
    def merged(
        cls, overrides: "RenderOptions | Mapping[str, object] | None" = None
    ) -> "RenderOptions":
        """Build options with the given overrides applied over the defaults.

        Args:
            overrides: Explicit option values, an existing options object,
                or None for pure defaults.

        Returns:
            Fully-resolved options.
        """
        if overrides is None:
            return cls()
        if isinstance(overrides, RenderOptions):
            return overrides
        return cls(**dict(overrides))

    def with_container(self, container: Tag | None) -> "RenderOptions":
        """Return a copy targeting another container."""
        return self.model_copy(update={"container": container})


@dataclass
class RenderResult:
    """Result of rendering one document.

    Ownership of ``content`` transfers to the caller.

    Attributes:
        content: Root element of the rendered document.
        view_type: Kind of view the document was rendered by.
    """

    content: Tag
    view_type: DocumentKind


class LogLevel(str, Enum):
    """Severity of a progress log entry."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    FATAL = "FATAL"

    @property
    def prefix(self) -> str:
        """Prefix written in front of the title in the cumulative log."""
        if self is LogLevel.FATAL:
            return "[FATAL ERROR]"
        return f"[{self.value}]"


@dataclass(frozen=True)
class LogEntry:
    """Single entry of the cumulative log.

    Attributes:
        level: Severity.
        title: Short title.
        message: Message text.
        timestamp: When the entry was recorded.
    """

    level: LogLevel
    title: str
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
