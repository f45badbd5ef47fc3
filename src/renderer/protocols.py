"""Protocol interfaces for the external render collaborators.

The render surface, its views and the host window are provided by the
embedding application. The pipeline only calls these methods and observes
the flags they flip.
"""

from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Protocol, runtime_checkable

from bs4 import Tag

from src.renderer.models import Document


@runtime_checkable
class Section(Protocol):
    """Incrementally rendered unit of a markdown view.

    ``rendered`` and ``computed`` are flipped by the surface after
    ``render()`` and ``MarkdownView.measure_section()`` respectively.
    """

    content: Tag
    rendered: bool
    computed: bool
    shown: bool
    level: int
    collapsed: bool

    async def render(self) -> None: ...

    def reset_compute(self) -> None: ...

    def set_collapsed(self, collapsed: bool) -> None: ...


@runtime_checkable
class MarkdownView(Protocol):
    """Preview of a markdown document inside the surface."""

    view_type: str
    file_path: str | None
    sections: Sequence[Section]
    preview_class: str
    container_el: Tag | None

    def load(self) -> None: ...

    async def prepare(self) -> None:
        """Unfold all headings and lists and parse the source."""
        ...

    async def measure_section(self, section: Section) -> None: ...

    async def post_process(self, section: Section, pending: list[Awaitable[object]]) -> None:
        """Run view-specific post-processors, appending tasks to ``pending``."""
        ...

    async def render_query_block(self, keyword: str, query: str, container: Tag) -> None:
        """Render a dynamic query block result into ``container``."""
        ...


@runtime_checkable
class CanvasNode(Protocol):
    node_el: Tag
    content_el: Tag
    file: str | None
    url: str | None
    child: MarkdownView | None

    async def render(self) -> None: ...


@runtime_checkable
class CanvasEdge(Protocol):
    line_group_el: Tag
    line_end_group_el: Tag
    label: str | None
    label_el: Tag | None

    async def render(self) -> None: ...


@runtime_checkable
class CanvasBoard(Protocol):
    nodes: Mapping[str, CanvasNode]
    edges: Mapping[str, CanvasEdge]

    def zoom_to_fit(self) -> None: ...


@runtime_checkable
class CanvasView(Protocol):
    view_type: str
    file_path: str | None
    canvas: CanvasBoard
    content_el: Tag


@runtime_checkable
class DrawingView(Protocol):
    view_type: str
    file_path: str | None

    async def export_svg(self) -> Tag: ...


@runtime_checkable
class GenericView(Protocol):
    view_type: str
    file_path: str | None
    container_el: Tag


@runtime_checkable
class HostWindow(Protocol):
    """Window hosting the render surface."""

    screen_width: int
    screen_height: int

    def move_to(self, x: int, y: int) -> None: ...

    def resize_to(self, width: int, height: int) -> None: ...

    def hide(self) -> None: ...

    def set_always_on_top(self, on_top: bool) -> None: ...

    def set_progress_bar(self, fraction: float) -> None: ...

    def mount_panel(self, panel: Tag) -> None: ...

    def on_close(self, callback: Callable[[], None]) -> None: ...

    def off_close(self, callback: Callable[[], None]) -> None: ...


@runtime_checkable
class RenderSurface(Protocol):
    """Hidden execution context that renders one document at a time."""

    @property
    def is_attached(self) -> bool: ...

    @property
    def window(self) -> HostWindow | None: ...

    @property
    def view(self) -> object: ...

    async def open_document(self, document: Document) -> None:
        """Load a document; raises on failure."""
        ...

    def load_markdown(self, markdown: str) -> MarkdownView: ...

    def snapshot_canvas(self, element: Tag) -> str:
        """Encode the pixel content of a live canvas element as a data URL."""
        ...

    def read_form_value(self, element: Tag) -> str | None: ...

    def detach(self) -> None: ...


@runtime_checkable
class RenderHost(Protocol):
    """Provider of render surfaces."""

    def open_surface(self) -> RenderSurface: ...
