"""In-memory stand-ins for the render surface and its views.

Flags such as ``rendered`` and ``computed`` are flipped through the event
loop after a delay, the way a real surface completes work asynchronously.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from bs4 import Tag

from src.renderer.dom import create_element, parse_fragment, set_inner_html
from src.renderer.metrics import RendererMetrics
from src.renderer.models import Document
from src.renderer.session import BatchSession
from src.settings.app import ExportSettings, LogVerbosity, RenderTimings


LONG_SNAPSHOT = "data:image/png;base64," + "A" * 200
SHORT_SNAPSHOT = "data:,"


def fast_settings(
    files_to_export: list[str] | None = None,
    log_level: LogVerbosity = LogVerbosity.ALL,
) -> ExportSettings:
    """Settings with short timings for tests."""
    return ExportSettings(
        log_level=log_level,
        files_to_export=files_to_export or [],
        timings=RenderTimings(
            surface_attach_timeout_ms=50,
            section_timeout_ms=50,
            settle_timeout_ms=20,
            poll_interval_ms=1,
            canvas_settle_ms=0,
            drawing_settle_ms=0,
            generic_settle_ms=0,
        ),
    )


def element(html: str) -> Tag:
    """Parse a single element."""
    for node in parse_fragment(html):
        if isinstance(node, Tag):
            return node
    raise ValueError(f"No element in {html!r}")


def _later(delay_s: float, callback: Callable[[], None]) -> None:
    loop = asyncio.get_running_loop()
    if delay_s <= 0:
        loop.call_soon(callback)
    else:
        loop.call_later(delay_s, callback)


class FakeWindow:
    """Host window recording every call."""

    def __init__(self, screen_width: int = 1920, screen_height: int = 1080) -> None:
        self.screen_width = screen_width
        self.screen_height = screen_height
        self.position: tuple[int, int] | None = None
        self.size: tuple[int, int] | None = None
        self.sizes: list[tuple[int, int]] = []
        self.hidden = False
        self.always_on_top = False
        self.progress: list[float] = []
        self.panels: list[Tag] = []
        self.close_handlers: list[Callable[[], None]] = []

    def move_to(self, x: int, y: int) -> None:
        self.position = (x, y)

    def resize_to(self, width: int, height: int) -> None:
        self.size = (width, height)
        self.sizes.append((width, height))

    def hide(self) -> None:
        self.hidden = True

    def set_always_on_top(self, on_top: bool) -> None:
        self.always_on_top = on_top

    def set_progress_bar(self, fraction: float) -> None:
        self.progress.append(fraction)

    def mount_panel(self, panel: Tag) -> None:
        self.panels.append(panel)

    def on_close(self, callback: Callable[[], None]) -> None:
        self.close_handlers.append(callback)

    def off_close(self, callback: Callable[[], None]) -> None:
        if callback in self.close_handlers:
            self.close_handlers.remove(callback)

    def close(self) -> None:
        """Simulate the user closing the window."""
        for callback in list(self.close_handlers):
            callback()


@dataclass
class Fill:
    """Content the surface writes into a section some time after rendering.

    Attributes:
        selector: Element to fill, relative to the section content.
        html: Markup written into it.
        delay_s: Delay after the section render.
    """

    selector: str
    html: str
    delay_s: float = 0.0


class FakeSection:
    """Markdown section rendered from fixed markup."""

    def __init__(
        self,
        html: str,
        renders: bool = True,
        computes: bool = True,
        render_delay_s: float = 0.0,
        fills: list[Fill] | None = None,
        render_error: Exception | None = None,
    ) -> None:
        self.content = create_element("div", ["markdown-preview-section"])
        self.rendered = False
        self.computed = False
        self.shown = False
        self.level = 0
        self.collapsed = True
        self.render_calls = 0
        self._html = html
        self.renders = renders
        self.computes = computes
        self._render_delay_s = render_delay_s
        self._fills = fills or []
        self._render_error = render_error

    async def render(self) -> None:
        self.render_calls += 1
        if self._render_error is not None:
            raise self._render_error
        set_inner_html(self.content, self._html)
        if self.renders:
            _later(self._render_delay_s, self._mark_rendered)
        for fill in self._fills:
            _later(fill.delay_s, lambda fill=fill: self._apply(fill))

    def reset_compute(self) -> None:
        self.computed = False

    def set_collapsed(self, collapsed: bool) -> None:
        self.collapsed = collapsed

    def _mark_rendered(self) -> None:
        self.rendered = True

    def _apply(self, fill: Fill) -> None:
        target = self.content.select_one(fill.selector)
        if target is not None:
            set_inner_html(target, fill.html)


class FakeMarkdownView:
    """Markdown preview made of fake sections."""

    view_type = "markdown"

    def __init__(
        self,
        sections: list[FakeSection],
        file_path: str | None = None,
        query_results: dict[str, str] | None = None,
        prepare_error: Exception | None = None,
        pending_work: Callable[[], Awaitable[object]] | None = None,
        post_process_error: Exception | None = None,
    ) -> None:
        self.sections = sections
        self.file_path = file_path
        self.preview_class = "markdown-preview-view markdown-rendered"
        self.container_el: Tag | None = None
        self.loaded = False
        self.prepared = False
        self.queries: list[tuple[str, str]] = []
        self.post_processed: list[FakeSection] = []
        self._query_results = query_results or {}
        self._prepare_error = prepare_error
        self._pending_work = pending_work
        self._post_process_error = post_process_error

    def load(self) -> None:
        self.loaded = True

    async def prepare(self) -> None:
        if self._prepare_error is not None:
            raise self._prepare_error
        self.prepared = True

    async def measure_section(self, section: FakeSection) -> None:
        if section.computes:
            _later(0, lambda: setattr(section, "computed", True))

    async def post_process(
        self, section: FakeSection, pending: list[Awaitable[object]]
    ) -> None:
        self.post_processed.append(section)
        if self._post_process_error is not None:
            raise self._post_process_error
        if self._pending_work is not None:
            pending.append(self._pending_work())

    async def render_query_block(self, keyword: str, query: str, container: Tag) -> None:
        self.queries.append((keyword, query))
        result = self._query_results.get(keyword)
        if result is not None:
            set_inner_html(container, result)


class FakeCanvasNode:
    """Canvas card holding text, an embedded file or a web page."""

    def __init__(
        self,
        node_id: str,
        file: str | None = None,
        url: str | None = None,
        child: FakeMarkdownView | None = None,
        text: str | None = None,
    ) -> None:
        self.file = file
        self.url = url
        self.child = child
        self.render_calls = 0
        self.node_el = create_element("div", ["canvas-node"], {"id": node_id})
        container = create_element("div", ["canvas-node-container"])
        self.content_el = create_element("div", ["canvas-node-content"])
        container.append(self.content_el)
        self.node_el.append(container)
        if file is not None or child is not None:
            embed = create_element("div", ["markdown-embed"])
            embed.append(
                create_element(
                    "div",
                    ["markdown-embed-content", "node-insert-event"],
                    text="stale live content",
                )
            )
            self.content_el.append(embed)
        if text is not None:
            self.content_el.append(create_element("p", text=text))

    async def render(self) -> None:
        self.render_calls += 1


class FakeCanvasEdge:
    def __init__(self, edge_id: str, label: str | None = None) -> None:
        self.label = label
        self.render_calls = 0
        self.line_group_el = create_element("g", ["edge-line"], {"id": edge_id})
        self.line_end_group_el = create_element("g", ["edge-head"], {"id": f"{edge_id}-head"})
        self.label_el = (
            create_element("div", ["canvas-path-label-wrapper"], text=label) if label else None
        )

    async def render(self) -> None:
        self.render_calls += 1


@dataclass
class FakeCanvasBoard:
    nodes: dict[str, FakeCanvasNode] = field(default_factory=dict)
    edges: dict[str, FakeCanvasEdge] = field(default_factory=dict)
    zoom_calls: int = 0

    def zoom_to_fit(self) -> None:
        self.zoom_calls += 1


class FakeCanvasView:
    view_type = "canvas"

    def __init__(self, board: FakeCanvasBoard, file_path: str | None = None) -> None:
        self.canvas = board
        self.file_path = file_path
        self.content_el = element(
            '<div class="view-content"><div class="canvas-wrapper">'
            '<div class="canvas"><div class="live-only">live</div></div></div></div>'
        )


class FakeDrawingView:
    view_type = "excalidraw"

    def __init__(self, svg_html: str, file_path: str | None = None) -> None:
        self.file_path = file_path
        self._svg_html = svg_html

    async def export_svg(self) -> Tag:
        return element(self._svg_html)


class FakeGenericView:
    def __init__(self, html: str, view_type: str = "kanban", file_path: str | None = None) -> None:
        self.view_type = view_type
        self.file_path = file_path
        self.container_el = element(html)


ViewFactory = Callable[[], object]


class FakeSurface:
    """Render surface serving views from a document table.

    Args:
        documents: Path to view factory, or to an exception raised on load.
        attaches: Whether the surface ever reports itself attached.
        window: Host window; a fresh one by default.
        snapshots: Canvas element id to encoded snapshot.
        form_values: Form control id to live value.
    """

    def __init__(  # noqa: PLR0913
        self,
        documents: dict[str, ViewFactory | Exception] | None = None,
        attaches: bool = True,
        window: FakeWindow | None = None,
        snapshots: dict[str, str] | None = None,
        form_values: dict[str, str] | None = None,
        markdown_view: Callable[[str], FakeMarkdownView] | None = None,
        has_window: bool = True,
    ) -> None:
        self.documents = documents or {}
        self._attaches = attaches
        self._window = window if window is not None else FakeWindow()
        self._snapshots = snapshots or {}
        self._form_values = form_values or {}
        self._markdown_view = markdown_view
        self._has_window = has_window
        self._view: object = None
        self.opened: list[str] = []
        self.detach_calls = 0

    @property
    def is_attached(self) -> bool:
        return self._attaches and self.detach_calls == 0

    @property
    def window(self) -> FakeWindow | None:
        return self._window if self._has_window else None

    @property
    def view(self) -> object:
        return self._view

    async def open_document(self, document: Document) -> None:
        self.opened.append(document.path)
        entry = self.documents.get(document.path)
        if entry is None:
            raise FileNotFoundError(f"No such document: {document.path}")
        if isinstance(entry, Exception):
            raise entry
        self._view = entry()

    def load_markdown(self, markdown: str) -> FakeMarkdownView:
        if self._markdown_view is not None:
            view = self._markdown_view(markdown)
        else:
            view = FakeMarkdownView([FakeSection(f"<p>{markdown}</p>")])
        self._view = view
        return view

    def snapshot_canvas(self, element: Tag) -> str:
        return self._snapshots.get(str(element.get("id", "")), LONG_SNAPSHOT)

    def read_form_value(self, element: Tag) -> str | None:
        return self._form_values.get(str(element.get("id", "")))

    def detach(self) -> None:
        self.detach_calls += 1


class FakeRenderHost:
    """Host handing out surfaces from a factory."""

    def __init__(self, surface_factory: Callable[[], FakeSurface] | None = None) -> None:
        self._surface_factory = surface_factory or FakeSurface
        self.surfaces: list[FakeSurface] = []

    @property
    def surface(self) -> FakeSurface:
        """The most recently opened surface."""
        return self.surfaces[-1]

    def open_surface(self) -> FakeSurface:
        surface = self._surface_factory()
        self.surfaces.append(surface)
        return surface


def make_session(
    documents: dict[str, ViewFactory | Exception] | None = None,
    settings: ExportSettings | None = None,
    **surface_options: object,
) -> tuple[BatchSession, FakeRenderHost]:
    """Build a session over a fake host serving ``documents``."""
    host = FakeRenderHost(lambda: FakeSurface(documents, **surface_options))  # type: ignore[arg-type]
    session = BatchSession(host, settings=settings or fast_settings(), metrics=RendererMetrics())
    return session, host
