"""Canvas board capture.

Nodes and edges are forced to render at a fitted zoom, then the node
elements and edge layers are rebuilt into a static board. Embedded
documents are either rendered inline into their node or replaced with a
reference placeholder.
"""

import structlog
from bs4 import Tag

from src.renderer.constants import CANVAS_EMBED_SELECTOR, DOCUMENT_ROOT_CLASS
from src.renderer.dom import add_class, create_element
from src.renderer.embeds import ExportSelection, make_reference, should_inline
from src.renderer.errors import BatchCancelledError, RenderError, RenderErrorClass
from src.renderer.markdown_view import MarkdownSectionRenderer
from src.renderer.models import RenderOptions
from src.renderer.protocols import CanvasNode, CanvasView
from src.renderer.session import BatchSession


logger = structlog.get_logger()

_EDGE_LAYER_CLASS = "canvas-edges"


def _link_frame(url: str) -> Tag:
    return create_element(
        "iframe",
        ["canvas-link"],
        {
            "src": url,
            "style": "border: none; width: 100%; height: 100%;",
            "title": f"Canvas card with embedded webpage: {url}",
            "loading": "lazy",
        },
    )


class CanvasRenderer:
    """Renders canvas views into a static board."""

    def __init__(self, session: BatchSession, markdown: MarkdownSectionRenderer) -> None:
        """Initialize the renderer.

        Args:
            session: Active batch session.
            markdown: Renderer used for embedded markdown documents.
        """
        self._session = session
        self._markdown = markdown
        self._waiter = session.waiter
        self._timings = session.timings
        self._log = logger.bind(component="canvas_renderer")

    async def render(self, view: CanvasView, options: RenderOptions) -> Tag:
        """Render a canvas view.

        Args:
            view: The loaded canvas view.
            options: Options of the render call.

        Returns:
            The view's content element, or the bare board element when no
            document container is kept.

        Raises:
            BatchCancelledError: If the batch was cancelled.
            RenderError: If the view has no board element.
        """
        path = view.file_path
        self._raise_if_cancelled(path)
        board = view.canvas

        board.zoom_to_fit()
        await self._waiter.delay(self._timings.canvas_settle_ms)
        for node in board.nodes.values():
            await node.render()
        for edge in board.edges.values():
            await edge.render()
        board.zoom_to_fit()
        await self._waiter.delay(self._timings.canvas_settle_ms)
        self._raise_if_cancelled(path)

        canvas_el = view.content_el.select_one(".canvas")
        if canvas_el is None:
            raise RenderError(RenderErrorClass.RENDER, "Canvas board element not found", path)

        canvas_el.clear()
        edge_layer = create_element("svg", [_EDGE_LAYER_CLASS])
        head_layer = create_element("svg", [_EDGE_LAYER_CLASS])
        canvas_el.append(edge_layer)
        canvas_el.append(head_layer)

        selection = self._selection(options)
        for node in board.nodes.values():
            await self._render_node(node, options, selection)
            canvas_el.append(node.node_el)
            self._raise_if_cancelled(path)

        for edge in board.edges.values():
            edge_layer.append(edge.line_group_el)
            head_layer.append(edge.line_end_group_el)
            if edge.label and edge.label_el is not None:
                canvas_el.append(edge.label_el)

        self._log.debug(
            "canvas_rendered",
            document=path,
            nodes=len(board.nodes),
            edges=len(board.edges),
        )

        if options.create_document_container:
            content = view.content_el
            add_class(content, DOCUMENT_ROOT_CLASS)
        else:
            content = canvas_el.extract()
        if options.container is not None:
            options.container.append(content)
        return content

    async def _render_node(
        self, node: CanvasNode, options: RenderOptions, selection: ExportSelection
    ) -> None:
        embed_el = node.node_el.select_one(CANVAS_EMBED_SELECTOR)
        if embed_el is not None:
            embed_el.clear()
            child = node.child
            if node.file is not None and not should_inline(node.file, options, selection):
                make_reference(embed_el, node.file)
            elif child is not None:
                await node.render()
                await self._markdown.render(child, options.with_container(embed_el))
            elif node.file is not None:
                make_reference(embed_el, node.file)

        if node.url:
            node.content_el.append(_link_frame(node.url))

    def _selection(self, options: RenderOptions) -> ExportSelection:
        if options.files_to_export is not None:
            return ExportSelection(options.files_to_export)
        return ExportSelection(self._session.settings.files_to_export)

    def _raise_if_cancelled(self, path: str | None) -> None:
        if self._session.check_cancelled():
            raise BatchCancelledError(path)
