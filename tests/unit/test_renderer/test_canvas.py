"""Unit tests for canvas board capture."""

import pytest

from src.renderer.canvas import CanvasRenderer
from src.renderer.errors import RenderError
from src.renderer.markdown_view import MarkdownSectionRenderer
from src.renderer.models import RenderOptions
from tests.helpers.fake_surface import (
    FakeCanvasBoard,
    FakeCanvasEdge,
    FakeCanvasNode,
    FakeCanvasView,
    FakeMarkdownView,
    FakeSection,
    element,
    make_session,
)


async def _render(view: FakeCanvasView, options: RenderOptions | None = None):
    session, _ = make_session()
    await session.begin()
    renderer = CanvasRenderer(session, MarkdownSectionRenderer(session))
    return await renderer.render(view, options or RenderOptions())


class TestCanvasRenderer:
    @pytest.mark.asyncio
    async def test_board_rebuilt_from_nodes(self) -> None:
        board = FakeCanvasBoard(
            nodes={"n1": FakeCanvasNode("n1", text="hello")},
            edges={"e1": FakeCanvasEdge("e1", label="leads to")},
        )
        view = FakeCanvasView(board, "board.canvas")

        content = await _render(view)

        assert content is view.content_el
        assert "obsidian-document" in content["class"]
        assert content.select_one(".live-only") is None
        canvas = content.select_one(".canvas")
        layers = canvas.select("svg.canvas-edges")
        assert len(layers) == 2
        assert layers[0].select_one("g#e1") is not None
        assert layers[1].select_one("g#e1-head") is not None
        assert canvas.select_one("#n1 p").get_text() == "hello"
        assert canvas.select_one(".canvas-path-label-wrapper").get_text() == "leads to"
        assert board.zoom_calls == 2
        assert board.nodes["n1"].render_calls == 1
        assert board.edges["e1"].render_calls == 1

    @pytest.mark.asyncio
    async def test_unselected_file_node_becomes_reference(self) -> None:
        node = FakeCanvasNode("n1", file="notes/b.md")
        view = FakeCanvasView(FakeCanvasBoard(nodes={"n1": node}))

        content = await _render(view)

        reference = content.select_one("#n1 .markdown-embed-reference")
        assert reference is not None
        assert reference["src"] == "notes/b.md"
        assert "stale live content" not in content.get_text()
        embed = content.select_one("#n1 .markdown-embed")
        assert "external-markdown-embed" in embed["class"]

    @pytest.mark.asyncio
    async def test_selected_file_node_rendered_inline(self) -> None:
        child = FakeMarkdownView([FakeSection("<p>embedded</p>")], "notes/b.md")
        node = FakeCanvasNode("n1", file="notes/b.md", child=child)
        view = FakeCanvasView(FakeCanvasBoard(nodes={"n1": node}))

        content = await _render(view, RenderOptions(files_to_export=frozenset({"notes"})))

        embed = content.select_one("#n1 .markdown-embed-content")
        assert embed.select_one(".markdown-embed-reference") is None
        assert embed.select_one(".obsidian-document .markdown-sizer p").get_text() == "embedded"
        assert node.render_calls == 2

    @pytest.mark.asyncio
    async def test_url_node_gets_lazy_frame(self) -> None:
        node = FakeCanvasNode("n1", url="https://example.com")
        view = FakeCanvasView(FakeCanvasBoard(nodes={"n1": node}))

        content = await _render(view)

        frame = content.select_one("#n1 iframe.canvas-link")
        assert frame is not None
        assert frame["src"] == "https://example.com"
        assert frame["loading"] == "lazy"

    @pytest.mark.asyncio
    async def test_flattened_returns_board(self) -> None:
        view = FakeCanvasView(FakeCanvasBoard(nodes={"n1": FakeCanvasNode("n1", text="x")}))

        content = await _render(view, RenderOptions(create_document_container=False))

        assert "canvas" in content["class"]
        assert content.parent is None

    @pytest.mark.asyncio
    async def test_missing_board_element_raises(self) -> None:
        view = FakeCanvasView(FakeCanvasBoard())
        view.content_el = element('<div class="view-content"></div>')

        with pytest.raises(RenderError):
            await _render(view)
