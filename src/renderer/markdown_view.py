"""Section-by-section capture of markdown views.

Each section is rendered by the surface, polled until the surface flags it
rendered and measured, then given a best-effort window for transclusions and
plugin blocks to settle. Live canvases are snapshotted into images and
transclusions are resolved inline or replaced with references. The sections
are then cloned into a fresh document tree owned by the caller.
"""

import asyncio
import copy
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import structlog
from bs4 import Tag

from src.renderer.constants import (
    BANNER_SELECTOR,
    DOCUMENT_ROOT_CLASS,
    EMBED_CONTENT_SELECTOR,
    PLUGIN_BLOCK_PREFIX,
    PUSHER_CLASS,
    PUSHER_STYLE,
    QUERY_BLOCK_KEYWORDS,
    SIZER_CLASS,
)
from src.renderer.dom import (
    class_starts_with,
    classes_of,
    create_element,
    get_style,
    has_ancestor,
    has_class,
    is_empty,
    set_style,
)
from src.renderer.embeds import ExportSelection, make_reference, should_inline
from src.renderer.errors import BatchCancelledError, StageTimeoutError
from src.renderer.models import RenderOptions
from src.renderer.protocols import MarkdownView, RenderSurface, Section
from src.renderer.session import BatchSession


logger = structlog.get_logger()


@dataclass(frozen=True)
class QueryBlock:
    """Unrendered dynamic query block found in a section.

    Attributes:
        keyword: Query language keyword (e.g. ``dataview``).
        query: Query source.
        placeholder: The ``pre`` element holding the source.
    """

    keyword: str
    query: str
    placeholder: Tag


def find_query_blocks(content: Tag) -> list[QueryBlock]:
    """Find unrendered query blocks in ``content``."""
    blocks = []
    for keyword in QUERY_BLOCK_KEYWORDS:
        for code in content.select(f"pre > code.language-{keyword}"):
            if code.parent is not None:
                blocks.append(QueryBlock(keyword, code.get_text(), code.parent))
    return blocks


def has_empty_transclusion(content: Tag) -> bool:
    return any(is_empty(sizer) for sizer in content.select(f".{SIZER_CLASS}"))


def empty_plugin_blocks(content: Tag) -> list[Tag]:
    return [
        element
        for element in content.find_all(True)
        if class_starts_with(element, PLUGIN_BLOCK_PREFIX) and is_empty(element)
    ]


def _inside_pdf_embed(element: Tag) -> bool:
    return has_class(element, "pdf-embed")


class MarkdownSectionRenderer:
    """Renders a markdown view into a standalone document tree."""

    def __init__(self, session: BatchSession) -> None:
        """Initialize the renderer.

        Args:
            session: Active batch session.
        """
        self._session = session
        self._timings = session.timings
        self._waiter = session.waiter
        self._progress = session.log
        self._metrics = session.metrics
        self._log = logger.bind(component="markdown_renderer")

    async def render(self, view: MarkdownView, options: RenderOptions) -> Tag:
        """Render every section of ``view`` and assemble the document.

        Args:
            view: Markdown view loaded in the surface.
            options: Options of the render call.

        Returns:
            ``div.obsidian-document > div.markdown-sizer`` holding the cloned
            sections. Without a document container the sizer alone is
            returned, or ``options.container`` after the sizer's children
            were moved into it.

        Raises:
            StageTimeoutError: If a section never rendered or measured.
            BatchCancelledError: If the batch was cancelled.
        """
        path = view.file_path
        selection = self._selection(options)

        view.load()
        try:
            await view.prepare()
        except Exception as e:
            self._progress.error("Failed to unfold or parse renderer!", e)

        sections = list(view.sections)
        document = create_element("div", [DOCUMENT_ROOT_CLASS, *view.preview_class.split()])
        sizer = create_element("div", [SIZER_CLASS])
        document.append(sizer)
        view.container_el = sizer

        pending: list[Awaitable[object]] = []
        folded: list[Tag] = []
        for section in sections:
            await self._render_section(view, section, sizer, options, selection, pending, folded)

        if pending:
            await asyncio.gather(*pending)

        for callout in folded:
            set_style(callout, display="none")

        sizer.clear()
        if options.create_pusher_element:
            sizer.append(create_element("div", [PUSHER_CLASS], {"style": PUSHER_STYLE}))
        for section in sections:
            sizer.append(copy.copy(section.content))

        banner = sizer.select_one(BANNER_SELECTOR)
        if banner is not None:
            sizer.insert_before(banner.extract())

        self._log.debug("markdown_rendered", document=path, sections=len(sections))
        return self._place(document, sizer, options)

    async def _render_section(  # noqa: PLR0913
        self,
        view: MarkdownView,
        section: Section,
        sizer: Tag,
        options: RenderOptions,
        selection: ExportSelection,
        pending: list[Awaitable[object]],
        folded: list[Tag],
    ) -> None:
        path = view.file_path
        timings = self._timings

        section.shown = True
        section.rendered = False
        section.reset_compute()
        section.set_collapsed(False)
        section.content.clear()
        sizer.append(section.content)

        await section.render()
        rendered = await self._waiter.wait(
            lambda: section.rendered or self._session.check_cancelled(),
            timings.section_timeout_ms,
            timings.poll_interval_ms,
        )
        self._raise_if_cancelled(path)
        if not rendered:
            raise StageTimeoutError("section_render", timings.section_timeout_ms, path)

        await view.measure_section(section)
        measured = await self._waiter.wait(
            lambda: section.computed or self._session.check_cancelled(),
            timings.section_timeout_ms,
            timings.poll_interval_ms,
        )
        self._raise_if_cancelled(path)
        if not measured:
            raise StageTimeoutError("section_measure", timings.section_timeout_ms, path)

        for block in find_query_blocks(section.content):
            container = create_element("div", [f"{PLUGIN_BLOCK_PREFIX}{block.keyword}"])
            block.placeholder.replace_with(container)
            await view.render_query_block(block.keyword, block.query, container)

        await view.post_process(section, pending)
        folded.extend(self._unfold_callouts(section.content))

        await self._settle(
            lambda: has_empty_transclusion(section.content),
            path,
            f"Transcluded content did not finish rendering in {path}",
        )
        self._resolve_transclusions(section.content, options, selection)

        await self._settle(
            lambda: bool(empty_plugin_blocks(section.content)),
            path,
            None,
        )

        self._snapshot_canvases(section.content, path)

        for block in empty_plugin_blocks(section.content):
            self._progress.warning(
                f"Plugin element {' '.join(classes_of(block))} from {path} not shown! "
                "This may be because the plugin is not compatible with this export.",
                str(block),
            )

    async def _settle(
        self,
        unsettled: Callable[[], bool],
        path: str | None,
        warning: str | None,
    ) -> None:
        timings = self._timings
        await self._waiter.wait(
            lambda: not unsettled() or self._session.check_cancelled(),
            timings.settle_timeout_ms,
            timings.poll_interval_ms,
        )
        self._raise_if_cancelled(path)
        if unsettled():
            self._metrics.record_stage_timeout(critical=False)
            if warning:
                self._progress.warning(warning)

    def _unfold_callouts(self, content: Tag) -> list[Tag]:
        folded = []
        for callout in content.select(".callout-content"):
            if get_style(callout).get("display") == "none":
                set_style(callout, display="")
                folded.append(callout)
        return folded

    def _resolve_transclusions(
        self, content: Tag, options: RenderOptions, selection: ExportSelection
    ) -> None:
        for embed in content.select(".markdown-embed[src]"):
            embed_content = embed.select_one(EMBED_CONTENT_SELECTOR)
            if embed_content is None:
                continue
            if embed_content.select_one(".markdown-embed-reference") is not None:
                continue
            src = str(embed["src"])
            if not should_inline(src, options, selection):
                make_reference(embed_content, src)

    def _snapshot_canvases(self, content: Tag, path: str | None) -> None:
        surface = self._require_surface(path)
        for canvas in content.find_all("canvas"):
            if has_ancestor(canvas, _inside_pdf_embed, stop=content):
                continue

            data = surface.snapshot_canvas(canvas)
            if len(data) < self._timings.min_snapshot_chars:
                self._progress.warning(
                    f"Failed to render canvas based plugin element in file {path}:",
                    str(canvas),
                )
                self._metrics.record_canvas_snapshot(dropped=True)
                canvas.decompose()
                continue

            image = create_element("img", attrs={"src": data})
            set_style(
                image,
                width=get_style(canvas).get("width") or "100%",
                max_width="100%",
            )
            canvas.replace_with(image)
            self._metrics.record_canvas_snapshot()

    def _place(self, document: Tag, sizer: Tag, options: RenderOptions) -> Tag:
        container = options.container
        if options.create_document_container:
            if container is not None:
                container.append(document)
            return document

        sizer.extract()
        if container is None:
            return sizer
        for child in list(sizer.contents):
            container.append(child.extract())
        return container

    def _selection(self, options: RenderOptions) -> ExportSelection:
        if options.files_to_export is not None:
            return ExportSelection(options.files_to_export)
        return ExportSelection(self._session.settings.files_to_export)

    def _require_surface(self, path: str | None) -> RenderSurface:
        surface = self._session.surface
        if surface is None or self._session.check_cancelled():
            raise BatchCancelledError(path)
        return surface

    def _raise_if_cancelled(self, path: str | None) -> None:
        if self._session.check_cancelled():
            raise BatchCancelledError(path)
