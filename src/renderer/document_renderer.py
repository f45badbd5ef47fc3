"""Per-document render orchestration.

Loads one document into the batch's render surface, dispatches to the
strategy for its view kind and detaches the result. Failures are isolated
at the document boundary: a failed document yields None and the batch
carries on with the next one.
"""

import time
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from bs4 import Tag

from src.renderer.canvas import CanvasRenderer
from src.renderer.drawing import DrawingRenderer
from src.renderer.errors import (
    BatchCancelledError,
    FatalSessionError,
    LoadError,
    RenderError,
    RenderErrorClass,
    StageTimeoutError,
    SurfaceUnavailableError,
)
from src.renderer.generic import GenericRenderer
from src.renderer.headings import make_heading_trees
from src.renderer.markdown_view import MarkdownSectionRenderer
from src.renderer.media import create_media_page
from src.renderer.models import Document, DocumentKind, RenderOptions, RenderResult
from src.renderer.post_process import PostProcessor
from src.renderer.protocols import RenderSurface
from src.renderer.session import BatchSession, OptionsLike
from src.renderer.state_machine import DocumentRenderStateMachine


logger = structlog.get_logger()

MARKDOWN_SNIPPET_PATH = "<markdown>"


def _surface_failure(error: Exception, path: str) -> RenderError:
    """Wrap an exception raised by the surface or a view hook."""
    return RenderError(
        RenderErrorClass.RENDER,
        str(error) or type(error).__name__,
        path,
        details={"exception_type": type(error).__name__},
    )


class DocumentRenderer:
    """Renders documents through the batch session's surface."""

    def __init__(self, session: BatchSession) -> None:
        """Initialize the renderer and its view strategies.

        Args:
            session: Batch session owning the render surface.
        """
        self._session = session
        self._progress = session.log
        self._metrics = session.metrics
        self._markdown = MarkdownSectionRenderer(session)
        self._strategies: dict[DocumentKind, Callable[[Any, RenderOptions], Awaitable[Tag]]] = {
            DocumentKind.MARKDOWN: self._markdown.render,
            DocumentKind.CANVAS: CanvasRenderer(session, self._markdown).render,
            DocumentKind.DRAWING: DrawingRenderer(session).render,
            DocumentKind.GENERIC: GenericRenderer(session).render,
        }
        self._log = logger.bind(component="document_renderer")

    async def render_file(
        self, document: Document, options: OptionsLike = None
    ) -> RenderResult | None:
        """Render one document without post-processing.

        Media attachments bypass the surface. Every other document is
        rendered exclusively; a batch is opened for the call if none is
        active and closed again before returning.

        Args:
            document: Document to render.
            options: Render options.

        Returns:
            The detached result, or None if the render failed or was
            cancelled.
        """
        return await self._run_document(document, RenderOptions.merged(options), finish=False)

    async def render_document(
        self, document: Document, options: OptionsLike = None
    ) -> RenderResult | None:
        """Render one document and apply post-processing and heading trees.

        Post-processing runs while the surface is still held so that live
        form values can be read.

        Args:
            document: Document to render.
            options: Render options.

        Returns:
            The finished result, or None on failure or cancellation.
        """
        return await self._run_document(document, RenderOptions.merged(options), finish=True)

    async def render_markdown(self, markdown: str, options: OptionsLike = None) -> Tag | None:
        """Render raw markdown text without post-processing.

        Args:
            markdown: Markdown source.
            options: Render options.

        Returns:
            The rendered tree, or None on failure or cancellation.
        """
        return await self._run_markdown(markdown, RenderOptions.merged(options), finish=False)

    async def render_markdown_document(
        self, markdown: str, options: OptionsLike = None
    ) -> Tag | None:
        """Render raw markdown text and apply post-processing."""
        return await self._run_markdown(markdown, RenderOptions.merged(options), finish=True)

    async def _run_document(
        self, document: Document, options: RenderOptions, finish: bool
    ) -> RenderResult | None:
        if document.is_media:
            return self._render_media(document, options, finish)

        async with self._session.exclusive():
            try:
                async with self._session.lone_batch(options):
                    result = await self._render_in_surface(document, options)
                    if result is not None and finish:
                        self._finish(result.content, options)
                    return result
            except FatalSessionError as e:
                self._log.warning("document_render_aborted", **e.to_dict())
                return None

    def _render_media(
        self, document: Document, options: RenderOptions, finish: bool
    ) -> RenderResult | None:
        state = DocumentRenderStateMachine(document.path)
        if self._session.cancelled:
            self._session.check_cancelled()
            state.to_cancelled()
            return None

        state.to_rendering()
        content = create_media_page(document, options)
        if finish:
            self._finish(content, options)
        state.to_done()
        self._metrics.record_document_rendered(document.path, 0.0)
        return RenderResult(content=content, view_type=DocumentKind.MEDIA)

    async def _run_markdown(self, markdown: str, options: RenderOptions, finish: bool) -> Tag | None:
        async with self._session.exclusive():
            try:
                async with self._session.lone_batch(options):
                    content = await self._render_markdown_in_surface(markdown, options)
                    if content is not None and finish:
                        self._finish(content, options)
                    return content
            except FatalSessionError as e:
                self._log.warning("markdown_render_aborted", **e.to_dict())
                return None

    async def _render_in_surface(
        self, document: Document, options: RenderOptions
    ) -> RenderResult | None:
        state = DocumentRenderStateMachine(document.path)
        start = time.perf_counter()
        self._log.info("document_render_started", document=document.path)

        try:
            surface = await self._await_surface()
            state.to_loading()
            try:
                await surface.open_document(document)
            except Exception as e:
                raise LoadError(str(e), document.path) from e

            state.to_rendering()
            view = surface.view
            kind = DocumentKind.from_view_type(getattr(view, "view_type", ""))
            content = await self._strategies[kind](view, options)
            self._raise_if_cancelled(document.path)
            if content is None:
                raise RenderError(RenderErrorClass.RENDER, "Failed to render file!", document.path)
        except BatchCancelledError:
            state.to_cancelled()
            self._log.info("document_render_cancelled", document=document.path)
            return None
        except RenderError as e:
            return self._fail(state, document.path, e)
        except Exception as e:
            return self._fail(state, document.path, _surface_failure(e, document.path))

        if options.container is None:
            content.extract()
        state.to_done()
        duration_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_document_rendered(document.path, duration_ms)
        self._log.info(
            "document_render_complete",
            document=document.path,
            view_type=kind.value,
            duration_ms=round(duration_ms, 2),
        )
        return RenderResult(content=content, view_type=kind)

    async def _render_markdown_in_surface(
        self, markdown: str, options: RenderOptions
    ) -> Tag | None:
        state = DocumentRenderStateMachine(MARKDOWN_SNIPPET_PATH)
        try:
            surface = await self._await_surface()
            state.to_loading()
            try:
                view = surface.load_markdown(markdown)
            except Exception as e:
                raise LoadError(str(e), MARKDOWN_SNIPPET_PATH) from e

            state.to_rendering()
            content = await self._markdown.render(view, options)
            self._raise_if_cancelled(MARKDOWN_SNIPPET_PATH)
        except BatchCancelledError:
            state.to_cancelled()
            return None
        except RenderError as e:
            return self._fail(state, MARKDOWN_SNIPPET_PATH, e)
        except Exception as e:
            return self._fail(
                state, MARKDOWN_SNIPPET_PATH, _surface_failure(e, MARKDOWN_SNIPPET_PATH)
            )

        if options.container is None:
            content.extract()
        state.to_done()
        return content

    async def _await_surface(self) -> RenderSurface:
        timings = self._session.timings
        await self._session.waiter.wait(
            lambda: self._session.surface is not None or self._session.check_cancelled(),
            timings.surface_attach_timeout_ms,
            timings.poll_interval_ms,
        )
        if self._session.cancelled:
            self._session.check_cancelled()
            raise BatchCancelledError()
        surface = self._session.surface
        if surface is None:
            raise SurfaceUnavailableError()
        return surface

    def _finish(self, content: Tag, options: RenderOptions) -> None:
        if options.post_process:
            PostProcessor(self._progress, self._session.form_value_reader()).process(
                content, options
            )
        if options.make_headers_trees:
            make_heading_trees(content)

    def _fail(
        self, state: DocumentRenderStateMachine, path: str, error: RenderError
    ) -> None:
        if self._session.cancelled:
            state.to_cancelled()
            return None

        state.to_failed()
        self._metrics.record_failure()
        if isinstance(error, StageTimeoutError):
            self._metrics.record_stage_timeout(critical=error.critical)
        self._log.warning("document_render_failed", **error.to_dict())
        self._progress.error(f"Rendering {path} failed", error)
        return None

    def _raise_if_cancelled(self, path: str) -> None:
        if self._session.check_cancelled():
            raise BatchCancelledError(path)
