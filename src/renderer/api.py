"""Public rendering API.

Every call takes the batch session explicitly. Rendering a document outside
an active batch opens a lone batch for that call only.
"""

from bs4 import Tag

from src.renderer.document_renderer import DocumentRenderer
from src.renderer.dom import inner_html
from src.renderer.inline_markdown import render_markdown_simple
from src.renderer.models import Document
from src.renderer.session import BatchSession, OptionsLike


async def render_document_to_element(
    session: BatchSession, document: Document, options: OptionsLike = None
) -> Tag | None:
    """Render a document into a detached, post-processed element tree.

    Args:
        session: Batch session owning the render surface.
        document: Document to render.
        options: Render options; omitted values take their defaults.

    Returns:
        The document root, or None if the render failed or was cancelled.
    """
    result = await DocumentRenderer(session).render_document(document, options)
    return None if result is None else result.content


async def render_document_to_string(
    session: BatchSession, document: Document, options: OptionsLike = None
) -> str | None:
    """Render a document and serialize the inner HTML of its root."""
    content = await render_document_to_element(session, document, options)
    return None if content is None else inner_html(content)


async def render_markdown_to_element(
    session: BatchSession, markdown: str, options: OptionsLike = None
) -> Tag | None:
    """Render raw markdown text into a detached, post-processed element tree."""
    return await DocumentRenderer(session).render_markdown_document(markdown, options)


async def render_markdown_to_string(
    session: BatchSession, markdown: str, options: OptionsLike = None
) -> str | None:
    """Render raw markdown text and serialize the inner HTML of its root."""
    content = await render_markdown_to_element(session, markdown, options)
    return None if content is None else inner_html(content)


async def begin_batch(session: BatchSession, options: OptionsLike = None) -> None:
    """Start a batch explicitly; renders then share its surface."""
    await session.begin(options)


def end_batch(session: BatchSession) -> None:
    """End the active batch."""
    session.end()


def is_cancelled(session: BatchSession) -> bool:
    """Whether the batch was cancelled (ending it if still active)."""
    return session.check_cancelled()


__all__ = [
    "begin_batch",
    "end_batch",
    "is_cancelled",
    "render_document_to_element",
    "render_document_to_string",
    "render_markdown_simple",
    "render_markdown_to_element",
    "render_markdown_to_string",
]
