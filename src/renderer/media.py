"""Static pages for viewable media attachments."""

from bs4 import Tag

from src.renderer.constants import (
    AUDIO_EXTENSIONS,
    CONVERTABLE_EXTENSIONS,
    DOCUMENT_ROOT_CLASS,
    EMBED_EXTENSIONS,
    IMAGE_EXTENSIONS,
    VIDEO_EXTENSIONS,
    VIEWABLE_MEDIA_EXTENSIONS,
)
from src.renderer.dom import create_element, set_style
from src.renderer.models import Document, RenderOptions


def extension_to_tag(extension: str) -> str:
    """Map a file extension to the element that displays it.

    Args:
        extension: Extension with or without the leading dot.

    Returns:
        ``img``, ``video``, ``audio``, ``embed`` or ``iframe``, or an empty
        string for extensions that cannot be displayed.
    """
    ext = extension.lower().lstrip(".")
    if ext in IMAGE_EXTENSIONS:
        return "img"
    if ext in VIDEO_EXTENSIONS:
        return "video"
    if ext in AUDIO_EXTENSIONS:
        return "audio"
    if ext in EMBED_EXTENSIONS:
        return "embed"
    if ext in VIEWABLE_MEDIA_EXTENSIONS:
        return "iframe"
    return ""


def is_convertable(extension: str) -> bool:
    """Whether documents with this extension can be exported."""
    return extension.lower().lstrip(".") in CONVERTABLE_EXTENSIONS


def create_media_page(document: Document, options: RenderOptions) -> Tag:
    """Build a document page displaying a media file.

    The surface is never involved. The media element references the file
    by its path.

    Args:
        document: Media document.
        options: Options of the render call.

    Returns:
        The page root, also appended to ``options.container`` if given.
    """
    page = create_element("div", [DOCUMENT_ROOT_CLASS, "media-page"])
    tag = extension_to_tag(document.extension)
    if tag:
        media = create_element(tag, attrs={"src": document.path})
        set_style(media, max_width="100%")
        if tag == "iframe":
            set_style(media, width="100%", height="100%", border="none")
        if tag in ("video", "audio"):
            media["controls"] = ""
        page.append(media)
    else:
        page.append(create_element("a", attrs={"href": document.path}, text=document.name))

    if options.container is not None:
        options.container.append(page)
    return page
