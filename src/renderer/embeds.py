"""Inline-vs-reference decisions for embedded documents."""

from collections.abc import Iterable
from pathlib import PurePosixPath

from bs4 import Tag

from src.renderer.constants import EMBED_REFERENCE_CLASS, EXTERNAL_EMBED_CLASS
from src.renderer.dom import add_class, create_element
from src.renderer.models import RenderOptions


def _normalize(path: str) -> str:
    return str(PurePosixPath(path.strip().replace("\\", "/"))).strip("/")


class ExportSelection:
    """Set of paths selected for export.

    Entries may name files or folders; a path is exported when it equals an
    entry or lies beneath one.
    """

    def __init__(self, paths: Iterable[str]) -> None:
        self._paths = frozenset(_normalize(p) for p in paths if p.strip())

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str):
            return False
        candidate = _normalize(path)
        if "." in self._paths or candidate in self._paths:
            return True
        return any(parent in self._paths for parent in map(str, PurePosixPath(candidate).parents))

    def __len__(self) -> int:
        return len(self._paths)


def should_inline(path: str, options: RenderOptions, selection: ExportSelection) -> bool:
    """Decide whether an embedded document is inlined.

    Args:
        path: Path of the embedded document.
        options: Options of the render call.
        selection: Paths selected for the current export.

    Returns:
        True to inline the document's content, False to reference it.
    """
    return options.inline_html or path in selection


def make_reference(embed_content: Tag, path: str) -> None:
    """Replace an embed's content with a static cross-reference placeholder.

    Args:
        embed_content: The embed content element to fill.
        path: Path of the referenced document.
    """
    embed_content.clear()
    embed_content.append(
        create_element("div", [EMBED_REFERENCE_CLASS], attrs={"src": path})
    )
    wrapper = embed_content.parent
    if wrapper is not None:
        add_class(wrapper, EXTERNAL_EMBED_CLASS)
        wrapper["src"] = path
