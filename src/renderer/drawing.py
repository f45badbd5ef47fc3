"""Drawing documents exported as theme-tagged SVG."""

import structlog
from bs4 import Tag

from src.renderer.constants import DOCUMENT_ROOT_CLASS
from src.renderer.dom import add_class, create_element
from src.renderer.errors import BatchCancelledError
from src.renderer.models import RenderOptions
from src.renderer.protocols import DrawingView
from src.renderer.session import BatchSession


logger = structlog.get_logger()


class DrawingRenderer:
    """Exports the drawing as SVG and tags it light or dark."""

    def __init__(self, session: BatchSession) -> None:
        self._session = session
        self._log = logger.bind(component="drawing_renderer")

    async def render(self, view: DrawingView, options: RenderOptions) -> Tag:
        """Render a drawing view.

        An SVG carrying a ``filter`` attribute is a dark-theme export; the
        filter is removed and the SVG tagged ``dark``. Otherwise it is tagged
        ``light``.

        Args:
            view: The loaded drawing view.
            options: Options of the render call.

        Returns:
            The document root, or the bare SVG when no container is kept.

        Raises:
            BatchCancelledError: If the batch was cancelled during export.
        """
        await self._session.waiter.delay(self._session.timings.drawing_settle_ms)
        svg = await view.export_svg()
        if self._session.check_cancelled():
            raise BatchCancelledError(view.file_path)

        is_light = not svg.has_attr("filter")
        if not is_light:
            del svg["filter"]
        add_class(svg, "light" if is_light else "dark")
        self._log.debug("drawing_exported", theme="light" if is_light else "dark")

        if options.create_document_container:
            content = create_element("div", [DOCUMENT_ROOT_CLASS])
            plugin = create_element("div", ["excalidraw-plugin"])
            plugin.append(svg)
            content.append(plugin)
        else:
            content = svg

        if options.container is not None:
            options.container.append(content)
        return content
