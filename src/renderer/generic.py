"""Fallback strategy for views without a dedicated renderer."""

import structlog
from bs4 import Tag

from src.renderer.errors import BatchCancelledError
from src.renderer.models import RenderOptions
from src.renderer.protocols import GenericView
from src.renderer.session import BatchSession


logger = structlog.get_logger()


class GenericRenderer:
    """Takes the view's container wholesale after a fixed settle delay."""

    def __init__(self, session: BatchSession) -> None:
        self._session = session
        self._log = logger.bind(component="generic_renderer")

    async def render(self, view: GenericView, options: RenderOptions) -> Tag:
        """Render a generic plugin view.

        Args:
            view: The loaded view.
            options: Options of the render call.

        Returns:
            The view's container element.

        Raises:
            BatchCancelledError: If the batch was cancelled while settling.
        """
        await self._session.waiter.delay(self._session.timings.generic_settle_ms)
        if self._session.check_cancelled():
            raise BatchCancelledError(view.file_path)

        content = view.container_el
        self._log.debug("generic_view_captured", view_type=view.view_type)
        if options.container is not None:
            options.container.append(content)
        return content
