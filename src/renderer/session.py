"""Batch session owning the exclusive render surface."""

import asyncio
import uuid
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager

import structlog
from bs4 import Tag

from src.observability.logging import bind_batch_context, clear_batch_context
from src.progress.log import ProgressLog
from src.progress.panel import ProgressPanel
from src.renderer.constants import ERROR_COLOR, PROGRESS_COLOR
from src.renderer.errors import FatalSessionError
from src.renderer.metrics import RendererMetrics
from src.renderer.models import LogEntry, RenderOptions
from src.renderer.post_process import FormValueReader
from src.renderer.protocols import HostWindow, RenderHost, RenderSurface
from src.renderer.state_machine import BatchState, BatchStateMachine
from src.renderer.waiter import PollingWaiter
from src.settings.app import ExportSettings, RenderTimings, get_settings


logger = structlog.get_logger()

OptionsLike = RenderOptions | Mapping[str, object] | None


class BatchSession:
    """Lifecycle of one rendering batch and its render surface.

    Exactly one batch is active at a time. The session is passed explicitly
    to every component that needs the surface, the log or cancellation.
    """

    def __init__(
        self,
        host: RenderHost,
        settings: ExportSettings | None = None,
        log: ProgressLog | None = None,
        waiter: PollingWaiter | None = None,
        metrics: RendererMetrics | None = None,
    ) -> None:
        """Initialize an inactive session.

        Args:
            host: Provider of render surfaces.
            settings: Export settings (loaded from the environment if omitted).
            log: Progress log (created from the settings if omitted).
            waiter: Polling primitive.
            metrics: Optional metrics instance.
        """
        self._host = host
        self._settings = settings or get_settings()
        self._progress = log or ProgressLog(self._settings.log_level)
        self._progress.attach(self)
        self._waiter = waiter or PollingWaiter()
        self._metrics = metrics or RendererMetrics.get_instance()

        self._state = BatchStateMachine()
        self._surface: RenderSurface | None = None
        self._window: HostWindow | None = None
        self._panel: ProgressPanel | None = None
        self._cancelled = False
        self._error_occurred = False
        self._cancel_logged = False
        self._batch_id: str | None = None
        self._surface_lock = asyncio.Lock()
        self._log = logger.bind(component="batch_session")

    @property
    def active(self) -> bool:
        """Whether a batch has been started and not yet ended."""
        return not self._state.is_inactive()

    @property
    def state(self) -> BatchState:
        return self._state.state

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def error_occurred(self) -> bool:
        return self._error_occurred

    @property
    def surface(self) -> RenderSurface | None:
        """The render surface, or None when absent or invalidated."""
        return self._surface

    @property
    def panel(self) -> ProgressPanel | None:
        return self._panel

    @property
    def batch_id(self) -> str | None:
        return self._batch_id

    @property
    def log(self) -> ProgressLog:
        """The progress log shared by every component of the session."""
        return self._progress

    @property
    def settings(self) -> ExportSettings:
        return self._settings

    @property
    def timings(self) -> RenderTimings:
        return self._settings.timings

    @property
    def waiter(self) -> PollingWaiter:
        return self._waiter

    @property
    def metrics(self) -> RendererMetrics:
        return self._metrics

    async def begin(self, options: OptionsLike = None) -> None:
        """Start a batch and acquire the render surface.

        No-op while a batch is active.

        Args:
            options: Render options; only ``display_progress`` is used.

        Raises:
            FatalSessionError: If the surface never attached.
        """
        options = RenderOptions.merged(options)
        if self.active:
            return

        self._cancelled = False
        self._error_occurred = False
        self._cancel_logged = False
        self._state.transition(BatchState.STARTING)
        self._batch_id = uuid.uuid4().hex[:12]
        bind_batch_context(self._batch_id)
        self._metrics.record_batch_started()

        self._surface = self._host.open_surface()
        timings = self.timings
        await self._waiter.wait(
            lambda: self._surface_attached() or self.check_cancelled(),
            timings.surface_attach_timeout_ms,
            timings.poll_interval_ms,
        )

        if not self._surface_attached():
            cancelled = self._cancelled
            self._release_surface()
            if not cancelled:
                message = "Failed to create surface for rendering!"
                self._progress.error(message, fatal=True)
                self._reset()
                raise FatalSessionError(message)
            self._reset()
            return

        window = self._surface.window if self._surface is not None else None
        if window is None:
            self._progress.error("Failed to get the render window, please try again.")
            self._release_surface()
            self._reset()
            return

        if not options.display_progress:
            window.move_to(0, window.screen_height)
            window.hide()
        else:
            window.resize_to(timings.panel_width, timings.panel_height)
            window.move_to(
                window.screen_width // 2 - timings.panel_width // 2,
                window.screen_height - timings.panel_height - 125,
            )
        window.set_always_on_top(True)
        window.on_close(self._on_window_closed)
        self._window = window

        self._panel = ProgressPanel()
        window.mount_panel(self._panel.element)
        self._state.transition(BatchState.ACTIVE)
        self._log.info("batch_started", display_progress=options.display_progress)

    def end(self) -> None:
        """End the batch.

        Without errors the surface is released. After an error it is left
        open and the panel shows a terminal "Completed with errors" state.
        The session is inactive afterwards in every case.
        """
        if not self.active:
            return

        if self._window is not None:
            self._window.off_close(self._on_window_closed)

        if self._error_occurred:
            self._progress.warning("Error in batch, leaving render window open")
            self.report_progress(
                1, "Completed with errors", "Please see the log for more details.", ERROR_COLOR
            )
        elif self._surface is not None:
            self._progress.info("Closing render window")
            self._surface.detach()

        self._log.info(
            "batch_ended",
            cancelled=self._cancelled,
            error_occurred=self._error_occurred,
        )
        self._reset()

    def check_cancelled(self) -> bool:
        """Check for cancellation, ending the batch when it is observed.

        Returns:
            True if the batch was cancelled or has no render surface.
        """
        if not self._cancelled and self._surface is not None:
            return False

        if self.active:
            if not self._cancel_logged:
                self._cancel_logged = True
                self._metrics.record_cancellation()
                self._progress.info("cancelled")
            self.end()
        return True

    def cancel(self) -> None:
        """Request cooperative cancellation of the active batch.

        The cancellation outlives the batch: later renders return nothing
        until the next explicit ``begin``.
        """
        if self.active:
            self._cancelled = True

    def invalidate_surface(self) -> None:
        """Mark the batch as errored and drop the unusable surface handle."""
        if not self.active:
            return
        self._error_occurred = True
        self._surface = None

    def form_value_reader(self) -> FormValueReader | None:
        """Reader for live form values, while the surface is available."""
        if self._surface is None:
            return None
        return self._surface.read_form_value

    @asynccontextmanager
    async def lone_batch(self, options: OptionsLike = None) -> AsyncIterator[bool]:
        """Open a batch for a single render if none is active.

        The batch is closed on every exit path if this scope opened it. After
        a cancellation no batch is opened until ``begin`` is called
        explicitly, so the render inside the scope observes the cancellation.

        Yields:
            True if this scope owns the batch.
        """
        owned = not self.active and not self._cancelled
        if owned:
            self._progress.info("Exporting single file, starting batch")
            await self.begin(options)
        try:
            yield owned
        finally:
            if owned:
                self.end()

    @asynccontextmanager
    async def exclusive(self) -> AsyncIterator[None]:
        """Hold the render surface; concurrent requests queue in FIFO order."""
        async with self._surface_lock:
            yield

    def report_progress(
        self,
        fraction: float,
        message: str,
        sub_message: str,
        color: str = PROGRESS_COLOR,
    ) -> None:
        if not self.active or self._panel is None:
            return
        self._panel.report(fraction, message, sub_message, color)
        if self._window is not None:
            self._window.set_progress_bar(fraction)

    def show_log_entry(self, entry: LogEntry) -> None:
        if not self.active or self._panel is None:
            return
        first_shown = self._panel.append_log(entry.level, entry.title, entry.message)
        if first_shown and self._window is not None:
            timings = self.timings
            self._window.resize_to(timings.log_panel_width, timings.log_panel_height)

    def show_file_list(
        self,
        items: Sequence[str],
        title: str | None = None,
        icons: Sequence[str] | str | None = None,
        render_as_markdown: bool = False,
    ) -> Tag | None:
        if self._panel is None:
            return None
        return self._panel.set_file_list(items, title, icons, render_as_markdown)

    def _surface_attached(self) -> bool:
        return self._surface is not None and self._surface.is_attached

    def _release_surface(self) -> None:
        surface = self._surface
        self._surface = None
        if surface is None:
            return
        try:
            surface.detach()
        except Exception as e:
            self._progress.error("Failed to detach render surface", e)

    def _on_window_closed(self) -> None:
        if self._cancelled:
            return
        self.end()
        self._cancelled = True

    def _reset(self) -> None:
        self._surface = None
        self._window = None
        self._panel = None
        if not self._state.is_inactive():
            self._state.transition(BatchState.INACTIVE)
        clear_batch_context()
