"""Error types for the batch render pipeline."""

from enum import Enum


class RenderErrorClass(str, Enum):
    """Classification of render errors.

    - LOAD: Document failed to load into the surface
    - TIMEOUT: A polled stage never satisfied its predicate
    - RENDER: The view produced no usable content
    - SURFACE: No render surface is available
    - CANCELLED: Cooperative cancellation was observed
    - FATAL: The session cannot continue
    """

    LOAD = "LOAD"
    TIMEOUT = "TIMEOUT"
    RENDER = "RENDER"
    SURFACE = "SURFACE"
    CANCELLED = "CANCELLED"
    FATAL = "FATAL"


class RenderError(Exception):
    """Base exception for render errors.

    Provides structured error information for logging and progress reporting.
    """

    def __init__(
        self,
        error_class: RenderErrorClass,
        message: str,
        document_path: str | None = None,
        details: dict[str, str | int | bool | None] | None = None,
    ) -> None:
        """Initialize the render error.

        Args:
            error_class: Classification of the error.
            message: Human-readable error message.
            document_path: Path of the document being rendered, if any.
            details: Additional structured error details.
        """
        super().__init__(message)
        self.error_class = error_class
        self.message = message
        self.document_path = document_path
        self.details = details or {}

    def to_dict(
        self,
    ) -> dict[str, str | int | bool | None | dict[str, str | int | bool | None]]:
        """Convert error to dictionary for logging.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error_class": self.error_class.value,
            "message": self.message,
            "document_path": self.document_path,
            "details": self.details,
        }


class LoadError(RenderError):
    """Document failed to load into the render surface."""

    def __init__(self, message: str, document_path: str | None = None) -> None:
        super().__init__(RenderErrorClass.LOAD, message, document_path)


class StageTimeoutError(RenderError):
    """A polled stage did not complete within its budget.

    Attributes:
        stage: Name of the stage that timed out.
        timeout_ms: Budget that was exceeded.
        critical: Whether the timeout fails the document.
    """

    def __init__(
        self,
        stage: str,
        timeout_ms: int,
        document_path: str | None = None,
        critical: bool = True,
    ) -> None:
        super().__init__(
            RenderErrorClass.TIMEOUT,
            f"Stage '{stage}' did not complete within {timeout_ms}ms",
            document_path,
            {"stage": stage, "timeout_ms": timeout_ms, "critical": critical},
        )
        self.stage = stage
        self.timeout_ms = timeout_ms
        self.critical = critical


class SurfaceUnavailableError(RenderError):
    """No active render surface, e.g. the render window was lost."""

    def __init__(self, message: str = "Failed to get surface for rendering!") -> None:
        super().__init__(RenderErrorClass.SURFACE, message)


class BatchCancelledError(RenderError):
    """Cooperative cancellation was observed during a render."""

    def __init__(self, document_path: str | None = None) -> None:
        super().__init__(RenderErrorClass.CANCELLED, "Render cancelled", document_path)


class FatalSessionError(RenderError):
    """The batch session cannot continue."""

    def __init__(self, message: str) -> None:
        super().__init__(RenderErrorClass.FATAL, message)
