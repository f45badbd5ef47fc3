"""Renderer metrics collection."""

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class RendererMetrics:
    """Metrics for the batch render pipeline.

    Collects documents_rendered_total, document_failures_total,
    cancellations_total and stage timeout counters.
    """

    _documents_rendered_total: int = 0
    _document_failures_total: int = 0
    _cancellations_total: int = 0
    _critical_timeouts_total: int = 0
    _best_effort_timeouts_total: int = 0
    _canvases_snapshotted: int = 0
    _canvases_dropped: int = 0
    _batches_started: int = 0
    _document_durations: dict[str, float] = field(default_factory=dict)

    _instance: ClassVar["RendererMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "RendererMetrics":
        """Get or create the singleton instance.

        Returns:
            The singleton RendererMetrics instance.
        """
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance for testing."""
        cls._instance = None

    def record_document_rendered(self, path: str, duration_ms: float) -> None:
        """Record a successfully rendered document.

        Args:
            path: Document path.
            duration_ms: Render duration in milliseconds.
        """
        self._documents_rendered_total += 1
        self._document_durations[path] = duration_ms

    def record_failure(self) -> None:
        """Record a failed document render."""
        self._document_failures_total += 1

    def record_cancellation(self) -> None:
        """Record a render aborted by cancellation."""
        self._cancellations_total += 1

    def record_stage_timeout(self, critical: bool) -> None:
        """Record a polled stage that timed out.

        Args:
            critical: Whether the timeout failed the document.
        """
        if critical:
            self._critical_timeouts_total += 1
        else:
            self._best_effort_timeouts_total += 1

    def record_canvas_snapshot(self, dropped: bool = False) -> None:
        """Record a live canvas conversion.

        Args:
            dropped: Whether the snapshot was degenerate and dropped.
        """
        if dropped:
            self._canvases_dropped += 1
        else:
            self._canvases_snapshotted += 1

    def record_batch_started(self) -> None:
        """Record a batch session opening."""
        self._batches_started += 1

    @property
    def documents_rendered_total(self) -> int:
        """Get total documents rendered."""
        return self._documents_rendered_total

    @property
    def document_failures_total(self) -> int:
        """Get total document failures."""
        return self._document_failures_total

    @property
    def cancellations_total(self) -> int:
        """Get total cancellations."""
        return self._cancellations_total

    @property
    def critical_timeouts_total(self) -> int:
        return self._critical_timeouts_total

    @property
    def best_effort_timeouts_total(self) -> int:
        return self._best_effort_timeouts_total

    def get_summary(self) -> dict[str, object]:
        """Get metrics summary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "documents_rendered_total": self._documents_rendered_total,
            "document_failures_total": self._document_failures_total,
            "cancellations_total": self._cancellations_total,
            "critical_timeouts_total": self._critical_timeouts_total,
            "best_effort_timeouts_total": self._best_effort_timeouts_total,
            "canvases_snapshotted": self._canvases_snapshotted,
            "canvases_dropped": self._canvases_dropped,
            "batches_started": self._batches_started,
            "document_durations": dict(self._document_durations),
        }
