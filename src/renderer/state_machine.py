"""Batch and document render state machines."""

from enum import Enum, auto
from typing import ClassVar

import structlog


logger = structlog.get_logger()


class BatchState(Enum):
    """Batch session lifecycle states.

    State transitions:
        INACTIVE -> STARTING: begin() acquires a render surface
        STARTING -> ACTIVE: Surface attached and configured
        STARTING -> INACTIVE: Surface never attached or has no window
        ACTIVE -> INACTIVE: end() releases (or keeps) the surface
    """

    INACTIVE = auto()
    STARTING = auto()
    ACTIVE = auto()


class BatchStateError(Exception):
    """Raised when an invalid batch state transition is attempted."""

    def __init__(self, from_state: BatchState, to_state: BatchState) -> None:
        """Initialize the error.

        Args:
            from_state: The current state.
            to_state: The attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid batch state transition: {from_state.name} -> {to_state.name}"
        )


class BatchStateMachine:
    """State machine for the batch session lifecycle."""

    VALID_TRANSITIONS: ClassVar[dict[BatchState, set[BatchState]]] = {
        BatchState.INACTIVE: {BatchState.STARTING},
        BatchState.STARTING: {BatchState.ACTIVE, BatchState.INACTIVE},
        BatchState.ACTIVE: {BatchState.INACTIVE},
    }

    def __init__(self) -> None:
        """Initialize the state machine in INACTIVE state."""
        self._state = BatchState.INACTIVE

    @property
    def state(self) -> BatchState:
        """Get the current state."""
        return self._state

    def can_transition(self, to_state: BatchState) -> bool:
        return to_state in self.VALID_TRANSITIONS.get(self._state, set())

    def transition(self, to_state: BatchState) -> None:
        """Transition to a new state.

        Args:
            to_state: The target state.

        Raises:
            BatchStateError: If the transition is invalid.
        """
        if not self.can_transition(to_state):
            raise BatchStateError(self._state, to_state)
        self._state = to_state

    def is_inactive(self) -> bool:
        return self._state == BatchState.INACTIVE


class DocumentRenderState(Enum):
    """Per-document render lifecycle states.

    State transitions:
        PENDING -> LOADING: Document is being loaded into the surface
        PENDING -> RENDERING: Media documents skip loading
        LOADING -> RENDERING: View dispatched to its strategy
        RENDERING -> DONE: Content produced
        PENDING/LOADING/RENDERING -> FAILED: Stage failed for this document
        PENDING/LOADING/RENDERING -> CANCELLED: Cancellation observed
    """

    PENDING = auto()
    LOADING = auto()
    RENDERING = auto()
    DONE = auto()
    FAILED = auto()
    CANCELLED = auto()


class RenderStateError(Exception):
    """Raised when an invalid render state transition is attempted."""

    def __init__(
        self, from_state: DocumentRenderState, to_state: DocumentRenderState
    ) -> None:
        """Initialize the error.

        Args:
            from_state: The current state.
            to_state: The attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid render state transition: {from_state.name} -> {to_state.name}"
        )


_ABORT_STATES = {DocumentRenderState.FAILED, DocumentRenderState.CANCELLED}


class DocumentRenderStateMachine:
    """State machine for one document's render.

    Enforces valid state transitions during rendering.
    Logs invariant violations when invalid transitions are attempted.
    """

    VALID_TRANSITIONS: ClassVar[
        dict[DocumentRenderState, set[DocumentRenderState]]
    ] = {
        DocumentRenderState.PENDING: {
            DocumentRenderState.LOADING,
            DocumentRenderState.RENDERING,
            *_ABORT_STATES,
        },
        DocumentRenderState.LOADING: {DocumentRenderState.RENDERING, *_ABORT_STATES},
        DocumentRenderState.RENDERING: {DocumentRenderState.DONE, *_ABORT_STATES},
        DocumentRenderState.DONE: set(),  # Terminal state
        DocumentRenderState.FAILED: set(),  # Terminal state
        DocumentRenderState.CANCELLED: set(),  # Terminal state
    }

    def __init__(self, document_path: str) -> None:
        """Initialize the state machine in PENDING state.

        Args:
            document_path: Path of the document, for logging.
        """
        self._document_path = document_path
        self._state = DocumentRenderState.PENDING
        self._log = logger.bind(document=document_path, component="document_renderer")

    @property
    def state(self) -> DocumentRenderState:
        """Get the current state."""
        return self._state

    @property
    def document_path(self) -> str:
        return self._document_path

    def can_transition(self, to_state: DocumentRenderState) -> bool:
        """Check if a transition to the given state is valid.

        Args:
            to_state: The target state.

        Returns:
            True if the transition is valid, False otherwise.
        """
        return to_state in self.VALID_TRANSITIONS.get(self._state, set())

    def transition(self, to_state: DocumentRenderState) -> None:
        """Transition to a new state.

        Args:
            to_state: The target state.

        Raises:
            RenderStateError: If the transition is invalid.
        """
        if not self.can_transition(to_state):
            self._log.error(
                "invariant_violation",
                error_type="illegal_state_transition",
                from_state=self._state.name,
                to_state=to_state.name,
            )
            raise RenderStateError(self._state, to_state)

        old_state = self._state
        self._state = to_state
        self._log.debug(
            "render_state_transition",
            from_state=old_state.name,
            to_state=to_state.name,
        )

    def to_loading(self) -> None:
        self.transition(DocumentRenderState.LOADING)

    def to_rendering(self) -> None:
        self.transition(DocumentRenderState.RENDERING)

    def to_done(self) -> None:
        self.transition(DocumentRenderState.DONE)

    def to_failed(self) -> None:
        self.transition(DocumentRenderState.FAILED)

    def to_cancelled(self) -> None:
        self.transition(DocumentRenderState.CANCELLED)

    def is_terminal(self) -> bool:
        """Check if the current state is terminal."""
        return not self.VALID_TRANSITIONS[self._state]

    def is_done(self) -> bool:
        return self._state == DocumentRenderState.DONE
