"""Unit tests for batch and document render state machines."""

import pytest

from src.renderer.state_machine import (
    BatchState,
    BatchStateError,
    BatchStateMachine,
    DocumentRenderState,
    DocumentRenderStateMachine,
    RenderStateError,
)


class TestDocumentRenderStateMachine:
    """Tests for DocumentRenderStateMachine."""

    def test_initial_state_is_pending(self) -> None:
        """State machine starts in PENDING."""
        sm = DocumentRenderStateMachine("notes/a.md")
        assert sm.state == DocumentRenderState.PENDING
        assert sm.document_path == "notes/a.md"

    def test_full_successful_path(self) -> None:
        """PENDING -> LOADING -> RENDERING -> DONE."""
        sm = DocumentRenderStateMachine("a.md")
        sm.to_loading()
        sm.to_rendering()
        sm.to_done()
        assert sm.is_done()
        assert sm.is_terminal()

    def test_pending_can_skip_loading(self) -> None:
        """Media documents never load and go straight to RENDERING."""
        sm = DocumentRenderStateMachine("image.png")
        sm.to_rendering()
        assert sm.state == DocumentRenderState.RENDERING

    @pytest.mark.parametrize("steps", [0, 1, 2])
    def test_failure_from_any_active_state(self, steps: int) -> None:
        """Every non-terminal state can fail."""
        sm = DocumentRenderStateMachine("a.md")
        for advance in [sm.to_loading, sm.to_rendering][:steps]:
            advance()
        sm.to_failed()
        assert sm.state == DocumentRenderState.FAILED
        assert sm.is_terminal()
        assert not sm.is_done()

    def test_cancellation_from_loading(self) -> None:
        sm = DocumentRenderStateMachine("a.md")
        sm.to_loading()
        sm.to_cancelled()
        assert sm.state == DocumentRenderState.CANCELLED
        assert sm.is_terminal()

    def test_invalid_transition_pending_to_done(self) -> None:
        """Cannot go from PENDING directly to DONE."""
        sm = DocumentRenderStateMachine("a.md")
        with pytest.raises(RenderStateError) as exc_info:
            sm.to_done()
        assert exc_info.value.from_state == DocumentRenderState.PENDING
        assert exc_info.value.to_state == DocumentRenderState.DONE

    def test_terminal_states_reject_transitions(self) -> None:
        """No transition leaves a terminal state."""
        sm = DocumentRenderStateMachine("a.md")
        sm.to_failed()
        with pytest.raises(RenderStateError):
            sm.to_cancelled()

    def test_can_transition(self) -> None:
        sm = DocumentRenderStateMachine("a.md")
        assert sm.can_transition(DocumentRenderState.LOADING)
        assert not sm.can_transition(DocumentRenderState.DONE)


class TestBatchStateMachine:
    """Tests for BatchStateMachine."""

    def test_initial_state_is_inactive(self) -> None:
        sm = BatchStateMachine()
        assert sm.state == BatchState.INACTIVE
        assert sm.is_inactive()

    def test_begin_and_end_cycle(self) -> None:
        """INACTIVE -> STARTING -> ACTIVE -> INACTIVE."""
        sm = BatchStateMachine()
        sm.transition(BatchState.STARTING)
        sm.transition(BatchState.ACTIVE)
        assert not sm.is_inactive()
        sm.transition(BatchState.INACTIVE)
        assert sm.is_inactive()

    def test_failed_start_returns_to_inactive(self) -> None:
        sm = BatchStateMachine()
        sm.transition(BatchState.STARTING)
        sm.transition(BatchState.INACTIVE)
        assert sm.is_inactive()

    def test_cannot_activate_without_starting(self) -> None:
        sm = BatchStateMachine()
        with pytest.raises(BatchStateError) as exc_info:
            sm.transition(BatchState.ACTIVE)
        assert exc_info.value.from_state == BatchState.INACTIVE
        assert exc_info.value.to_state == BatchState.ACTIVE
