# services/correction.py
from __future__ import annotations
from dataclasses import replace
import logging

from app.state import ErrorEvent, SessionState, SessionStatus
from services.classifier import Classification

log = logging.getLogger(__name__)


class CorrectionTracker:
    """Opens and resolves error events and decides when input freezes."""

    def __init__(self, threshold: int):
        self.threshold = threshold

    def on_classified(self, state: SessionState, result: Classification, ts: float) -> None:
        if result.correct:
            return
        if state.outstanding_error is not None:
            self.on_blocked(state)
            return
        state.error_log.append(
            ErrorEvent(
                kind=result.kind,
                position=result.position,
                expected=result.expected,
                actual=result.actual,
                detected_at=ts,
            )
        )
        state.chars_since_error = 0
        log.debug("%s at %d: expected %r, got %r", result.kind.value, result.position, result.expected, result.actual)
        self._check_freeze(state)

    def on_blocked(self, state: SessionState) -> None:
        """A character typed while an earlier error is still uncorrected."""
        state.chars_since_error += 1
        self._check_freeze(state)

    def on_backspace(self, state: SessionState, ts: float) -> bool:
        """
        Call after the buffer has been popped. Marks the outstanding error
        corrected once the buffer again equals the target prefix.
        """
        error = state.outstanding_error
        if error is None or len(state.buffer) > state.cursor:
            return False
        state.error_log[-1] = replace(error, corrected_at=ts)
        state.chars_since_error = 0
        if state.status is SessionStatus.FROZEN:
            state.status = SessionStatus.ACTIVE
            log.info("Error at %d corrected, input resumed", error.position)
        return True

    def _check_freeze(self, state: SessionState) -> None:
        if state.status is SessionStatus.ACTIVE and state.chars_since_error >= self.threshold:
            state.status = SessionStatus.FROZEN
            log.info(
                "Input frozen: %d characters typed past uncorrected error at %d",
                state.chars_since_error, state.outstanding_error.position,
            )
