# services/typing_engine.py
from __future__ import annotations
from typing import Optional
import logging

from app import calculation
from app.config import SessionConfig
from app.errors import EmptyTargetError, InvalidKeystrokeError, SessionClosedError
from app.report import SessionReport
from app.state import (
    KeystrokeEvent,
    SessionOutcome,
    SessionSnapshot,
    SessionState,
    SessionStatus,
)
from services.analytics import build_report
from services.classifier import classify
from services.correction import CorrectionTracker
from services.timing import TimingRecorder

log = logging.getLogger(__name__)

_ALLOWED_CONTROL = ("\n", "\t")


class TypingSession:
    """
    One practice run against a fixed target text.

    All mutation goes through submit_character / submit_backspace / end_session.
    Timestamps are seconds on a monotonic clock and must strictly increase.
    """

    def __init__(self, target_text: str, config: Optional[SessionConfig] = None):
        if not target_text:
            raise EmptyTargetError("Target text is empty")
        self.config = config or SessionConfig()
        self.state = SessionState(target=target_text)
        self.tracker = CorrectionTracker(self.config.freeze_threshold)
        self.timing = TimingRecorder()
        self._report: Optional[SessionReport] = None

    @property
    def target(self) -> str:
        return self.state.target

    @property
    def status(self) -> SessionStatus:
        return self.state.status

    @property
    def is_finished(self) -> bool:
        return self.state.status is SessionStatus.COMPLETED

    @property
    def report(self) -> Optional[SessionReport]:
        return self._report

    def submit_character(self, ch: str, timestamp: float) -> str:
        """Feed one typed character. Returns the outcome label for the keystroke."""
        if not isinstance(ch, str) or len(ch) != 1:
            raise InvalidKeystrokeError(f"Expected a single character, got {ch!r}")
        if not ch.isprintable() and ch not in _ALLOWED_CONTROL:
            raise InvalidKeystrokeError(f"Control character {ch!r} is not typeable text")
        self._check_open(timestamp)
        st = self.state

        if st.status is SessionStatus.FROZEN:
            self._record(KeystrokeEvent(ch, timestamp, accepted=False, position=st.cursor))
            return self._outcome("rejected")

        if st.outstanding_error is not None:
            st.buffer.append(ch)
            self._record(KeystrokeEvent(ch, timestamp, position=st.cursor))
            self.tracker.on_blocked(st)
            return self._outcome("blocked")

        previous = st.buffer[-1] if st.buffer else None
        result = classify(st.target, st.cursor, ch, previous, self.config.lookahead)
        st.buffer.append(ch)
        self._record(KeystrokeEvent(ch, timestamp, correct=result.correct, position=st.cursor))
        if result.correct:
            st.cursor += 1
            if st.cursor == len(st.target):
                self._finish(SessionOutcome.COMPLETED, timestamp)
        else:
            self.tracker.on_classified(st, result, timestamp)
        return self._outcome(result.label)

    def submit_backspace(self, timestamp: float) -> str:
        self._check_open(timestamp)
        st = self.state
        self._record(KeystrokeEvent(None, timestamp, is_backspace=True, position=st.cursor))
        if not st.buffer:
            return self._outcome("backspace")
        st.buffer.pop()
        if st.outstanding_error is not None:
            if self.tracker.on_backspace(st, timestamp):
                return self._outcome("corrected")
        else:
            st.cursor = len(st.buffer)
        return self._outcome("backspace")

    def end_session(self, timestamp: Optional[float] = None) -> SessionReport:
        """Stop the session early. Always succeeds; repeated calls return the same report."""
        if self._report is None:
            self._finish(SessionOutcome.ABORTED, timestamp)
        return self._report

    def snapshot(self) -> SessionSnapshot:
        st, tm = self.state, self.timing
        error = st.outstanding_error
        typed = sum(k.occurrences for k in tm.key_stats.values())
        correct = tm.net_correct
        elapsed = tm.typing_time
        return SessionSnapshot(
            cursor=st.cursor,
            target_length=len(st.target),
            typed="".join(st.buffer),
            status=st.status,
            last_outcome=st.last_outcome,
            chars_since_error=st.chars_since_error,
            freeze_threshold=self.config.freeze_threshold,
            error_count=len(st.error_log),
            uncorrected_errors=1 if error is not None else 0,
            keystrokes=len(st.input_log),
            elapsed=elapsed,
            wpm=calculation.wpm(correct, elapsed),
            accuracy=calculation.accuracy(correct, typed),
            error_span=(st.cursor, len(st.buffer)) if error is not None else None,
        )

    def preview_report(self) -> SessionReport:
        """Report over the keystrokes so far, without ending the session."""
        if self._report is not None:
            return self._report
        return build_report(self.state, self.config)

    def _check_open(self, timestamp: float) -> None:
        if self.is_finished:
            raise SessionClosedError("Session has already completed")
        last = self.state.last_timestamp
        if last is not None and timestamp <= last:
            raise InvalidKeystrokeError(f"Timestamp {timestamp} does not follow {last}")

    def _record(self, event: KeystrokeEvent) -> None:
        self.state.input_log.append(event)
        self.timing.record(event)

    def _outcome(self, label: str) -> str:
        self.state.last_outcome = label
        return label

    def _finish(self, outcome: SessionOutcome, timestamp: Optional[float]) -> None:
        st = self.state
        last = st.last_timestamp
        if timestamp is None or (last is not None and timestamp < last):
            timestamp = last
        st.status = SessionStatus.COMPLETED
        st.outcome = outcome
        st.ended_at = timestamp
        self._report = build_report(st, self.config)
        log.info(
            "Session %s: %d/%d characters, %d errors",
            outcome.value, st.cursor, len(st.target), len(st.error_log),
        )
