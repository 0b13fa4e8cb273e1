# app/state.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class ErrorKind(str, Enum):
    SUBSTITUTION = "substitution"
    INSERTION = "insertion"
    OMISSION = "omission"
    REPEAT = "repeat"


class SessionStatus(str, Enum):
    ACTIVE = "active"
    FROZEN = "frozen"
    COMPLETED = "completed"


class SessionOutcome(str, Enum):
    COMPLETED = "completed"   # target fully and correctly typed
    ABORTED = "aborted"       # ended early by the user
    IN_PROGRESS = "in_progress"  # partial report of a running session


class HesitationKind(str, Enum):
    LONG_PAUSE = "long_pause"
    PUNCTUATION = "punctuation"
    CASE_CHANGE = "case_change"
    WORD_BOUNDARY = "word_boundary"
    OTHER = "other"


@dataclass(frozen=True)
class KeystrokeEvent:
    character: Optional[str]
    timestamp: float
    is_backspace: bool = False
    accepted: bool = True
    correct: bool = False
    position: int = 0


@dataclass(frozen=True)
class ErrorEvent:
    kind: ErrorKind
    position: int
    expected: Optional[str]
    actual: Optional[str]
    detected_at: float
    corrected_at: Optional[float] = None

    @property
    def corrected(self) -> bool:
        return self.corrected_at is not None

    @property
    def correction_latency(self) -> Optional[float]:
        if self.corrected_at is None:
            return None
        return self.corrected_at - self.detected_at


@dataclass
class KeyStat:
    occurrences: int = 0
    total_latency: float = 0.0
    error_count: int = 0
    timed: int = 0

    def add(self, latency: Optional[float], error: bool) -> None:
        self.occurrences += 1
        if latency is not None:
            self.total_latency += latency
            self.timed += 1
        if error:
            self.error_count += 1

    @property
    def mean_latency(self) -> float:
        return self.total_latency / self.timed if self.timed else 0.0


# Same running totals, keyed by an ordered character pair instead of a character.
DigraphStat = KeyStat


@dataclass(frozen=True)
class HesitationEvent:
    position: int
    pause_duration: float
    classification: HesitationKind
    character: str
    preceding: str = ""
    following: str = ""


@dataclass
class SessionState:
    target: str
    cursor: int = 0
    buffer: List[str] = field(default_factory=list)
    input_log: List[KeystrokeEvent] = field(default_factory=list)
    error_log: List[ErrorEvent] = field(default_factory=list)
    status: SessionStatus = SessionStatus.ACTIVE
    chars_since_error: int = 0
    outcome: Optional[SessionOutcome] = None
    last_outcome: Optional[str] = None
    ended_at: Optional[float] = None

    @property
    def outstanding_error(self) -> Optional[ErrorEvent]:
        if self.error_log and not self.error_log[-1].corrected:
            return self.error_log[-1]
        return None

    @property
    def last_timestamp(self) -> Optional[float]:
        return self.input_log[-1].timestamp if self.input_log else None

    def accepted_characters(self) -> List[KeystrokeEvent]:
        return [e for e in self.input_log if e.accepted and not e.is_backspace]


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view handed to the presentation layer."""
    cursor: int
    target_length: int
    typed: str
    status: SessionStatus
    last_outcome: Optional[str]
    chars_since_error: int
    freeze_threshold: int
    error_count: int
    uncorrected_errors: int
    keystrokes: int
    elapsed: float
    wpm: float
    accuracy: float
    error_span: Optional[Tuple[int, int]] = None

    @property
    def progress(self) -> float:
        return self.cursor / self.target_length if self.target_length else 0.0

