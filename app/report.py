# app/report.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from app.errors import ReportFormatError
from app.state import ErrorEvent, ErrorKind, HesitationEvent, HesitationKind, SessionOutcome

SCHEMA_VERSION = 2


@dataclass(frozen=True)
class KeyStatRecord:
    key: str
    occurrences: int
    total_latency: float
    error_count: int
    timed: int
    mean_latency: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "occurrences": self.occurrences,
            "total_latency": self.total_latency,
            "error_count": self.error_count,
            "timed": self.timed,
            "mean_latency": self.mean_latency,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "KeyStatRecord":
        return cls(
            key=str(d["key"]),
            occurrences=int(d["occurrences"]),
            total_latency=float(d["total_latency"]),
            error_count=int(d["error_count"]),
            timed=int(d["timed"]),
            mean_latency=float(d["mean_latency"]),
        )


@dataclass(frozen=True)
class FingerLoad:
    finger: str
    keystrokes: int
    total_latency: float
    mean_latency: float
    errors: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "finger": self.finger,
            "keystrokes": self.keystrokes,
            "total_latency": self.total_latency,
            "mean_latency": self.mean_latency,
            "errors": self.errors,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FingerLoad":
        return cls(
            finger=str(d["finger"]),
            keystrokes=int(d["keystrokes"]),
            total_latency=float(d["total_latency"]),
            mean_latency=float(d["mean_latency"]),
            errors=int(d["errors"]),
        )


@dataclass(frozen=True)
class TrendBucket:
    start: float
    end: float
    correct_chars: int
    wpm: float

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start, "end": self.end, "correct_chars": self.correct_chars, "wpm": self.wpm}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TrendBucket":
        return cls(float(d["start"]), float(d["end"]), int(d["correct_chars"]), float(d["wpm"]))


@dataclass(frozen=True)
class RhythmSample:
    offset: float
    latency: float
    position: int
    character: str

    def to_dict(self) -> Dict[str, Any]:
        return {"offset": self.offset, "latency": self.latency, "position": self.position, "character": self.character}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "RhythmSample":
        return cls(float(d["offset"]), float(d["latency"]), int(d["position"]), str(d["character"]))


@dataclass(frozen=True)
class ErrorCluster:
    start: int
    end: int
    errors: int

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start, "end": self.end, "errors": self.errors}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ErrorCluster":
        return cls(int(d["start"]), int(d["end"]), int(d["errors"]))


@dataclass(frozen=True)
class Transition:
    """A pair of consecutively struck keys, in the order they were pressed."""
    pair: str
    mean_latency: float
    occurrences: int

    def to_dict(self) -> Dict[str, Any]:
        return {"pair": self.pair, "mean_latency": self.mean_latency, "occurrences": self.occurrences}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Transition":
        return cls(str(d["pair"]), float(d["mean_latency"]), int(d["occurrences"]))


@dataclass(frozen=True)
class WeaknessAnalysis:
    worst_digraphs: Tuple[KeyStatRecord, ...]
    error_clusters: Tuple[ErrorCluster, ...]
    rhythm_breaks: Tuple[int, ...]
    finger_confusions: Dict[str, int]          # "expected finger -> actual finger": count
    slow_transitions: Tuple[Transition, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "worst_digraphs": [d.to_dict() for d in self.worst_digraphs],
            "error_clusters": [c.to_dict() for c in self.error_clusters],
            "rhythm_breaks": list(self.rhythm_breaks),
            "finger_confusions": dict(self.finger_confusions),
            "slow_transitions": [t.to_dict() for t in self.slow_transitions],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WeaknessAnalysis":
        return cls(
            worst_digraphs=tuple(KeyStatRecord.from_dict(x) for x in d["worst_digraphs"]),
            error_clusters=tuple(ErrorCluster.from_dict(x) for x in d["error_clusters"]),
            rhythm_breaks=tuple(int(x) for x in d["rhythm_breaks"]),
            finger_confusions={str(k): int(v) for k, v in d["finger_confusions"].items()},
            slow_transitions=tuple(Transition.from_dict(x) for x in d["slow_transitions"]),
        )


@dataclass(frozen=True)
class ReportSummary:
    outcome: SessionOutcome
    target_length: int
    final_cursor: int
    duration: float                 # first keystroke to session end
    typing_time: float              # first to last accepted keystroke
    total_keystrokes: int
    typed_characters: int
    correct_characters: int
    backspaces: int
    rejected_keystrokes: int
    wpm: float
    accuracy: float
    average_latency: float
    error_counts: Dict[str, int]
    total_errors: int
    uncorrected_errors: int
    mean_correction_latency: Optional[float]
    median_correction_latency: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "target_length": self.target_length,
            "final_cursor": self.final_cursor,
            "duration": self.duration,
            "typing_time": self.typing_time,
            "total_keystrokes": self.total_keystrokes,
            "typed_characters": self.typed_characters,
            "correct_characters": self.correct_characters,
            "backspaces": self.backspaces,
            "rejected_keystrokes": self.rejected_keystrokes,
            "wpm": self.wpm,
            "accuracy": self.accuracy,
            "average_latency": self.average_latency,
            "error_counts": dict(self.error_counts),
            "total_errors": self.total_errors,
            "uncorrected_errors": self.uncorrected_errors,
            "mean_correction_latency": self.mean_correction_latency,
            "median_correction_latency": self.median_correction_latency,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ReportSummary":
        return cls(
            outcome=SessionOutcome(d["outcome"]),
            target_length=int(d["target_length"]),
            final_cursor=int(d["final_cursor"]),
            duration=float(d["duration"]),
            typing_time=float(d["typing_time"]),
            total_keystrokes=int(d["total_keystrokes"]),
            typed_characters=int(d["typed_characters"]),
            correct_characters=int(d["correct_characters"]),
            backspaces=int(d["backspaces"]),
            rejected_keystrokes=int(d["rejected_keystrokes"]),
            wpm=float(d["wpm"]),
            accuracy=float(d["accuracy"]),
            average_latency=float(d["average_latency"]),
            error_counts={str(k): int(v) for k, v in d["error_counts"].items()},
            total_errors=int(d["total_errors"]),
            uncorrected_errors=int(d["uncorrected_errors"]),
            mean_correction_latency=_opt_float(d["mean_correction_latency"]),
            median_correction_latency=_opt_float(d["median_correction_latency"]),
        )


@dataclass(frozen=True)
class SessionReport:
    summary: ReportSummary
    errors: Tuple[ErrorEvent, ...]
    key_stats: Tuple[KeyStatRecord, ...]
    digraph_stats: Tuple[KeyStatRecord, ...]
    hesitations: Tuple[HesitationEvent, ...]
    finger_load: Tuple[FingerLoad, ...]
    trend: Tuple[TrendBucket, ...]
    weakness: WeaknessAnalysis
    rhythm: Tuple[RhythmSample, ...]
    schema_version: int = SCHEMA_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "summary": self.summary.to_dict(),
            "errors": [error_to_dict(e) for e in self.errors],
            "key_stats": [k.to_dict() for k in self.key_stats],
            "digraph_stats": [k.to_dict() for k in self.digraph_stats],
            "hesitations": [hesitation_to_dict(h) for h in self.hesitations],
            "finger_load": [f.to_dict() for f in self.finger_load],
            "trend": [b.to_dict() for b in self.trend],
            "weakness": self.weakness.to_dict(),
            "rhythm": [r.to_dict() for r in self.rhythm],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SessionReport":
        try:
            version = int(d["schema_version"])
            if version != SCHEMA_VERSION:
                raise ReportFormatError(f"Unsupported report schema version {version}")
            return cls(
                summary=ReportSummary.from_dict(d["summary"]),
                errors=tuple(error_from_dict(e) for e in d["errors"]),
                key_stats=tuple(KeyStatRecord.from_dict(k) for k in d["key_stats"]),
                digraph_stats=tuple(KeyStatRecord.from_dict(k) for k in d["digraph_stats"]),
                hesitations=tuple(hesitation_from_dict(h) for h in d["hesitations"]),
                finger_load=tuple(FingerLoad.from_dict(f) for f in d["finger_load"]),
                trend=tuple(TrendBucket.from_dict(b) for b in d["trend"]),
                weakness=WeaknessAnalysis.from_dict(d["weakness"]),
                rhythm=tuple(RhythmSample.from_dict(r) for r in d["rhythm"]),
                schema_version=version,
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ReportFormatError(f"Malformed session report: {e!r}") from e


def error_to_dict(e: ErrorEvent) -> Dict[str, Any]:
    return {
        "kind": e.kind.value,
        "position": e.position,
        "expected": e.expected,
        "actual": e.actual,
        "detected_at": e.detected_at,
        "corrected_at": e.corrected_at,
    }


def error_from_dict(d: Dict[str, Any]) -> ErrorEvent:
    return ErrorEvent(
        kind=ErrorKind(d["kind"]),
        position=int(d["position"]),
        expected=d["expected"],
        actual=d["actual"],
        detected_at=float(d["detected_at"]),
        corrected_at=_opt_float(d["corrected_at"]),
    )


def hesitation_to_dict(h: HesitationEvent) -> Dict[str, Any]:
    return {
        "position": h.position,
        "pause_duration": h.pause_duration,
        "classification": h.classification.value,
        "character": h.character,
        "preceding": h.preceding,
        "following": h.following,
    }


def hesitation_from_dict(d: Dict[str, Any]) -> HesitationEvent:
    return HesitationEvent(
        position=int(d["position"]),
        pause_duration=float(d["pause_duration"]),
        classification=HesitationKind(d["classification"]),
        character=str(d["character"]),
        preceding=str(d["preceding"]),
        following=str(d["following"]),
    )


def _opt_float(v: Any) -> Optional[float]:
    return None if v is None else float(v)
