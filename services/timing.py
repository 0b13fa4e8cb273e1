# services/timing.py
from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Tuple
import unicodedata

from app.config import SessionConfig
from app.state import DigraphStat, HesitationEvent, HesitationKind, KeyStat, KeystrokeEvent


class TimingRecorder:
    """
    Running latency aggregates, updated as each keystroke lands.

    Mirrors the input buffer so that a backspace can take back what the
    erased character contributed: a correct character that gets erased no
    longer counts as correct, and digraphs pair each character with the one
    it actually follows in the typed text.
    """

    def __init__(self):
        self.key_stats: Dict[str, KeyStat] = {}
        self.digraph_stats: Dict[str, DigraphStat] = {}
        self.latencies: List[float] = []
        # one flag per accepted character: correct and never erased
        self.kept_correct: List[bool] = []
        self.net_correct = 0
        self.backspaces = 0
        self.rejected = 0
        self.first_ts: Optional[float] = None
        self._last_ts: Optional[float] = None
        # (index into kept_correct, character, digraph) per buffered character
        self._buffer: List[Tuple[int, str, Optional[str]]] = []

    @property
    def typing_time(self) -> float:
        if self.first_ts is None:
            return 0.0
        return self._last_ts - self.first_ts

    def record(self, event: KeystrokeEvent) -> Optional[float]:
        """Returns the inter-keystroke latency for accepted characters."""
        if event.is_backspace:
            self.backspaces += 1
            self._erase()
            return None
        if not event.accepted:
            self.rejected += 1
            return None

        latency = None if self._last_ts is None else event.timestamp - self._last_ts
        error = not event.correct
        self.key_stats.setdefault(event.character, KeyStat()).add(latency, error)
        pair = None
        if self._buffer:
            pair = self._buffer[-1][1] + event.character
            self.digraph_stats.setdefault(pair, DigraphStat()).add(latency, error)
        if latency is not None:
            self.latencies.append(latency)
        else:
            self.first_ts = event.timestamp
        self._last_ts = event.timestamp

        self._buffer.append((len(self.kept_correct), event.character, pair))
        self.kept_correct.append(event.correct)
        if event.correct:
            self.net_correct += 1
        return latency

    def _erase(self) -> None:
        if not self._buffer:
            return
        idx, ch, pair = self._buffer.pop()
        if not self.kept_correct[idx]:
            return
        # an erased correct character is charged as an error on its key
        self.kept_correct[idx] = False
        self.net_correct -= 1
        self.key_stats[ch].error_count += 1
        if pair is not None:
            self.digraph_stats[pair].error_count += 1


def latency_series(events: Iterable[KeystrokeEvent]) -> List[Tuple[KeystrokeEvent, float]]:
    """Accepted character keystrokes paired with the delay since the previous one."""
    out: List[Tuple[KeystrokeEvent, float]] = []
    last_ts: Optional[float] = None
    for e in events:
        if e.is_backspace or not e.accepted:
            continue
        if last_ts is not None:
            out.append((e, e.timestamp - last_ts))
        last_ts = e.timestamp
    return out


def _is_punct(ch: str) -> bool:
    return bool(ch) and unicodedata.category(ch).startswith("P")


def classify_pause(ch: str, prev: str, pause: float, long_pause: float) -> HesitationKind:
    if _is_punct(ch) or _is_punct(prev):
        return HesitationKind.PUNCTUATION
    if ch.isalpha() and prev.isalpha() and ch.isupper() != prev.isupper():
        return HesitationKind.CASE_CHANGE
    if prev.isspace():
        return HesitationKind.WORD_BOUNDARY
    if pause > long_pause:
        return HesitationKind.LONG_PAUSE
    return HesitationKind.OTHER


def detect_hesitations(
    events: Iterable[KeystrokeEvent], target: str, config: SessionConfig
) -> List[HesitationEvent]:
    out: List[HesitationEvent] = []
    for e, latency in latency_series(events):
        if latency <= config.pause_threshold:
            continue
        pos = e.position
        ch = target[pos] if pos < len(target) else e.character
        prev = target[pos - 1] if 0 < pos <= len(target) else ""
        out.append(
            HesitationEvent(
                position=pos,
                pause_duration=latency,
                classification=classify_pause(ch, prev, latency, config.long_pause_threshold),
                character=e.character,
                preceding=target[max(0, pos - 3):pos],
                following=target[pos + 1:pos + 4],
            )
        )
    return out
