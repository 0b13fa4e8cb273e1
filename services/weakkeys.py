# services/weakkeys.py
from __future__ import annotations
from collections import Counter, defaultdict
from typing import Dict, Iterable, List, Sequence, Tuple

from app.keyboard_layout import FINGERS, UNKNOWN_FINGER, finger_for
from app.report import ErrorCluster, FingerLoad, KeyStatRecord, Transition
from app.state import ErrorEvent, KeyStat, KeystrokeEvent


def stat_records(stats: Dict[str, KeyStat]) -> List[KeyStatRecord]:
    return [
        KeyStatRecord(k, s.occurrences, s.total_latency, s.error_count, s.timed, s.mean_latency)
        for k, s in sorted(stats.items())
    ]


def rank_digraphs(
    records: Iterable[KeyStatRecord], limit: int = 10, min_occurrences: int = 2
) -> List[KeyStatRecord]:
    """Worst first: most errors, then slowest, then the best-sampled pair."""
    sampled = [r for r in records if r.occurrences >= min_occurrences]
    ranked = sorted(sampled, key=lambda r: (-r.error_count, -r.mean_latency, -r.occurrences, r.key))
    return ranked[:limit]


def error_clusters(errors: Sequence[ErrorEvent], gap: int = 10) -> List[ErrorCluster]:
    clusters: List[ErrorCluster] = []
    start = end = last = None
    count = 0
    for e in errors:
        if last is not None and abs(e.position - last) <= gap:
            start, end = min(start, e.position), max(end, e.position)
            count += 1
        else:
            if last is not None:
                clusters.append(ErrorCluster(start, end, count))
            start = end = e.position
            count = 1
        last = e.position
    if last is not None:
        clusters.append(ErrorCluster(start, end, count))
    return clusters


def rhythm_breaks(series: Sequence[Tuple[KeystrokeEvent, float]], floor: float = 0.4) -> List[int]:
    """Positions where a latency doubles the average of the five keystrokes before it."""
    out: List[int] = []
    for i in range(5, len(series)):
        moving_avg = sum(lat for _, lat in series[i - 5:i]) / 5
        event, latency = series[i]
        if latency > moving_avg * 2 and latency > floor:
            out.append(event.position)
    return out


def finger_load(key_stats: Dict[str, KeyStat], errors: Iterable[ErrorEvent]) -> List[FingerLoad]:
    keystrokes: Counter = Counter()
    timed: Counter = Counter()
    latency: Dict[str, float] = {}
    for ch, s in key_stats.items():
        finger = finger_for(ch)
        keystrokes[finger] += s.occurrences
        timed[finger] += s.timed
        latency[finger] = latency.get(finger, 0.0) + s.total_latency
    # blame the finger that should have struck the key
    missed = Counter(finger_for(e.expected if e.expected is not None else e.actual) for e in errors)

    out: List[FingerLoad] = []
    for finger in FINGERS + (UNKNOWN_FINGER,):
        if finger == UNKNOWN_FINGER and not (keystrokes[finger] or missed[finger]):
            continue
        total = latency.get(finger, 0.0)
        out.append(
            FingerLoad(
                finger=finger,
                keystrokes=keystrokes[finger],
                total_latency=total,
                mean_latency=total / timed[finger] if timed[finger] else 0.0,
                errors=missed[finger],
            )
        )
    return out


def finger_confusions(errors: Iterable[ErrorEvent]) -> Dict[str, int]:
    """Errors where a different finger struck than the one the target called for."""
    out: Counter = Counter()
    for e in errors:
        if e.expected is None or e.actual is None:
            continue
        expected, actual = finger_for(e.expected), finger_for(e.actual)
        if expected != actual:
            out[f"{expected} -> {actual}"] += 1
    return dict(sorted(out.items(), key=lambda kv: (-kv[1], kv[0])))


def slow_transitions(
    events: Iterable[KeystrokeEvent],
    threshold: float = 0.3,
    min_occurrences: int = 2,
    limit: int = 10,
) -> List[Transition]:
    """
    Key pairs in the order they were physically struck, erased keystrokes
    included, whose mean latency exceeds `threshold` seconds.
    """
    samples: Dict[str, List[float]] = defaultdict(list)
    prev = None
    for e in events:
        if e.is_backspace or not e.accepted:
            continue
        if prev is not None:
            samples[prev.character + e.character].append(e.timestamp - prev.timestamp)
        prev = e

    out = [
        Transition(pair, sum(lats) / len(lats), len(lats))
        for pair, lats in samples.items()
        if len(lats) >= min_occurrences
    ]
    out = [t for t in out if t.mean_latency > threshold]
    out.sort(key=lambda t: (-t.mean_latency, t.pair))
    return out[:limit]
