from typing import List, Optional, Sequence, Tuple
import statistics


def wpm(correct_chars: int, seconds: float) -> float:
    # WPM = (correct_chars / 5) / (elapsed minutes)
    if seconds <= 0:
        return 0.0
    return (correct_chars / 5.0) / (seconds / 60.0)


def accuracy(correct_chars: int, typed_chars: int) -> float:
    if typed_chars <= 0:
        return 1.0
    return max(0.0, min(1.0, correct_chars / typed_chars))


def mean(values: Sequence[float]) -> float:
    return statistics.fmean(values) if values else 0.0


def median(values: Sequence[float]) -> Optional[float]:
    return statistics.median(values) if values else None


def bucket_wpm(
    correct_flags: List[bool], timestamps: List[float], width: float
) -> List[Tuple[float, float, int, float]]:
    """
    Fixed-width WPM windows over the session timeline.
    Returns (start, end, correct chars, wpm) per bucket, offsets relative to the
    first timestamp. Every bucket uses the full width as its duration, so the
    last one reads low when the session stops mid-window.
    """
    if not timestamps:
        return []
    t0 = timestamps[0]
    span = timestamps[-1] - t0
    count = int(span // width) + 1
    correct = [0] * count
    for ok, t in zip(correct_flags, timestamps):
        if ok:
            correct[min(count - 1, int((t - t0) // width))] += 1
    return [
        (i * width, (i + 1) * width, c, wpm(c, width))
        for i, c in enumerate(correct)
    ]


def smooth(values: List[float], factor: float = 0.25) -> List[float]:
    out, last = [], None
    for v in values:
        last = v if last is None else last + factor * (v - last)
        out.append(last)
    return out
