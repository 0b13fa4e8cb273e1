# services/classifier.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from app.state import ErrorKind


@dataclass(frozen=True)
class Classification:
    kind: Optional[ErrorKind]          # None means the keystroke was correct
    position: int
    expected: Optional[str]
    actual: str

    @property
    def correct(self) -> bool:
        return self.kind is None

    @property
    def label(self) -> str:
        return "correct" if self.kind is None else self.kind.value


def classify(
    target: str,
    cursor: int,
    ch: str,
    previous: Optional[str] = None,
    lookahead: int = 3,
) -> Classification:
    """
    Classify one keystroke typed at `cursor`.

    Categories overlap, so the first matching rule wins:
    correct, repeat of the previous character, omission (matches the next
    target character), insertion (past the end of the target, or matches a
    character 2..lookahead positions ahead), substitution.
    """
    expected = target[cursor] if cursor < len(target) else None

    if ch == expected:
        return Classification(None, cursor, expected, ch)
    if previous is not None and ch == previous:
        return Classification(ErrorKind.REPEAT, cursor, expected, ch)
    if cursor + 1 < len(target) and ch == target[cursor + 1]:
        return Classification(ErrorKind.OMISSION, cursor, expected, ch)
    if expected is None or ch in target[cursor + 2:cursor + lookahead + 1]:
        return Classification(ErrorKind.INSERTION, cursor, expected, ch)
    return Classification(ErrorKind.SUBSTITUTION, cursor, expected, ch)
