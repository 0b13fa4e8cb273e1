"""Shared pytest fixtures."""
from __future__ import annotations

import pytest

from app.config import SessionConfig
from services.typing_engine import TypingSession

BACKSPACE = "\b"


class Keyboard:
    """Feeds keystrokes into a session with evenly spaced timestamps."""

    def __init__(self, session: TypingSession, start: float = 0.0, step: float = 0.2):
        self.session = session
        self.t = start
        self.step = step

    def tick(self, gap: float | None = None) -> float:
        ts = self.t
        self.t += self.step if gap is None else gap
        return ts

    def type(self, keys, gap: float | None = None):
        outcomes = []
        for k in keys:
            if k == BACKSPACE:
                outcomes.append(self.session.submit_backspace(self.tick(gap)))
            else:
                outcomes.append(self.session.submit_character(k, self.tick(gap)))
        return outcomes

    def pause(self, seconds: float) -> None:
        self.t += seconds


@pytest.fixture
def make_session():
    def _make(text: str, **overrides) -> TypingSession:
        return TypingSession(text, SessionConfig().with_overrides(**overrides))
    return _make


@pytest.fixture
def keyboard():
    def _kb(session: TypingSession, start: float = 0.0, step: float = 0.2) -> Keyboard:
        return Keyboard(session, start, step)
    return _kb
