from PySide6.QtCore import QElapsedTimer


class HighResTimer:
    """Monotonic keystroke clock; stamps always strictly increase."""

    def __init__(self):
        self.t = QElapsedTimer()
        self._last = -1.0

    def start(self):
        self.t.start()
        self._last = -1.0

    def elapsed_sec(self) -> float:
        return max(0.0, self.t.nsecsElapsed() / 1e9)

    def stamp(self) -> float:
        now = self.elapsed_sec()
        if now <= self._last:
            now = self._last + 1e-6
        self._last = now
        return now
