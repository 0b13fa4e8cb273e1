# core/threads.py
from typing import List

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

from app.errors import TextSourceError
from utils.file_handler import ChunkSize, load_inception, load_practice_text


class TextLoadWorkerSignals(QObject):
    loaded = Signal(str, str)   # (title, text)
    failed = Signal(str)


class TextLoadWorker(QRunnable):
    """Reads a file (or the inception source) and cuts a practice snippet off the GUI thread."""

    def __init__(self, path: str | None, size: ChunkSize = ChunkSize.MEDIUM):
        super().__init__()
        self.path = path
        self.size = size
        self.signals = TextLoadWorkerSignals()

    def run(self):
        try:
            if self.path is None:
                text = load_inception(self.size)
                title = "typing_engine.py (inception)"
            else:
                text = load_practice_text(self.path, self.size)
                title = self.path
            self.signals.loaded.emit(title, text)
        except TextSourceError as e:
            self.signals.failed.emit(str(e))


class Workers:
    pool = QThreadPool.globalInstance()
    # held until each worker emits loaded or failed
    active: List[TextLoadWorker] = []

    @classmethod
    def track(cls, worker: TextLoadWorker) -> None:
        cls.active.append(worker)

        def release(*_):
            if worker in cls.active:
                cls.active.remove(worker)

        worker.signals.loaded.connect(release)
        worker.signals.failed.connect(release)

    @classmethod
    def start(cls, worker: TextLoadWorker) -> None:
        cls.track(worker)
        cls.pool.start(worker)
