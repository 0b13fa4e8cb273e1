from core.threads import TextLoadWorker, Workers
from utils.file_handler import ChunkSize


def test_worker_released_after_loading(tmp_path):
    path = tmp_path / "practice.txt"
    path.write_text("Short practice text.\n", encoding="utf-8")
    worker = TextLoadWorker(str(path), ChunkSize.SMALL)
    loaded = []
    worker.signals.loaded.connect(lambda title, text: loaded.append((title, text)))

    Workers.track(worker)
    assert worker in Workers.active
    worker.run()

    assert loaded == [(str(path), "Short practice text.")]
    assert worker not in Workers.active


def test_worker_released_after_failure(tmp_path):
    worker = TextLoadWorker(str(tmp_path / "missing.txt"), ChunkSize.SMALL)
    failures = []
    worker.signals.failed.connect(failures.append)

    Workers.track(worker)
    worker.run()

    assert len(failures) == 1
    assert "missing.txt" in failures[0]
    assert worker not in Workers.active
