# ui/main_window.py
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QFileDialog, QMessageBox, QPushButton, QLabel
)
from PySide6.QtCore import Qt
import logging

from app.config import SessionConfig
from ui.test_ui import TestUI
from ui.weakkeys_dialog import WeakSpotsDialog
from ui.widgets.session_dialog import SessionDialog
from utils.file_handler import ChunkSize, load_default_text
from core.threads import TextLoadWorker, Workers

log = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, config: SessionConfig, text: str, title: str = "Built-in text",
                 size: ChunkSize = ChunkSize.MEDIUM):
        super().__init__()
        self.setWindowTitle("Typedrill")
        self.resize(1200, 720)
        self.config = config
        self.size_choice = size
        self.last_report = None

        root = QWidget(self)
        root_v = QVBoxLayout(root)
        root_v.setContentsMargins(16, 40, 16, 16)
        root_v.setSpacing(24)
        self._build_top_bar(root_v)

        self.test = TestUI(self)
        self.test.finished.connect(self._on_test_finished)

        test_h = QHBoxLayout()
        test_h.addStretch(1)
        test_h.addWidget(self.test, 1)
        test_h.addStretch(1)
        root_v.addLayout(test_h, 1)
        self.setCentralWidget(root)

        # TestUI must keep keyboard focus
        self.setFocusPolicy(Qt.NoFocus)
        self.menuBar().setVisible(False)
        self._start(title, text)

    # ---------------- Top Bar ----------------
    def _build_top_bar(self, parent_layout):
        bar = QWidget(self)
        bar.setObjectName("TopBar")
        h = QHBoxLayout(bar)
        h.setContentsMargins(14, 16, 14, 16)
        h.setSpacing(10)

        for label, slot in (
            ("Session…", self._open_session),
            ("Weak spots…", self._open_weak_spots),
            ("Load text…", self._on_load),
            ("Restart", self._restart),
        ):
            btn = QPushButton(label, bar)
            btn.clicked.connect(slot)
            btn.setObjectName("TopBtn")
            btn.setFocusPolicy(Qt.NoFocus)
            h.addWidget(btn)

        h.addStretch(1)
        self.lblSource = QLabel("", bar)
        h.addWidget(self.lblSource)
        parent_layout.addWidget(bar)

    def _start(self, title: str, text: str):
        self.lblSource.setText(title)
        self.test.start_test(text, self.config)

    def _restart(self):
        self.test.restart()

    def _open_session(self):
        dlg = SessionDialog(self.config, self.size_choice, parent=self)
        if not dlg.exec():
            self.test.setFocus()
            return
        self.config = dlg.config
        self.size_choice = dlg.size
        if dlg.source == SessionDialog.SOURCES[1]:
            self._start("Built-in text", load_default_text())
        elif dlg.source == SessionDialog.SOURCES[2]:
            self._load_async(None)
        else:
            self._start(self.lblSource.text(), self.test.current_text)

    def _on_load(self):
        path, _ = QFileDialog.getOpenFileName(self, "Load practice text", "", "Text and code (*.*)")
        if path:
            self._load_async(path)
        else:
            self.test.setFocus()

    def _load_async(self, path):
        worker = TextLoadWorker(path, self.size_choice)
        worker.signals.loaded.connect(self._start)
        worker.signals.failed.connect(self._on_load_failed)
        Workers.start(worker)

    def _on_load_failed(self, message: str):
        log.error("Text load failed: %s", message)
        QMessageBox.warning(self, "Load failed", message)
        self.test.setFocus()

    def _on_test_finished(self, report):
        self.last_report = report
        s = report.summary
        log.info("Session finished (%s): %.1f WPM, %.1f%% accuracy", s.outcome.value, s.wpm, s.accuracy * 100)

    def _open_weak_spots(self):
        if self.last_report is None:
            QMessageBox.information(self, "Weak spots", "Finish a session first.")
            return
        WeakSpotsDialog(self.last_report, parent=self).exec()
        self.test.setFocus()
