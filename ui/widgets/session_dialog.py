# ui/widgets/session_dialog.py
from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout,
    QLabel, QPushButton, QComboBox, QSpinBox
)

from app.config import SessionConfig
from utils.file_handler import ChunkSize


class SessionDialog(QDialog):
    SOURCES = ("Current text", "Built-in text", "Inception (engine source)")

    def __init__(self, config: SessionConfig, size: ChunkSize, parent=None):
        super().__init__(parent)
        self.setWindowTitle("New Session")
        self.setFixedSize(340, 260)
        self._base = config

        layout = QVBoxLayout(self)
        layout.setSpacing(14)

        layout.addWidget(QLabel("Characters allowed after an error:", self))
        self.spin_threshold = QSpinBox(self)
        self.spin_threshold.setRange(0, 99)
        self.spin_threshold.setValue(config.freeze_threshold)
        layout.addWidget(self.spin_threshold)

        layout.addWidget(QLabel("Snippet size:", self))
        self.cmb_size = QComboBox(self)
        self.cmb_size.addItems([s.value for s in ChunkSize])
        self.cmb_size.setCurrentText(size.value)
        layout.addWidget(self.cmb_size)

        layout.addWidget(QLabel("Text source:", self))
        self.cmb_source = QComboBox(self)
        self.cmb_source.addItems(self.SOURCES)
        layout.addWidget(self.cmb_source)

        # Buttons
        row = QHBoxLayout()
        btn_start = QPushButton("Start", self)
        btn_start.clicked.connect(self.accept)
        btn_cancel = QPushButton("Cancel", self)
        btn_cancel.clicked.connect(self.reject)
        row.addWidget(btn_start)
        row.addWidget(btn_cancel)

        layout.addStretch(1)
        layout.addLayout(row)

    @property
    def config(self) -> SessionConfig:
        return self._base.with_overrides(freeze_threshold=self.spin_threshold.value())

    @property
    def size(self) -> ChunkSize:
        return ChunkSize(self.cmb_size.currentText())

    @property
    def source(self) -> str:
        return self.cmb_source.currentText()
