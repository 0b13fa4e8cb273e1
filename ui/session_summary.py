# ui/session_summary.py
from __future__ import annotations
import logging

from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QGridLayout, QLabel, QPushButton, QFileDialog, QMessageBox,
)
import pyqtgraph as pg

from app.calculation import smooth
from app.report import SessionReport
from app.state import SessionOutcome
from ui.weakkeys_dialog import WeakSpotsDialog
from utils.graph_helper import setup_wpm_plot, update_curve
from utils.report_io import save_report

log = logging.getLogger(__name__)


def _ms(seconds: float | None) -> str:
    return "n/a" if seconds is None else f"{seconds * 1000:.0f} ms"


class SessionSummary(QDialog):
    """
    Final stats plus the bucketed WPM trend.
    The trend is lightly smoothed for display only; exports keep the raw buckets.
    """

    def __init__(self, report: SessionReport, parent=None):
        super().__init__(parent)
        self.report = report
        s = report.summary
        title = "Session complete" if s.outcome is SessionOutcome.COMPLETED else "Session ended early"
        self.setWindowTitle(title)
        self.resize(760, 520)

        root = QVBoxLayout(self)
        grid = QGridLayout()
        rows = [
            ("WPM", f"{s.wpm:.1f}"),
            ("Accuracy", f"{s.accuracy * 100:.1f}%"),
            ("Time", f"{s.typing_time:.1f}s"),
            ("Progress", f"{s.final_cursor}/{s.target_length}"),
            ("Average latency", _ms(s.average_latency)),
            ("Errors", ", ".join(f"{k} {v}" for k, v in s.error_counts.items())),
            ("Uncorrected", str(s.uncorrected_errors)),
            ("Correction latency", f"mean {_ms(s.mean_correction_latency)}, median {_ms(s.median_correction_latency)}"),
            ("Hesitations", str(len(report.hesitations))),
        ]
        for i, (name, value) in enumerate(rows):
            grid.addWidget(QLabel(name + ":"), i // 2, (i % 2) * 2)
            grid.addWidget(QLabel(value), i // 2, (i % 2) * 2 + 1)
        root.addLayout(grid)

        plot = pg.PlotWidget()
        curve = setup_wpm_plot(plot, "#c8c8ff")
        mids = [(b.start + b.end) / 2.0 for b in report.trend]
        update_curve(curve, mids, smooth([b.wpm for b in report.trend], factor=0.5))
        root.addWidget(plot, stretch=1)

        row = QHBoxLayout()
        btn_export = QPushButton("Export JSON…", self)
        btn_export.clicked.connect(self._export)
        row.addWidget(btn_export)
        btn_weak = QPushButton("Weak spots…", self)
        btn_weak.clicked.connect(self._open_weak_spots)
        row.addWidget(btn_weak)
        row.addStretch(1)
        btn = QPushButton("OK", self)
        btn.clicked.connect(self.accept)
        row.addWidget(btn)
        root.addLayout(row)

    def _export(self):
        directory = QFileDialog.getExistingDirectory(self, "Export report to")
        if not directory:
            return
        try:
            path = save_report(self.report, directory)
        except OSError as e:
            log.error("Report export failed: %s", e)
            QMessageBox.warning(self, "Export failed", str(e))
            return
        QMessageBox.information(self, "Report exported", str(path))

    def _open_weak_spots(self):
        WeakSpotsDialog(self.report, parent=self).exec()
