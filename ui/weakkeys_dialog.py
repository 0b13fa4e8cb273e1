# ui/weakkeys_dialog.py
from PySide6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QSpinBox,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QFileDialog,
    QMessageBox,
)
import logging
import pyqtgraph as pg

from services.weakkeys import rank_digraphs
from utils.graph_helper import setup_bar_plot, update_bars
from utils.report_io import export_digraphs_csv

log = logging.getLogger(__name__)


def _show(key: str) -> str:
    return key.replace(" ", "␣").replace("\n", "↵")


class WeakSpotsDialog(QDialog):
    def __init__(self, report, parent=None):
        """
        report: SessionReport; shows its digraph ranking and per-finger errors
        """
        super().__init__(parent)
        self.setWindowTitle("Weak Spots")
        self.resize(720, 560)
        self._ranked = rank_digraphs(
            report.digraph_stats, limit=len(report.digraph_stats) or 1, min_occurrences=1
        )
        self._filtered = self._ranked[:]

        root = QVBoxLayout(self)

        # --- controls ---
        ctrl = QHBoxLayout()
        ctrl.addWidget(QLabel("Min occurrences:"))
        self.min_attempts = QSpinBox()
        self.min_attempts.setRange(1, 9999)
        self.min_attempts.setValue(2)
        self.min_attempts.valueChanged.connect(self._apply_filter)
        ctrl.addWidget(self.min_attempts)
        ctrl.addStretch(1)
        self.btn_export = QPushButton("Export CSV…")
        self.btn_export.clicked.connect(self._export_csv)
        ctrl.addWidget(self.btn_export)
        root.addLayout(ctrl)

        # --- finger load ---
        self.plot = pg.PlotWidget()
        self._bar = setup_bar_plot(self.plot, "Errors")
        fingers = [f for f in report.finger_load if f.keystrokes or f.errors]
        update_bars(self.plot, self._bar, [f.finger for f in fingers], [f.errors for f in fingers])
        root.addWidget(self.plot, stretch=2)

        w = report.weakness
        confusions = ", ".join(f"{k} ({n})" for k, n in list(w.finger_confusions.items())[:3]) or "none"
        slow = ", ".join(f"{_show(t.pair)} {t.mean_latency * 1000:.0f} ms" for t in w.slow_transitions[:5]) or "none"
        self.lblPatterns = QLabel(f"Finger mix-ups: {confusions}\nSlow transitions: {slow}", self)
        self.lblPatterns.setWordWrap(True)
        root.addWidget(self.lblPatterns)

        # --- digraph table ---
        self.table = QTableWidget(0, 4)
        self.table.setHorizontalHeaderLabels(["Digraph", "Errors", "Mean ms", "Count"])
        self.table.horizontalHeader().setStretchLastSection(True)
        root.addWidget(self.table, stretch=1)

        self._apply_filter()

    def _apply_filter(self):
        min_occ = self.min_attempts.value()
        self._filtered = [r for r in self._ranked if r.occurrences >= min_occ]
        self._render()

    def _render(self):
        self.table.setRowCount(len(self._filtered))
        for i, r in enumerate(self._filtered):
            self.table.setItem(i, 0, QTableWidgetItem(_show(r.key)))
            self.table.setItem(i, 1, QTableWidgetItem(str(r.error_count)))
            self.table.setItem(i, 2, QTableWidgetItem(f"{r.mean_latency * 1000:.0f}"))
            self.table.setItem(i, 3, QTableWidgetItem(str(r.occurrences)))

    def _export_csv(self):
        path, _ = QFileDialog.getSaveFileName(
            self, "Export Digraphs", "digraphs.csv", "CSV (*.csv)"
        )
        if not path:
            return
        try:
            export_digraphs_csv(self._filtered, path)
        except OSError as e:
            log.error("Digraph export failed: %s", e)
            QMessageBox.warning(self, "Export failed", str(e))
