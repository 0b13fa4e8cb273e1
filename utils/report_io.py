from __future__ import annotations
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional
import csv
import json
import logging

from app.errors import ReportFormatError
from app.report import KeyStatRecord, SessionReport

log = logging.getLogger(__name__)


def report_to_json(report: SessionReport) -> str:
    return json.dumps(report.to_dict(), ensure_ascii=False, indent=2)


def report_from_json(text: str) -> SessionReport:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ReportFormatError(f"Report is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ReportFormatError("Report document must be a JSON object")
    return SessionReport.from_dict(data)


def save_report(report: SessionReport, directory: Path | str = ".", now: Optional[datetime] = None) -> Path:
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"typing_report_{stamp}.json"
    path.write_text(report_to_json(report), encoding="utf-8")
    log.info("Report exported to %s", path)
    return path


def load_report(path: Path | str) -> SessionReport:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ReportFormatError(f"Cannot read report {path}: {e}") from e
    return report_from_json(text)


def export_digraphs_csv(rows: Iterable[KeyStatRecord], path: Path | str) -> Path:
    """Digraph rows in the order given (normally ranked worst first)."""
    out = Path(path)
    with open(out, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["Digraph", "Occurrences", "Errors", "MeanLatencyMs"])
        for d in rows:
            w.writerow([d.key, d.occurrences, d.error_count, f"{d.mean_latency * 1000:.0f}"])
    return out
