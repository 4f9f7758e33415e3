"""CSV export for tempo curves and batch results."""

from __future__ import annotations

import csv
import io
import math
from pathlib import Path

from tempometer.analysis.models import FileResult, TempoCurvePoint

TEMPO_CURVE_HEADER = ("time_sec", "bpm", "confidence")
BATCH_HEADER = ("filename", "duration_sec", "bpm", "confidence")


def format_curve_row(point: TempoCurvePoint) -> list[str]:
    return [f"{point.time:.3f}", f"{point.bpm:.2f}", f"{point.confidence:.3f}"]


def tempo_curve_csv(points: list[TempoCurvePoint]) -> str:
    """Render a tempo curve as ``time_sec,bpm,confidence`` rows."""
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(TEMPO_CURVE_HEADER)
    writer.writerows(format_curve_row(p) for p in points)
    return out.getvalue()


def _fixed(value: float, digits: int) -> str:
    return f"{value:.{digits}f}" if math.isfinite(value) else ""


def _quoted(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def batch_results_csv(results: list[FileResult]) -> str:
    """Render batch results, one row per file.

    Filenames are always quoted; values that are not finite are left blank.
    """
    lines = [",".join(BATCH_HEADER)]
    for r in results:
        lines.append(",".join([
            _quoted(r.filename or ""),
            _fixed(r.duration, 3),
            _fixed(r.bpm, 2),
            _fixed(r.confidence, 6),
        ]))
    return "\n".join(lines) + "\n"


def write_csv(text: str, path: str | Path) -> None:
    Path(path).write_text(text, encoding="utf-8", newline="")
