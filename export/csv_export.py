"""CSV-Export der Zuweisungen (eine Zeile pro platzierter Bewerbung)."""

import csv
import io
from pathlib import Path

from analysis.result_interpreter import EXPORT_HEADER, PlacementReport


class CsvExporter:
    """Schreibt die Export-Zeilen eines PlacementReport als CSV."""

    def __init__(self, report: PlacementReport) -> None:
        self.report = report

    def rows(self) -> list[list]:
        return [list(EXPORT_HEADER)] + [r.as_row() for r in self.report.export_records]

    def to_string(self) -> str:
        buffer = io.StringIO()
        csv.writer(buffer, lineterminator="\n").writerows(self.rows())
        return buffer.getvalue()

    def export(self, output_path: Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8-sig", newline="") as f:
            csv.writer(f).writerows(self.rows())
