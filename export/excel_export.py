"""Excel-Export der Platzvergabe (openpyxl)."""

from pathlib import Path

from analysis.result_interpreter import EXPORT_HEADER, PlacementReport
from analysis.solution_validator import count_by_semester
from config.defaults import NUM_PREFERENCES
from config.schema import PlacementConfig
from models.placement_data import PlacementData

from export.helpers import COLORS, rank_color, slot_usage, today_str


class ExcelExporter:
    """Exportiert einen PlacementReport in eine Excel-Datei mit 4 Sheets."""

    def __init__(
        self, report: PlacementReport, data: PlacementData, config: PlacementConfig
    ):
        self.report = report
        self.data   = data
        self.config = config

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path) -> None:
        """Erstellt die Excel-Datei mit allen Sheets."""
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        self._sheet_uebersicht(wb)
        self._sheet_zuweisungen(wb)
        self._sheet_nicht_platziert(wb)
        self._sheet_auslastung(wb)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _write_header(self, ws, row: int, headers: list[str]) -> None:
        from openpyxl.styles import Font
        fill_h = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, h in enumerate(headers, 1):
            c = ws.cell(row=row, column=col, value=h)
            c.fill = fill_h
            c.font = Font(bold=True, color="FFFFFF")
            c.border = border

    def _set_widths(self, ws, widths: list[float]) -> None:
        from openpyxl.utils import get_column_letter
        for col, width in enumerate(widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = width

    # ─── Sheet: Übersicht ─────────────────────────────────────────────────────

    def _sheet_uebersicht(self, wb) -> None:
        from openpyxl.styles import Font
        ws = wb.create_sheet(title="Übersicht", index=0)

        row = 1
        ws.cell(row=row, column=1, value=self.config.programme_name).font = Font(bold=True, size=14)
        row += 1
        ws.cell(row=row, column=1, value=f"Erstellt: {today_str()}")
        if self.config.academic_year:
            ws.cell(row=row, column=2, value=f"Jahr: {self.config.academic_year}")
        ws.cell(row=row, column=3, value=f"Status: {self.report.solver_status}")
        ws.cell(row=row, column=4, value=f"Zeit: {self.report.solve_time_seconds:.1f}s")
        row += 2

        self._write_header(ws, row, ["Kennzahl", "Wert"])
        row += 1
        per_semester = count_by_semester(self.report)
        figures: list[tuple[str, object]] = [
            (f"{rank}. Wahl", self.report.rank_counts.get(rank, 0))
            for rank in range(1, NUM_PREFERENCES + 1)
        ]
        figures += [
            ("Manuell außerhalb der Präferenzen",
             sum(1 for o in self.report.assignments if o.rank is None)),
            ("Nicht platziert", self.report.unmatched_count),
            ("Bewerbungen gesamt", self.report.total_students),
            ("Durchschnittliche Präferenz", round(self.report.average_preference, 3)),
        ]
        figures += [(f"Platziert {sem.label}", n) for sem, n in per_semester.items()]

        border = self._thin_border()
        for label, value in figures:
            ws.cell(row=row, column=1, value=label).border = border
            ws.cell(row=row, column=2, value=value).border = border
            row += 1

        self._set_widths(ws, [36, 14, 18, 14])

    # ─── Sheet: Zuweisungen ───────────────────────────────────────────────────

    def _sheet_zuweisungen(self, wb) -> None:
        ws = wb.create_sheet(title="Zuweisungen")
        self._write_header(ws, 1, EXPORT_HEADER)
        border = self._thin_border()
        pref_col = EXPORT_HEADER.index("Preference") + 1
        for row, record in enumerate(self.report.export_records, 2):
            for col, value in enumerate(record.as_row(), 1):
                ws.cell(row=row, column=col, value=value).border = border
            ws.cell(row=row, column=pref_col).fill = self._fill(rank_color(record.preference))
        ws.freeze_panes = "A2"
        self._set_widths(ws, [14, 14, 26, 36, 12, 10, 11, 36, 11, 10, 16])

    # ─── Sheet: Nicht platziert ───────────────────────────────────────────────

    def _sheet_nicht_platziert(self, wb) -> None:
        ws = wb.create_sheet(title="Nicht platziert")
        self._write_header(ws, 1, ["Application ID", "Student name", "Semester", "Preferences"])
        border = self._thin_border()
        fill = self._fill(COLORS["unmatched"])
        for row, o in enumerate(self.report.unmatched, 2):
            student = self.data.student(o.student_id)
            values = [
                o.student_id,
                student.full_name if student else "",
                o.semester.number,
                o.listed_count,
            ]
            for col, value in enumerate(values, 1):
                c = ws.cell(row=row, column=col, value=value)
                c.border = border
                if o.listed_count == 0:
                    c.fill = fill
        self._set_widths(ws, [14, 30, 10, 12])

    # ─── Sheet: Auslastung ────────────────────────────────────────────────────

    def _sheet_auslastung(self, wb) -> None:
        ws = wb.create_sheet(title="Auslastung")
        self._write_header(ws, 1, ["Slot", "Partner", "Semester", "Belegt", "Kapazität"])
        border = self._thin_border()
        full = self._fill(COLORS["full"])
        for row, (key, sem, used, capacity) in enumerate(slot_usage(self.report, self.data), 2):
            values = [str(key), self.data.catalog[key].partner_name, sem.number, used, capacity]
            for col, value in enumerate(values, 1):
                c = ws.cell(row=row, column=col, value=value)
                c.border = border
                if capacity and used >= capacity:
                    c.fill = full
        self._set_widths(ws, [16, 40, 10, 8, 10])
