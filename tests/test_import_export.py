"""Tests für Tabellen-Import (.csv/.xlsx) sowie CSV- und Excel-Export."""

import csv

import pytest

from analysis.result_interpreter import EXPORT_HEADER, interpret
from config.schema import CatalogConfig, PlacementConfig
from data.table_import import (
    ApplicantImporter,
    UniversityImporter,
    load_placement_data,
    load_universities,
)
from export import CsvExporter, ExcelExporter
from models.enums import Enrollment, Faculty, Semester, StudyLevel
from models.errors import TableImportError
from models.keys import ArcKey, SlotKey

from helpers import mixed_data

UNI_HEADER = [
    "ID", "Host country", "Partner institution", "Abbr. of study field",
    "Study field", "Agreement type", "Total #", "Max # BSc",
    "Nr of agreed spots in 1st sem.",
    "The maximum number of spots/seats for EEMCS",
]
UNI_ROWS = [
    ["101", "NL", "Uni A", "CS", "Computer Science", "Exchange", "2", "1", "", "1"],
    ["102", "DE", "Uni B", "CS", "Computer Science", "Exchange I", "1", "", "1", ""],
    ["103", "FR", "Uni C", "CS", "Computer Science", "Exchange", "abc", "", "", ""],
    ["Total", "", "", "", "", "", "3", "", "", ""],
]

APP_HEADER = [
    "ID of application", "Student number", "First name(s)", "Last name",
    "Abbreviation of study field", "Study field", "Study level", "Semester",
    "Agreement-ID 1st choice", "Agreement-ID 2nd choice",
]
APP_ROWS = [
    ["1", "s001", "Anna", "Berg", "CS", "Computer Science (BSc)", "Bachelor",
     "1st semester", "101", "102"],
    ["2", "s002", "Ben", "Kurz", "CS", "Computer Science", "MSc",
     "Full academic year", "x", "101"],
    ["3", "s003", "Cem", "Lang", "CS", "Computer Science", "PhD",
     "1st semester", "101", ""],
    ["", "", "", "", "", "", "", "", "", ""],
]


def write_csv(path, header, rows):
    with open(path, "w", encoding="utf-8-sig", newline="") as f:
        csv.writer(f).writerows([header] + rows)
    return path


def write_xlsx(path, header, rows):
    from openpyxl import Workbook
    wb = Workbook()
    ws = wb.active
    ws.append(header)
    for row in rows:
        ws.append(row)
    wb.save(path)
    return path


@pytest.fixture
def uni_csv(tmp_path):
    return write_csv(tmp_path / "universities.csv", UNI_HEADER, UNI_ROWS)


@pytest.fixture
def app_csv(tmp_path):
    return write_csv(tmp_path / "applicants.csv", APP_HEADER, APP_ROWS)


# ─── UNIVERSITÄTEN ────────────────────────────────────────────────────────────

class TestUniversityImport:
    def test_csv_rows(self, uni_csv):
        importer = UniversityImporter(uni_csv)
        records = importer.import_records()
        assert [r.agreement_id for r in records] == [101, 102]
        first = records[0]
        assert first.partner_name == "Uni A"
        assert first.total_places == 2 and first.max_bsc == 1
        assert first.spots_first is None
        assert first.faculty_max == {Faculty.EEMCS: 1}
        assert records[1].agreement_type == "Exchange I"

    def test_malformed_row_warning(self, uni_csv):
        """Nicht-numerische Kapazität → Warnung, Zeile übersprungen; Summenzeile still."""
        importer = UniversityImporter(uni_csv)
        importer.import_records()
        assert len(importer.warnings) == 1
        assert "Zeile 4" in importer.warnings[0]
        assert "Total #" in importer.warnings[0]

    def test_xlsx_numeric_cells(self, tmp_path):
        rows = [
            [101, "NL", "Uni A", "CS", "Computer Science", "Exchange", 2.0, None, None, None],
            [102.0, "DE", "Uni B", "EE", "Electrical Engineering", "Exchange", None, None, 1, None],
        ]
        path = write_xlsx(tmp_path / "universities.xlsx", UNI_HEADER, rows)
        records = load_universities(path)
        assert [(r.agreement_id, r.study_abbr) for r in records] == [(101, "CS"), (102, "EE")]
        assert records[0].total_places == 2
        assert records[1].spots_first == 1

    def test_missing_required_column(self, tmp_path):
        header = [h for h in UNI_HEADER if h != "Abbr. of study field"]
        path = write_csv(tmp_path / "u.csv", header, [["101"] + [""] * (len(header) - 1)])
        with pytest.raises(TableImportError, match="Abbr. of study field"):
            UniversityImporter(path).import_records()

    def test_missing_capacity_columns(self, tmp_path):
        header = ["ID", "Abbr. of study field"]
        path = write_csv(tmp_path / "u.csv", header, [["101", "CS"]])
        with pytest.raises(TableImportError, match="Kapazitätsspalte"):
            UniversityImporter(path).import_records()

    def test_no_data_rows(self, tmp_path):
        path = write_csv(tmp_path / "u.csv", UNI_HEADER, [])
        with pytest.raises(TableImportError):
            UniversityImporter(path).import_records()

    def test_missing_file_and_format(self, tmp_path):
        with pytest.raises(TableImportError):
            load_universities(tmp_path / "fehlt.csv")
        other = tmp_path / "u.txt"
        other.write_text("ID\n1\n", encoding="utf-8")
        with pytest.raises(TableImportError, match="Dateiformat"):
            load_universities(other)


# ─── BEWERBUNGEN ──────────────────────────────────────────────────────────────

class TestApplicantImport:
    def test_csv_rows(self, app_csv):
        importer = ApplicantImporter(app_csv)
        records = importer.import_records()
        assert [r.id for r in records] == [1, 2]
        anna = records[0]
        assert (anna.first_name, anna.last_name) == ("Anna", "Berg")
        assert anna.level is StudyLevel.BSC
        assert anna.enrollment is Enrollment.FIRST_SEMESTER
        assert anna.raw_preferences == [101, 102, None, None, None, None]
        assert records[1].enrollment is Enrollment.FULL_YEAR
        assert records[1].raw_preferences[:2] == [None, 101]

    def test_warnings(self, app_csv):
        """Ungültige Präferenz → Warnung; unbekanntes Niveau → Zeile übersprungen."""
        importer = ApplicantImporter(app_csv)
        importer.import_records()
        assert len(importer.warnings) == 2
        assert "keine Abkommen-ID" in importer.warnings[0]
        assert "PhD" in importer.warnings[1]

    def test_missing_semester_column(self, tmp_path):
        header = [h for h in APP_HEADER if h != "Semester"]
        path = write_csv(tmp_path / "a.csv", header, [["1"] * len(header)])
        with pytest.raises(TableImportError, match="Semester"):
            ApplicantImporter(path).import_records()


class TestLoadPlacementData:
    def test_full_pipeline(self, uni_csv, app_csv):
        config = PlacementConfig(catalog=CatalogConfig(non_scaling_agreement_types=["Exchange I"]))
        data = load_placement_data(uni_csv, app_csv, config)
        assert len(data.catalog.real_slots) == 2
        anna = data.student(1)
        assert anna.preferences[:2] == (SlotKey.real(101, "CS"), SlotKey.real(102, "CS"))
        assert anna.faculty is Faculty.EEMCS
        assert data.student(2).preferences[0] == SlotKey.real(101, "CS")
        assert data.student(2).cohort is Semester.FIRST
        assert data.catalog[SlotKey.real(102, "CS")].non_scaling
        assert "Bewerbungen: 2" in data.summary()


# ─── EXPORT ───────────────────────────────────────────────────────────────────

@pytest.fixture
def placed():
    data = mixed_data()
    values = {
        ArcKey(Semester.FIRST, 1, SlotKey.real(1, "CS")): 1.0,
        ArcKey(Semester.SECOND, 2, SlotKey.overflow()): 1.0,
        ArcKey(Semester.FIRST, 3, SlotKey.real(4, "CS")): 1.0,
        ArcKey(Semester.FIRST, 4, SlotKey.real(2, "EE")): 1.0,
    }
    return data, interpret(values, data)


class TestCsvExport:
    def test_rows(self, placed):
        _, report = placed
        exporter = CsvExporter(report)
        lines = exporter.to_string().splitlines()
        assert lines[0] == ",".join(EXPORT_HEADER)
        assert len(lines) == 1 + 3
        assert lines[1].startswith("1,,Anna Berg,Partner 1,1,1,1,")

    def test_file(self, placed, tmp_path):
        _, report = placed
        path = tmp_path / "out" / "placement.csv"
        CsvExporter(report).export(path)
        with open(path, encoding="utf-8-sig", newline="") as f:
            rows = list(csv.reader(f))
        assert rows[0] == EXPORT_HEADER
        assert [r[0] for r in rows[1:]] == ["1", "3", "4"]


class TestExcelExport:
    def test_sheets(self, placed, tmp_path):
        from openpyxl import load_workbook

        data, report = placed
        path = tmp_path / "placement.xlsx"
        ExcelExporter(report, data, PlacementConfig()).export(path)
        wb = load_workbook(path)
        assert wb.sheetnames == ["Übersicht", "Zuweisungen", "Nicht platziert", "Auslastung"]
        ws = wb["Zuweisungen"]
        assert [c.value for c in ws[1]] == EXPORT_HEADER
        assert ws.max_row == 1 + 3
        assert wb["Nicht platziert"].cell(row=2, column=1).value == 2
