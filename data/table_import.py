"""Import der Quelltabellen (Partneruniversitäten, Bewerbungen).

Akzeptiert .xlsx (erstes Tabellenblatt, openpyxl) oder .csv. Zeilen ohne
numerische ID gelten als Fuß-/Summenzeilen und werden verworfen. Fehlerhafte
Zeilen werden mit Warnung übersprungen; fehlende Pflichtspalten oder eine
Datei ohne Datenzeilen brechen mit TableImportError ab.
"""

import csv
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from config.defaults import (
    APPLICANT_COLUMNS,
    APPLICANT_REQUIRED,
    FACULTY_COLUMN_TEMPLATE,
    PREFERENCE_COLUMNS,
    UNIVERSITY_CAPACITY_ANY,
    UNIVERSITY_COLUMNS,
    UNIVERSITY_REQUIRED,
)
from config.schema import PlacementConfig
from models.enums import Enrollment, Faculty, StudyLevel
from models.errors import TableImportError
from models.placement_data import PlacementData
from models.student import ApplicantRecord
from models.university import UniversityRecord
from solver.preferences import normalize_agreement_id

logger = logging.getLogger(__name__)


class _RowError(ValueError):
    """Ungültiges Feld in einer Datenzeile (Zeile wird übersprungen)."""


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _optional_int(value: Any, column: str) -> Optional[int]:
    """Zahl oder leer. Nicht-numerische Werte → _RowError mit Spaltenname."""
    if _is_empty(value):
        return None
    parsed = normalize_agreement_id(value)
    if parsed is None:
        raise _RowError(f"'{column}' ist keine ganze Zahl: '{value}'")
    return parsed


# ─── Tabellen-Leser ───────────────────────────────────────────────────────────

class TableImporter:
    """Liest die erste Tabelle einer .xlsx/.csv-Datei (erste Zeile = Header)."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.warnings: list[str] = []
        self._headers: list[str] = []
        self._rows: Optional[list[tuple]] = None

    def _open(self) -> None:
        if not self.path.exists():
            raise TableImportError(f"Datei nicht gefunden: {self.path}")
        suffix = self.path.suffix.lower()
        if suffix in (".xlsx", ".xlsm"):
            raw = self._read_xlsx()
        elif suffix == ".csv":
            raw = self._read_csv()
        else:
            raise TableImportError(
                f"Unbekanntes Dateiformat: {self.path}. Erwartet: .xlsx oder .csv."
            )
        if not raw:
            raise TableImportError(f"{self.path.name}: Datei ist leer")
        self._headers = [_text(h) for h in raw[0]]
        self._rows = [
            row for row in raw[1:]
            if not all(_is_empty(v) for v in row)
        ]

    def _read_xlsx(self) -> list[tuple]:
        try:
            import openpyxl
            wb = openpyxl.load_workbook(str(self.path), read_only=True, data_only=True)
        except Exception as e:
            raise TableImportError(f"Fehler beim Öffnen der Excel-Datei: {e}")
        try:
            return list(wb.worksheets[0].iter_rows(values_only=True))
        finally:
            wb.close()

    def _read_csv(self) -> list[tuple]:
        with open(self.path, encoding="utf-8-sig", newline="") as f:
            return [tuple(row) for row in csv.reader(f)]

    def _column(self, name: str, prefix: bool = False) -> Optional[int]:
        """Spaltenindex (Groß-/Kleinschreibung egal), optional per Präfix."""
        if self._rows is None:
            self._open()
        wanted = name.strip().lower()
        for i, header in enumerate(self._headers):
            h = header.lower()
            if h == wanted or (prefix and h.startswith(wanted)):
                return i
        return None

    def _sheet_rows(self, columns: dict[str, Optional[int]]) -> list[tuple[int, dict]]:
        """Datenzeilen als (Zeilennummer, {Feld: Rohwert}) für die gefundenen Spalten."""
        if self._rows is None:
            self._open()
        result = []
        for line, row in enumerate(self._rows, 2):
            result.append((line, {
                field: (row[idx] if idx is not None and idx < len(row) else None)
                for field, idx in columns.items()
            }))
        return result

    def _missing(self, required: list[str]) -> list[str]:
        return [c for c in required if self._column(c) is None]

    def _warn(self, line: int, message: str) -> None:
        text = f"{self.path.name}, Zeile {line}: {message}"
        self.warnings.append(text)
        logger.warning(text)


# ─── Partneruniversitäten ─────────────────────────────────────────────────────

class UniversityImporter(TableImporter):
    """Partneruniversitäten: eine Zeile pro Abkommen × Studienfach."""

    def import_records(self) -> list[UniversityRecord]:
        problems = [f"Pflichtspalte '{c}' fehlt" for c in self._missing(UNIVERSITY_REQUIRED)]
        if all(self._column(c) is None for c in UNIVERSITY_CAPACITY_ANY):
            problems.append(
                "Mindestens eine Kapazitätsspalte fehlt: "
                + ", ".join(f"'{c}'" for c in UNIVERSITY_CAPACITY_ANY))
        if problems:
            raise TableImportError(f"{self.path.name}: " + "; ".join(problems))

        columns = {field: self._column(name) for field, name in UNIVERSITY_COLUMNS.items()}
        faculty_columns = {
            f: self._column(FACULTY_COLUMN_TEMPLATE.format(faculty=f.value)) for f in Faculty
        }
        columns.update({f"faculty_{f.value}": idx for f, idx in faculty_columns.items()})

        records: list[UniversityRecord] = []
        for line, row in self._sheet_rows(columns):
            agreement_id = normalize_agreement_id(row["agreement_id"])
            if agreement_id is None:
                logger.debug(f"{self.path.name}, Zeile {line}: keine numerische ID, übersprungen")
                continue
            try:
                records.append(self._parse_row(agreement_id, row))
            except _RowError as e:
                self._warn(line, f"{e} – Zeile übersprungen")
            except ValidationError as e:
                field = e.errors()[0]["loc"][0] if e.errors() else "?"
                self._warn(line, f"Ungültiges Feld '{field}' – Zeile übersprungen")

        if not records:
            raise TableImportError(f"{self.path.name}: Keine gültigen Datenzeilen gefunden")
        logger.info(f"{self.path.name}: {len(records)} Universitäts-Zeilen importiert")
        return records

    def _parse_row(self, agreement_id: int, row: dict) -> UniversityRecord:
        abbr = _text(row["study_abbr"])
        if not abbr:
            raise _RowError(f"Pflichtfeld '{UNIVERSITY_COLUMNS['study_abbr']}' ist leer")

        numbers = {
            field: _optional_int(row[field], UNIVERSITY_COLUMNS[field])
            for field in ("total_places", "max_bsc", "max_msc", "spots_first", "spots_second")
        }
        faculty_max = {}
        for f in Faculty:
            value = _optional_int(row[f"faculty_{f.value}"],
                                  FACULTY_COLUMN_TEMPLATE.format(faculty=f.value))
            if value:
                faculty_max[f] = value

        return UniversityRecord(
            agreement_id=agreement_id,
            study_abbr=abbr,
            partner_name=_text(row["partner_name"]),
            country=_text(row["country"]),
            academic_year=_text(row["academic_year"]),
            isced=_text(row["isced"]),
            study_field=_text(row["study_field"]),
            agreement_type=_text(row["agreement_type"]),
            partner_department=_text(row["partner_department"]),
            faculty_max=faculty_max,
            **numbers,
        )


# ─── Bewerbungen ──────────────────────────────────────────────────────────────

class ApplicantImporter(TableImporter):
    """Bewerbungen mit bis zu 6 Abkommen-IDs als Präferenzen."""

    def import_records(self) -> list[ApplicantRecord]:
        missing = self._missing(APPLICANT_REQUIRED)
        if missing:
            raise TableImportError(
                f"{self.path.name}: " + "; ".join(f"Pflichtspalte '{c}' fehlt" for c in missing))

        columns = {
            field: self._column(name, prefix=field in ("first_name", "last_name"))
            for field, name in APPLICANT_COLUMNS.items()
        }
        for rank, name in enumerate(PREFERENCE_COLUMNS, 1):
            columns[f"pref_{rank}"] = self._column(name)
        if all(columns[f"pref_{r}"] is None for r in range(1, len(PREFERENCE_COLUMNS) + 1)):
            logger.warning(f"{self.path.name}: Keine Präferenz-Spalten gefunden")

        records: list[ApplicantRecord] = []
        for line, row in self._sheet_rows(columns):
            app_id = normalize_agreement_id(row["id"])
            if app_id is None:
                logger.debug(f"{self.path.name}, Zeile {line}: keine numerische ID, übersprungen")
                continue
            try:
                records.append(self._parse_row(app_id, line, row))
            except _RowError as e:
                self._warn(line, f"{e} – Zeile übersprungen")
            except ValidationError as e:
                field = e.errors()[0]["loc"][0] if e.errors() else "?"
                self._warn(line, f"Ungültiges Feld '{field}' – Zeile übersprungen")

        if not records:
            raise TableImportError(f"{self.path.name}: Keine gültigen Datenzeilen gefunden")
        logger.info(f"{self.path.name}: {len(records)} Bewerbungen importiert")
        return records

    def _parse_row(self, app_id: int, line: int, row: dict) -> ApplicantRecord:
        for field in ("study_abbr", "study_field"):
            if not _text(row[field]):
                raise _RowError(f"Pflichtfeld '{APPLICANT_COLUMNS[field]}' ist leer")

        level = StudyLevel.parse(_text(row["study_level"]))
        if level is None:
            raise _RowError(
                f"'{APPLICANT_COLUMNS['study_level']}' unbekannt: '{_text(row['study_level'])}'")
        enrollment = Enrollment.parse(_text(row["semester"]))
        if enrollment is None:
            raise _RowError(
                f"'{APPLICANT_COLUMNS['semester']}' unbekannt: '{_text(row['semester'])}'")

        prefs: list[Optional[int]] = []
        for rank, name in enumerate(PREFERENCE_COLUMNS, 1):
            raw = row[f"pref_{rank}"]
            value = normalize_agreement_id(raw)
            if value is None and not _is_empty(raw):
                self._warn(line, f"'{name}' ist keine Abkommen-ID: '{raw}' – ignoriert")
            prefs.append(value)

        return ApplicantRecord(
            id=app_id,
            study_abbr=_text(row["study_abbr"]),
            study_field=_text(row["study_field"]),
            level=level,
            enrollment=enrollment,
            student_number=_text(row["student_number"]),
            first_name=_text(row["first_name"]),
            last_name=_text(row["last_name"]),
            academic_year=_text(row["academic_year"]),
            raw_preferences=prefs,
        )


# ─── Komfort-Funktionen ───────────────────────────────────────────────────────

def load_universities(path: Path) -> list[UniversityRecord]:
    return UniversityImporter(path).import_records()


def load_applicants(path: Path) -> list[ApplicantRecord]:
    return ApplicantImporter(path).import_records()


def load_placement_data(
    universities: Path, applicants: Path, config: Optional[PlacementConfig] = None
) -> PlacementData:
    """Importiert beide Quelldateien und baut den Datenstand auf.

    Raises:
        TableImportError: Bei unbrauchbaren Quelldateien.
    """
    return PlacementData.build(
        load_universities(universities), load_applicants(applicants), config)
