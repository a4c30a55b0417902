"""Präferenz-Auflösung: Rohdaten einer Bewerbung → bereinigte Slot-Präferenzen.

Ein Präferenzeintrag ist eine Abkommen-ID; der Slot ergibt sich erst
zusammen mit dem Studienfach-Kürzel der Bewerbung. Eine Bewerbung kann
daher nie auf den Slot eines anderen Studienfachs desselben Abkommens fallen.
"""

import logging
import re
from typing import Iterable, Optional

from config.defaults import FACULTY_MAPPING, NUM_PREFERENCES
from models.catalog import PlacementCatalog
from models.enums import Faculty
from models.keys import SlotKey
from models.student import ApplicantRecord, Student

logger = logging.getLogger(__name__)

_LEVEL_SUFFIX = re.compile(r"\s*\((BSc|MSc)\)", re.IGNORECASE)

# Studienfach (ohne Niveau-Zusatz, klein) → Fakultät
_FIELD_TO_FACULTY: dict[str, Faculty] = {
    field.lower(): Faculty(faculty)
    for faculty, fields in FACULTY_MAPPING.items()
    for field in fields
}


def strip_level(study_field: str) -> str:
    """Entfernt Niveau-Zusätze wie "(BSc)" / "(MSc)" aus dem Studienfach."""
    return _LEVEL_SUFFIX.sub("", study_field or "").strip()


def resolve_faculty(study_field: str, student_id: Optional[int] = None) -> Optional[Faculty]:
    """Schlägt die Fakultät eines Studienfachs nach.

    Unbekannte Studienfächer sind ein Datenfehler: wird geloggt, die Bewerbung
    gilt dann für Fakultätsgrenzen als unbeschränkt.
    """
    faculty = _FIELD_TO_FACULTY.get(strip_level(study_field).lower())
    if faculty is None:
        who = f"Bewerbung {student_id}: " if student_id is not None else ""
        logger.error(f"{who}Keine Fakultät für Studienfach '{study_field}' gefunden")
    return faculty


def normalize_agreement_id(raw: object) -> Optional[int]:
    """Abkommen-ID aus Tabellenzelle: 101, 101.0 und "101" → 101, sonst None."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if raw.is_integer() else None
    text = str(raw).strip()
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return int(value) if value.is_integer() else None


def clean_preferences(
    raw: Iterable[object],
    study_abbr: str,
    catalog: PlacementCatalog,
    student_id: Optional[int] = None,
) -> tuple[Optional[SlotKey], ...]:
    """Bereinigt die Rohpräferenzen einer Bewerbung.

    Entfernt leere, doppelte und nicht im Katalog vorhandene Einträge,
    behält die Reihenfolge bei und füllt rechts mit None auf genau 6 auf.
    """
    kept: list[SlotKey] = []
    for rank, value in enumerate(list(raw)[:NUM_PREFERENCES], 1):
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        agreement_id = normalize_agreement_id(value)
        if agreement_id is None:
            logger.warning(
                f"Bewerbung {student_id}: Präferenz {rank} '{value}' ist keine "
                f"Abkommen-ID, wird ignoriert")
            continue
        key = SlotKey.real(agreement_id, study_abbr)
        if key in kept:
            logger.debug(f"Bewerbung {student_id}: Doppelte Präferenz {key} entfernt")
            continue
        if key not in catalog:
            logger.debug(f"Bewerbung {student_id}: Slot {key} nicht im Katalog")
            continue
        kept.append(key)
    return tuple(kept) + (None,) * (NUM_PREFERENCES - len(kept))


def resolve_student(record: ApplicantRecord, catalog: PlacementCatalog) -> Student:
    return Student(
        id=record.id,
        study_abbr=record.study_abbr,
        study_field=record.study_field,
        level=record.level,
        enrollment=record.enrollment,
        preferences=clean_preferences(
            record.raw_preferences, record.study_abbr, catalog, record.id),
        faculty=resolve_faculty(record.study_field, record.id),
        student_number=record.student_number,
        first_name=record.first_name,
        last_name=record.last_name,
    )


def resolve_students(
    records: Iterable[ApplicantRecord], catalog: PlacementCatalog
) -> list[Student]:
    """Löst alle Bewerbungen auf. Doppelte Bewerbungs-IDs: erste Zeile gewinnt."""
    students: list[Student] = []
    seen: set[int] = set()
    for rec in records:
        if rec.id in seen:
            logger.warning(f"Doppelte Bewerbungs-ID {rec.id} ignoriert")
            continue
        seen.add(rec.id)
        students.append(resolve_student(rec, catalog))
    return students
