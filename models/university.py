"""Datenmodell für eine Zeile der Partneruniversitäten-Tabelle (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, field_validator

from models.enums import Faculty


class UniversityRecord(BaseModel):
    """Eine Abkommen × Studienfach-Zeile, nach Typ- und Pflichtfeldprüfung."""

    agreement_id: int                  # "ID"
    study_abbr: str                    # "Abbr. of study field"
    partner_name: str = ""
    country: str = ""
    academic_year: str = ""
    isced: str = ""
    study_field: str = ""
    agreement_type: str = ""
    partner_department: str = ""
    total_places: Optional[int] = None
    max_bsc: Optional[int] = None
    max_msc: Optional[int] = None
    spots_first: Optional[int] = None  # vereinbarte Plätze 1. Semester
    spots_second: Optional[int] = None # vereinbarte Plätze 2. Semester
    faculty_max: dict[Faculty, int] = {}  # 0 / fehlend = keine Grenze

    @field_validator("study_abbr")
    @classmethod
    def strip_abbr(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Studienfach-Kürzel darf nicht leer sein")
        return v
