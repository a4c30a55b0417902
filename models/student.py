"""Datenmodell für eine Bewerbung (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from models.enums import Enrollment, Faculty, Semester, StudyLevel
from models.keys import SlotKey


class ApplicantRecord(BaseModel):
    """Bewerbungszeile nach Typprüfung, Präferenzen noch roh (Abkommen-IDs)."""

    id: int                                   # "ID of application"
    study_abbr: str
    study_field: str
    level: StudyLevel
    enrollment: Enrollment
    student_number: str = ""
    first_name: str = ""
    last_name: str = ""
    academic_year: str = ""
    raw_preferences: list[Optional[int]] = [None] * 6

    @field_validator("raw_preferences")
    @classmethod
    def pad_preferences(cls, v: list[Optional[int]]) -> list[Optional[int]]:
        if len(v) > 6:
            raise ValueError(f"Höchstens 6 Präferenzen erlaubt, erhalten: {len(v)}")
        return list(v) + [None] * (6 - len(v))


class Student(BaseModel):
    """Bewerbung mit bereinigten Präferenzen und aufgelöster Fakultät.

    preferences hat immer genau 6 Einträge; fehlende Einträge (None) stehen
    ausschließlich am Ende.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    study_abbr: str
    study_field: str
    level: StudyLevel
    enrollment: Enrollment
    preferences: tuple[Optional[SlotKey], ...]
    faculty: Optional[Faculty] = None
    student_number: str = ""
    first_name: str = ""
    last_name: str = ""

    @property
    def cohort(self) -> Semester:
        return self.enrollment.cohort

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    @property
    def listed_count(self) -> int:
        """Anzahl gültiger (nicht leerer) Präferenzen."""
        return sum(1 for p in self.preferences if p is not None)

    def rank_of(self, slot: SlotKey) -> Optional[int]:
        """1-basierter Rang eines Slots in den Präferenzen, sonst None."""
        for rank, pref in enumerate(self.preferences, 1):
            if pref == slot:
                return rank
        return None

    @property
    def label(self) -> str:
        return f"{self.id} ({self.full_name})" if self.full_name else str(self.id)
