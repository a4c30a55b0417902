"""Aufzählungstypen des Platzvergabe-Modells."""

from enum import Enum
from typing import Optional


class Semester(str, Enum):
    """Semester-Kohorte. Jede Bewerbung gehört genau einer Kohorte an."""

    FIRST = "first"
    SECOND = "second"

    @property
    def number(self) -> int:
        return 1 if self is Semester.FIRST else 2

    @property
    def label(self) -> str:
        return "1. Semester" if self is Semester.FIRST else "2. Semester"


class Enrollment(str, Enum):
    """Gewünschter Aufenthaltszeitraum laut Bewerbung."""

    FIRST_SEMESTER = "1st semester"
    SECOND_SEMESTER = "2nd semester"
    FULL_YEAR = "Full academic year"

    @property
    def cohort(self) -> Semester:
        """Ganzjahres-Bewerbungen laufen in der Kohorte des 1. Semesters."""
        if self is Enrollment.SECOND_SEMESTER:
            return Semester.SECOND
        return Semester.FIRST

    @classmethod
    def parse(cls, raw: str) -> Optional["Enrollment"]:
        text = str(raw).strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        aliases = {
            "1st": cls.FIRST_SEMESTER, "first semester": cls.FIRST_SEMESTER,
            "2nd": cls.SECOND_SEMESTER, "second semester": cls.SECOND_SEMESTER,
            "full year": cls.FULL_YEAR, "academic year": cls.FULL_YEAR,
        }
        return aliases.get(text)


class StudyLevel(str, Enum):
    BSC = "BSc"
    MSC = "MSc"

    @classmethod
    def parse(cls, raw: str) -> Optional["StudyLevel"]:
        text = str(raw).strip().lower()
        if text in ("bsc", "bachelor", "ba", "b"):
            return cls.BSC
        if text in ("msc", "master", "ma", "m"):
            return cls.MSC
        return None


class Faculty(str, Enum):
    BMS = "BMS"
    EEMCS = "EEMCS"
    ET = "ET"
    ITC = "ITC"
    ST = "ST"
    UCT = "UCT"


class SlotKind(str, Enum):
    """Art eines Slots: echtes Abkommen oder synthetischer Platzhalter."""

    REAL = "real"
    UNLISTED = "unlisted"   # Rang ohne Angabe in der Bewerbung
    OVERFLOW = "overflow"   # keine echte Zuweisung möglich


class ConstraintKind(str, Enum):
    STUDENT = "student"
    AGREEMENT = "agreement"
    SLOT = "slot"
    SLOT_LEVEL = "slot_level"
    SLOT_FACULTY = "slot_faculty"
    MANUAL = "manual"
    FORBIDDEN = "forbidden"
