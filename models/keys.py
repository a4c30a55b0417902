"""Strukturierte Schlüssel für Slots, Abkommen, Bögen und Constraints.

Alle Schlüssel sind immutable (frozen=True) und werden strukturell verglichen
und gehasht. Der Text aus __str__ dient nur der Anzeige.
"""

from dataclasses import dataclass
from typing import Hashable, Optional

from models.enums import ConstraintKind, Faculty, Semester, SlotKind, StudyLevel


@dataclass(frozen=True)
class AgreementKey:
    """Abkommens-Gruppe. Synthetische Gruppen sind über kind getrennt."""

    kind: SlotKind
    agreement_id: int

    def __str__(self) -> str:
        if self.kind is SlotKind.UNLISTED:
            return f"unlisted-{self.agreement_id}"
        return str(self.agreement_id)


@dataclass(frozen=True)
class SlotKey:
    """Platz-Einheit: Abkommen × Studienfach-Kürzel.

    Für synthetische Slots ist study_abbr leer; bei UNLISTED trägt
    agreement_id den Rang (1..6).
    """

    kind: SlotKind
    agreement_id: int
    study_abbr: str = ""

    @classmethod
    def real(cls, agreement_id: int, study_abbr: str) -> "SlotKey":
        return cls(SlotKind.REAL, int(agreement_id), str(study_abbr).strip())

    @classmethod
    def unlisted(cls, rank: int) -> "SlotKey":
        return cls(SlotKind.UNLISTED, rank)

    @classmethod
    def overflow(cls) -> "SlotKey":
        return cls(SlotKind.OVERFLOW, 0)

    @classmethod
    def parse(cls, text: str) -> "SlotKey":
        """Parst die Anzeigeform zurück ("101_CS", "unlisted-3", "overflow")."""
        text = text.strip()
        if text == "overflow":
            return cls.overflow()
        if text.startswith("unlisted-"):
            return cls.unlisted(int(text[len("unlisted-"):]))
        agreement, sep, abbr = text.partition("_")
        if not sep or not abbr:
            raise ValueError(
                f"Ungültiger Slot '{text}' (erwartet: <Abkommen-ID>_<Kürzel>)")
        return cls.real(int(agreement), abbr)

    @property
    def is_real(self) -> bool:
        return self.kind is SlotKind.REAL

    @property
    def agreement(self) -> Optional[AgreementKey]:
        """Abkommens-Gruppe des Slots; der Überlauf gehört zu keiner Gruppe."""
        if self.kind is SlotKind.OVERFLOW:
            return None
        return AgreementKey(self.kind, self.agreement_id)

    def __str__(self) -> str:
        if self.kind is SlotKind.OVERFLOW:
            return "overflow"
        if self.kind is SlotKind.UNLISTED:
            return f"unlisted-{self.agreement_id}"
        return f"{self.agreement_id}_{self.study_abbr}"


@dataclass(frozen=True)
class ArcKey:
    """Entscheidungsvariable: Bewerbung → Slot in der Kohorte der Bewerbung."""

    semester: Semester
    student_id: int
    slot: SlotKey

    @property
    def name(self) -> str:
        """Variablenname für den Solver (nur Anzeige/Debugging)."""
        prefix = "x" if self.semester is Semester.FIRST else "y"
        return f"{prefix}_{self.student_id}_{self.slot}"


@dataclass(frozen=True)
class ConstraintKey:
    """Constraint-Name als Tupel (Art, Semester, Entität)."""

    kind: ConstraintKind
    semester: Optional[Semester]
    entity: tuple[Hashable, ...]

    @classmethod
    def student(cls, semester: Semester, student_id: int) -> "ConstraintKey":
        return cls(ConstraintKind.STUDENT, semester, (student_id,))

    @classmethod
    def agreement(cls, semester: Semester, agreement: AgreementKey) -> "ConstraintKey":
        return cls(ConstraintKind.AGREEMENT, semester, (agreement,))

    @classmethod
    def slot(cls, semester: Semester, slot: SlotKey) -> "ConstraintKey":
        return cls(ConstraintKind.SLOT, semester, (slot,))

    @classmethod
    def slot_level(cls, semester: Semester, slot: SlotKey,
                   level: StudyLevel) -> "ConstraintKey":
        return cls(ConstraintKind.SLOT_LEVEL, semester, (slot, level))

    @classmethod
    def slot_faculty(cls, semester: Semester, slot: SlotKey,
                     faculty: Faculty) -> "ConstraintKey":
        return cls(ConstraintKind.SLOT_FACULTY, semester, (slot, faculty))

    @classmethod
    def manual(cls, student_id: int, slot: SlotKey) -> "ConstraintKey":
        return cls(ConstraintKind.MANUAL, None, (student_id, slot))

    @classmethod
    def forbidden(cls, student_id: int, slot: SlotKey) -> "ConstraintKey":
        return cls(ConstraintKind.FORBIDDEN, None, (student_id, slot))

    def __str__(self) -> str:
        parts = [self.kind.value]
        if self.semester is not None:
            parts.append(self.semester.value)
        parts.extend(str(e.value if hasattr(e, "value") else e) for e in self.entity)
        return ":".join(parts)
