"""Platz-Katalog: alle zuweisbaren Slots mit Semester-, Niveau- und Fakultätsgrenzen."""

import logging
from functools import cached_property
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

from config.schema import CatalogConfig
from models.enums import Faculty, Semester, SlotKind, StudyLevel
from models.keys import AgreementKey, SlotKey
from models.university import UniversityRecord

logger = logging.getLogger(__name__)


class SemesterCapacity(BaseModel):
    """Kapazität eines Slots in einem Semester."""

    model_config = ConfigDict(frozen=True)

    total: int
    bsc: int
    msc: int

    def for_level(self, level: StudyLevel) -> int:
        return self.bsc if level is StudyLevel.BSC else self.msc


def split_semesters(
    spots_first: Optional[int],
    spots_second: Optional[int],
    total: Optional[int],
    max_bsc: Optional[int],
    max_msc: Optional[int],
) -> tuple[SemesterCapacity, SemesterCapacity]:
    """Verteilt die Plätze einer Zeile auf 1. und 2. Semester.

    - nur 1. Semester angegeben → alles ins 1. Semester, 2. Semester = 0
    - nur 2. Semester angegeben → symmetrisch
    - keines angegeben → Gesamtzahl in BEIDE Semester (nicht halbiert)
    - beide angegeben → je eigene Platzzahl, Niveau-Grenzen für beide

    Fehlende Niveau-Grenzen entsprechen der Semester-Gesamtzahl.
    """
    def cap(seats: Optional[int]) -> SemesterCapacity:
        seats = seats or 0
        bsc = seats if max_bsc is None else max_bsc
        msc = seats if max_msc is None else max_msc
        return SemesterCapacity(total=seats, bsc=bsc, msc=msc)

    empty = SemesterCapacity(total=0, bsc=0, msc=0)
    if spots_first and not spots_second:
        return cap(spots_first), empty
    if spots_second and not spots_first:
        return empty, cap(spots_second)
    if not spots_first and not spots_second:
        return cap(total), cap(total)
    return cap(spots_first), cap(spots_second)


class Slot(BaseModel):
    """Zuweisbare Platz-Einheit (Abkommen × Studienfach) oder synthetischer Slot."""

    model_config = ConfigDict(frozen=True)

    key: SlotKey
    first: SemesterCapacity
    second: SemesterCapacity
    faculty_max: dict[Faculty, int] = {}   # Semester-unabhängig, 0 = keine Grenze
    agreement_type: str = ""
    non_scaling: bool = False              # Kosten = roher Rang statt Gewicht
    partner_name: str = ""
    country: str = ""
    study_field: str = ""

    @property
    def agreement(self) -> Optional[AgreementKey]:
        return self.key.agreement

    @property
    def is_synthetic(self) -> bool:
        return not self.key.is_real

    def semester_capacity(self, semester: Semester) -> SemesterCapacity:
        return self.first if semester is Semester.FIRST else self.second

    def capacity(self, semester: Semester) -> int:
        return self.semester_capacity(semester).total

    def level_capacity(self, semester: Semester, level: StudyLevel) -> int:
        return self.semester_capacity(semester).for_level(level)

    @property
    def faculty_limits(self) -> dict[Faculty, int]:
        """Nur die positiven Fakultätsgrenzen (in fester Fakultäts-Reihenfolge)."""
        return {
            f: self.faculty_max[f]
            for f in Faculty
            if self.faculty_max.get(f, 0) > 0
        }

    @property
    def is_faculty_constrained(self) -> bool:
        return bool(self.faculty_limits)

    @property
    def label(self) -> str:
        return f"{self.key} ({self.partner_name})" if self.partner_name else str(self.key)


class PlacementCatalog(BaseModel):
    """Alle Slots eines Durchlaufs inkl. Überlauf und "nicht angegeben"-Slots.

    Wird bei jedem Neuladen der Quelldaten komplett neu aufgebaut.
    """

    model_config = ConfigDict(frozen=True)

    slots: list[Slot]

    # ─── Aufbau ───

    @classmethod
    def build(
        cls, records: Iterable[UniversityRecord], config: Optional[CatalogConfig] = None
    ) -> "PlacementCatalog":
        """Erzeugt einen Slot pro Zeile und ergänzt die synthetischen Slots."""
        config = config or CatalogConfig()
        non_scaling_types = {t.strip().lower() for t in config.non_scaling_agreement_types}

        slots: list[Slot] = []
        seen: set[SlotKey] = set()
        for rec in records:
            key = SlotKey.real(rec.agreement_id, rec.study_abbr)
            if key in seen:
                logger.warning(f"Doppelte Katalogzeile ignoriert: {key}")
                continue
            seen.add(key)
            first, second = split_semesters(
                rec.spots_first, rec.spots_second, rec.total_places,
                rec.max_bsc, rec.max_msc,
            )
            slots.append(Slot(
                key=key,
                first=first,
                second=second,
                faculty_max={f: rec.faculty_max.get(f, 0) or 0 for f in Faculty},
                agreement_type=rec.agreement_type,
                non_scaling=rec.agreement_type.strip().lower() in non_scaling_types,
                partner_name=rec.partner_name,
                country=rec.country,
                study_field=rec.study_field,
            ))

        slots.extend(synthetic_slots(config.synthetic_capacity))
        return cls(slots=slots)

    # ─── Lookups ───

    @cached_property
    def slot_index(self) -> dict[SlotKey, Slot]:
        return {s.key: s for s in self.slots}

    @cached_property
    def agreement_groups(self) -> dict[AgreementKey, list[Slot]]:
        groups: dict[AgreementKey, list[Slot]] = {}
        for slot in self.slots:
            if slot.agreement is not None:
                groups.setdefault(slot.agreement, []).append(slot)
        return groups

    def __contains__(self, key: object) -> bool:
        return key in self.slot_index

    def get(self, key: SlotKey) -> Optional[Slot]:
        return self.slot_index.get(key)

    def __getitem__(self, key: SlotKey) -> Slot:
        return self.slot_index[key]

    @property
    def real_slots(self) -> list[Slot]:
        return [s for s in self.slots if s.key.is_real]

    @property
    def overflow(self) -> Slot:
        return self.slot_index[SlotKey.overflow()]

    def unlisted(self, rank: int) -> Slot:
        return self.slot_index[SlotKey.unlisted(rank)]

    def agreements(self) -> dict[AgreementKey, list[Slot]]:
        """Abkommens-Gruppen (ohne Überlauf) in Katalog-Reihenfolge."""
        return self.agreement_groups

    def agreement_capacity(self, agreement: AgreementKey, semester: Semester) -> int:
        """Gesamtgrenze eines Abkommens: Kapazität des ersten Slots der Gruppe."""
        return self.agreement_groups[agreement][0].capacity(semester)

    @property
    def has_faculty_constraints(self) -> bool:
        return any(s.is_faculty_constrained for s in self.slots)


def synthetic_slots(capacity: int) -> list[Slot]:
    """Überlauf-Slot und je ein "nicht angegeben"-Slot pro Rang 1..6."""
    unlimited = SemesterCapacity(total=capacity, bsc=capacity, msc=capacity)
    slots = [Slot(key=SlotKey.overflow(), first=unlimited, second=unlimited)]
    for rank in range(1, 7):
        slots.append(Slot(key=SlotKey.unlisted(rank), first=unlimited, second=unlimited))
    return slots


__all__ = [
    "PlacementCatalog",
    "SemesterCapacity",
    "Slot",
    "SlotKind",
    "split_semesters",
    "synthetic_slots",
]
