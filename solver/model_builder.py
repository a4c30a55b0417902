"""Aufbau des Zuweisungsmodells (Constraints + Bogen-Variablen).

Architektur:
  - Ein Bogen (ArcKey) pro Bewerbung × möglichem Slot in der Kohorte der
    Bewerbung: 6 Präferenz-Ränge (leere Ränge → "nicht angegeben"-Slot) plus
    ein Bogen zum Überlauf
  - Jeder Bogen hat Koeffizient 1 auf den Constraints, die er belastet
  - Zielfunktion: Minimiere Σ Kosten × Bogen
  - Manuelle Zuweisungen (= 1) und Ausschlüsse (= 0) als eigene Constraints

Das Modell ist reine Datenstruktur; gelöst wird es im Backend (CP-SAT).
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from config.defaults import DEFAULT_PREFERENCE_WEIGHTS, NUM_PREFERENCES
from models.catalog import Slot
from models.enums import ConstraintKind, Semester, StudyLevel
from models.errors import ModelStructureError
from models.keys import ArcKey, ConstraintKey, SlotKey
from models.placement_data import PlacementData
from models.student import Student
from solver.pinning import ForbiddenAssignment, ManualAssignment, PinSet

logger = logging.getLogger(__name__)


# ─── Modell-Datenstruktur ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class Bound:
    """Rechte Seite eines Constraints: Gleichheit oder Obergrenze."""

    value: int
    equal: bool = False

    @classmethod
    def exactly(cls, value: int) -> "Bound":
        return cls(value, equal=True)

    @classmethod
    def at_most(cls, value: int) -> "Bound":
        return cls(value, equal=False)

    def satisfied(self, total: float) -> bool:
        if self.equal:
            return total == self.value
        return total <= self.value

    def __str__(self) -> str:
        return f"{'=' if self.equal else '≤'} {self.value}"


@dataclass
class ArcVariable:
    """Entscheidungsvariable: Zielfunktions-Kosten und Constraint-Koeffizienten."""

    cost: int
    coefficients: dict[ConstraintKey, int] = field(default_factory=dict)


@dataclass
class AssignmentModel:
    """Minimiere Σ cost × x unter allen constraints."""

    constraints: dict[ConstraintKey, Bound] = field(default_factory=dict)
    variables: dict[ArcKey, ArcVariable] = field(default_factory=dict)

    def objective(self, values: dict[ArcKey, float]) -> float:
        return sum(var.cost * values.get(arc, 0) for arc, var in self.variables.items())

    def violated(self, values: dict[ArcKey, float]) -> list[ConstraintKey]:
        """Constraints, die eine Variablenbelegung verletzt (für Tests/Diagnose)."""
        totals: dict[ConstraintKey, float] = {key: 0 for key in self.constraints}
        for arc, var in self.variables.items():
            value = values.get(arc, 0)
            if not value:
                continue
            for key, coeff in var.coefficients.items():
                totals[key] += coeff * value
        return [key for key, bound in self.constraints.items()
                if not bound.satisfied(totals[key])]

    def stats(self) -> str:
        return f"{len(self.variables)} Variablen, {len(self.constraints)} Constraints"


def overflow_penalty(num_students: int, weights: Sequence[int]) -> int:
    """Kosten des Überlauf-Bogens.

    Größer als die schlechtestmöglichen Präferenzkosten aller Bewerbungen
    zusammen, unabhängig von der Gewichtung: N × Σ_r max(w_r, r) + 1.
    """
    worst = sum(max(w, rank) for rank, w in enumerate(weights, 1))
    return num_students * worst + 1


# ─── ModelBuilder ─────────────────────────────────────────────────────────────

class ModelBuilder:
    """Baut das Zuweisungsmodell aus einem PlacementData-Stand.

    Verwendung:
        model = ModelBuilder(data, weights).build(pins.snapshot())
    """

    def __init__(
        self, data: PlacementData, weights: Optional[Sequence[int]] = None
    ) -> None:
        weights = tuple(weights if weights is not None else DEFAULT_PREFERENCE_WEIGHTS)
        if len(weights) != NUM_PREFERENCES or any(w < 0 for w in weights):
            raise ValueError(
                f"Erwartet {NUM_PREFERENCES} nicht-negative Gewichte, erhalten: {weights}")
        self.data = data
        self.catalog = data.catalog
        self.weights = weights
        self.penalty = overflow_penalty(len(data.students), weights)

        self._constraints: dict[ConstraintKey, Bound] = {}
        self._variables: dict[ArcKey, ArcVariable] = {}

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def build(self, pins: Optional[PinSet] = None) -> AssignmentModel:
        """Erzeugt ein neues Modell. Gleiche Eingaben → identisches Modell."""
        pins = pins or PinSet()
        self._constraints = {}
        self._variables = {}

        for sem in Semester:
            self._c1_exactly_one_per_student(sem)
            self._c2_agreement_capacity(sem)
            self._c3_slot_capacity(sem)
            self._c4_slot_level_capacity(sem)
            self._c5_slot_faculty_capacity(sem)

        self._create_arcs()
        self._c6_manual_assignments(pins.manual)
        self._c7_forbidden_assignments(pins.forbidden)

        model = AssignmentModel(constraints=self._constraints, variables=self._variables)
        logger.debug(f"Modell aufgebaut: {model.stats()}")
        return model

    # ─── Constraints ──────────────────────────────────────────────────────────

    def _c1_exactly_one_per_student(self, sem: Semester) -> None:
        """Jede Bewerbung der Kohorte erhält genau einen Slot (ggf. Überlauf)."""
        for student in self.data.cohort(sem):
            self._constraints[ConstraintKey.student(sem, student.id)] = Bound.exactly(1)

    def _c2_agreement_capacity(self, sem: Semester) -> None:
        """Abkommens-Summe ≤ Kapazität des ersten Slots der Gruppe (ohne Überlauf)."""
        for agreement in self.catalog.agreements():
            self._constraints[ConstraintKey.agreement(sem, agreement)] = Bound.at_most(
                self.catalog.agreement_capacity(agreement, sem))

    def _c3_slot_capacity(self, sem: Semester) -> None:
        for slot in self.catalog.slots:
            self._constraints[ConstraintKey.slot(sem, slot.key)] = Bound.at_most(
                slot.capacity(sem))

    def _c4_slot_level_capacity(self, sem: Semester) -> None:
        for slot in self.catalog.slots:
            for level in StudyLevel:
                self._constraints[ConstraintKey.slot_level(sem, slot.key, level)] = (
                    Bound.at_most(slot.level_capacity(sem, level)))

    def _c5_slot_faculty_capacity(self, sem: Semester) -> None:
        """Nur für Slots mit Fakultätsgrenzen und nur für positive Grenzen."""
        for slot in self.catalog.slots:
            for faculty, limit in slot.faculty_limits.items():
                self._constraints[ConstraintKey.slot_faculty(sem, slot.key, faculty)] = (
                    Bound.at_most(limit))

    def _c6_manual_assignments(self, manual: Iterable[ManualAssignment]) -> None:
        """Manuelle Zuweisung: eigener Constraint = 1 pro (Bewerbung, Slot)."""
        for pin in manual:
            arc = self._pinned_arc(pin.student_id, pin.slot, "Manuelle Zuweisung")
            key = ConstraintKey.manual(pin.student_id, pin.slot)
            self._constraints[key] = Bound.exactly(1)
            self._variables[arc].coefficients[key] = 1

    def _c7_forbidden_assignments(self, forbidden: Iterable[ForbiddenAssignment]) -> None:
        """Ausschluss: eigener Constraint = 0. Veraltete Ausschlüsse werden übersprungen."""
        for pin in forbidden:
            if self.data.student(pin.student_id) is None or pin.slot not in self.catalog:
                logger.warning(
                    f"Ausschluss ignoriert (unbekannte Daten): "
                    f"{pin.student_id} → {pin.slot}")
                continue
            if pin.slot == SlotKey.overflow():
                logger.warning(f"Ausschluss auf Überlauf ignoriert: {pin.student_id}")
                continue
            arc = self._pinned_arc(pin.student_id, pin.slot, "Ausschluss")
            key = ConstraintKey.forbidden(pin.student_id, pin.slot)
            self._constraints[key] = Bound.exactly(0)
            self._variables[arc].coefficients[key] = 1

    # ─── Bögen ────────────────────────────────────────────────────────────────

    def _create_arcs(self) -> None:
        """Pro Bewerbung: Ränge 6..1 (absteigend), danach der Überlauf."""
        for student in self.data.students:
            for rank in range(NUM_PREFERENCES, 0, -1):
                pref = student.preferences[rank - 1]
                slot = self.catalog[pref] if pref is not None else self.catalog.unlisted(rank)
                self._add_arc(student, slot, self._arc_cost(slot, rank))
            self._add_arc(student, self.catalog.overflow, self.penalty)

    def _arc_cost(self, slot: Slot, rank: int) -> int:
        """Rang-Gewicht; Abkommen ohne Skalierung zahlen den rohen Rang."""
        if slot.key == SlotKey.overflow():
            return self.penalty
        if slot.non_scaling:
            return rank
        return self.weights[rank - 1]

    def _worst_cost(self, slot: Slot) -> int:
        return max(self._arc_cost(slot, rank) for rank in range(1, NUM_PREFERENCES + 1))

    def _add_arc(self, student: Student, slot: Slot, cost: int) -> ArcKey:
        sem = student.cohort
        arc = ArcKey(sem, student.id, slot.key)
        coefficients = {
            ConstraintKey.student(sem, student.id): 1,
            ConstraintKey.slot(sem, slot.key): 1,
            ConstraintKey.slot_level(sem, slot.key, student.level): 1,
        }
        if slot.agreement is not None:
            coefficients[ConstraintKey.agreement(sem, slot.agreement)] = 1
        if slot.is_faculty_constrained and student.faculty is not None:
            fkey = ConstraintKey.slot_faculty(sem, slot.key, student.faculty)
            if fkey in self._constraints:
                coefficients[fkey] = 1

        missing = [k for k in coefficients if k not in self._constraints]
        if missing:
            raise ModelStructureError(
                f"Bogen {arc.name} verweist auf unbekannte Constraints: "
                f"{', '.join(str(k) for k in missing)}")
        self._variables[arc] = ArcVariable(cost=cost, coefficients=coefficients)
        return arc

    def _pinned_arc(self, student_id: int, slot_key: SlotKey, what: str) -> ArcKey:
        """Bogen eines Pins; fehlt er (Slot nie gewählt), wird er nachgebaut."""
        student = self.data.student(student_id)
        slot = self.catalog.get(slot_key)
        if student is None or slot is None:
            raise ModelStructureError(
                f"{what} {student_id} → {slot_key}: Bewerbung oder Slot nicht im Modell")
        arc = ArcKey(student.cohort, student.id, slot.key)
        if arc not in self._variables:
            logger.debug(f"{what}: Bogen {arc.name} nachgebaut (Slot nicht gewählt)")
            self._add_arc(student, slot, self._worst_cost(slot))
        if arc not in self._variables:
            raise ModelStructureError(f"{what}: Bogen {arc.name} fehlt im Modell")
        return arc


def constraint_kinds(model: AssignmentModel) -> dict[ConstraintKind, int]:
    """Anzahl Constraints je Art (Diagnose-Ausgabe)."""
    counts: dict[ConstraintKind, int] = {}
    for key in model.constraints:
        counts[key.kind] = counts.get(key.kind, 0) + 1
    return counts
