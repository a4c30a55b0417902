"""Machbarkeits-Check der manuellen Zuweisungen vor dem Solver-Lauf.

Rechnet die Kapazitätsarithmetik des ModelBuilders unabhängig nach, damit
unerfüllbare Pins mit konkreter Fehlermeldung statt als pauschales
INFEASIBLE gemeldet werden. Beide nutzen dieselben Katalog-Zugriffe; die
Tests prüfen, dass Check und Solver nie widersprechen.
"""

import logging
from collections import Counter
from typing import Iterable, Optional

from models.catalog import Slot
from models.enums import Faculty, Semester, StudyLevel
from models.keys import AgreementKey, SlotKey
from models.placement_data import FeasibilityReport, PlacementData
from models.student import Student
from solver.pinning import ForbiddenAssignment, ManualAssignment

logger = logging.getLogger(__name__)


class FeasibilityVerifier:
    """Prüft manuelle Zuweisungen gegen Slot-, Niveau-, Abkommens- und Fakultätsgrenzen.

    Verwendung:
        report = FeasibilityVerifier(data).check(pins.manual, pins.forbidden)
    """

    def __init__(self, data: PlacementData) -> None:
        self.data = data
        self.catalog = data.catalog

    def check(
        self,
        manual: Iterable[ManualAssignment],
        forbidden: Iterable[ForbiddenAssignment] = (),
    ) -> FeasibilityReport:
        """Sammelt alle Verstöße in einem Durchlauf (kein vorzeitiger Abbruch)."""
        errors: list[str] = []
        warnings: list[str] = []
        manual = list(manual)
        forbidden = list(forbidden)

        resolved = self._resolve_manual(manual, errors, warnings)
        self._check_capacities(resolved, errors)
        if self.catalog.has_faculty_constraints:
            self._check_faculties(resolved, errors)
        self._check_multiple_pins(resolved, errors)
        self._check_forbidden(resolved, forbidden, errors, warnings)

        report = FeasibilityReport(
            is_feasible=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )
        logger.debug(
            f"Machbarkeits-Check: {len(manual)} Pins, {len(errors)} Fehler, "
            f"{len(warnings)} Warnungen"
        )
        return report

    # ─── Auflösung ───

    def _resolve_manual(
        self,
        manual: list[ManualAssignment],
        errors: list[str],
        warnings: list[str],
    ) -> list[tuple[Student, Slot]]:
        """Löst Pins auf (Bewerbung, Slot). Identische Pins zählen einmal."""
        resolved: list[tuple[Student, Slot]] = []
        seen: set[tuple[int, SlotKey]] = set()
        for pin in manual:
            student = self.data.student(pin.student_id)
            slot = self.catalog.get(pin.slot)
            if student is None:
                errors.append(f"Manuelle Zuweisung: Bewerbung {pin.student_id} existiert nicht")
                continue
            if slot is None:
                errors.append(
                    f"Manuelle Zuweisung: Slot {pin.slot} für Bewerbung "
                    f"{pin.student_id} existiert nicht")
                continue
            if (student.id, slot.key) in seen:
                warnings.append(
                    f"Manuelle Zuweisung {student.id} → {slot.key} doppelt angegeben")
                continue
            seen.add((student.id, slot.key))
            resolved.append((student, slot))
        return resolved

    # ─── 1. Slot / Niveau / Abkommen (inkrementell) ───

    def _check_capacities(
        self, resolved: list[tuple[Student, Slot]], errors: list[str]
    ) -> None:
        slot_count: Counter[tuple[SlotKey, Semester]] = Counter()
        level_count: Counter[tuple[SlotKey, Semester, StudyLevel]] = Counter()
        agreement_count: Counter[tuple[AgreementKey, Semester]] = Counter()
        reported: set[tuple] = set()

        def exceed(key: tuple, observed: int, limit: int, message: str) -> None:
            if observed > limit and key not in reported:
                reported.add(key)
                errors.append(f"{message} ({observed}/{limit})")

        for student, slot in resolved:
            sem = student.cohort

            slot_count[(slot.key, sem)] += 1
            exceed(
                ("slot", slot.key, sem),
                slot_count[(slot.key, sem)], slot.capacity(sem),
                f"Slot {slot.key}: Kapazität im {sem.label} überschritten",
            )

            level_key = (slot.key, sem, student.level)
            level_count[level_key] += 1
            exceed(
                ("level",) + level_key,
                level_count[level_key], slot.level_capacity(sem, student.level),
                f"Slot {slot.key}: {student.level.value}-Kapazität im "
                f"{sem.label} überschritten",
            )

            if slot.agreement is not None:
                agreement_count[(slot.agreement, sem)] += 1
                exceed(
                    ("agreement", slot.agreement, sem),
                    agreement_count[(slot.agreement, sem)],
                    self.catalog.agreement_capacity(slot.agreement, sem),
                    f"Abkommen {slot.agreement}: Kapazität im {sem.label} überschritten",
                )

    # ─── 2. Fakultäten (über alle Pins) ───

    def _check_faculties(
        self, resolved: list[tuple[Student, Slot]], errors: list[str]
    ) -> None:
        counts: Counter[tuple[SlotKey, Semester, Faculty]] = Counter()
        slots: dict[SlotKey, Slot] = {}
        for student, slot in resolved:
            if student.faculty is None or student.faculty not in slot.faculty_limits:
                continue
            counts[(slot.key, student.cohort, student.faculty)] += 1
            slots[slot.key] = slot

        for (key, sem, faculty), observed in counts.items():
            limit = slots[key].faculty_limits[faculty]
            if observed > limit:
                errors.append(
                    f"Slot {key}: Kapazität für Fakultät {faculty.value} im "
                    f"{sem.label} überschritten ({observed}/{limit})"
                )

    # ─── 3. Mehrfach-Zuweisungen ───

    def _check_multiple_pins(
        self, resolved: list[tuple[Student, Slot]], errors: list[str]
    ) -> None:
        per_student = Counter(student.id for student, _ in resolved)
        for student_id, count in per_student.items():
            if count > 1:
                errors.append(
                    f"Bewerbung {student_id} ist mehrfach manuell zugewiesen ({count}×)"
                )

    # ─── 4. Ausschlüsse ───

    def _check_forbidden(
        self,
        resolved: list[tuple[Student, Slot]],
        forbidden: list[ForbiddenAssignment],
        errors: list[str],
        warnings: list[str],
    ) -> None:
        pinned = {(student.id, slot.key) for student, slot in resolved}
        for pin in forbidden:
            if self.data.student(pin.student_id) is None or pin.slot not in self.catalog:
                warnings.append(
                    f"Ausschluss {pin.student_id} → {pin.slot} verweist auf unbekannte "
                    f"Daten und wird ignoriert"
                )
                continue
            if pin.slot == SlotKey.overflow():
                warnings.append(
                    f"Ausschluss {pin.student_id} → overflow wird ignoriert "
                    f"(Überlauf ist immer erlaubt)"
                )
                continue
            if (pin.student_id, pin.slot) in pinned:
                errors.append(
                    f"Bewerbung {pin.student_id} ist auf {pin.slot} zugewiesen "
                    f"und zugleich ausgeschlossen"
                )


def check_feasibility(
    data: PlacementData,
    manual: Iterable[ManualAssignment],
    forbidden: Optional[Iterable[ForbiddenAssignment]] = None,
) -> FeasibilityReport:
    """Kurzform für FeasibilityVerifier(data).check(...)."""
    return FeasibilityVerifier(data).check(manual, forbidden or ())
