"""Post-Solve Validierung der fertigen Platzvergabe.

Zählt die übernommene Zuweisung unabhängig vom Solver nach (Slot, Niveau,
Fakultät, Abkommen, je Semester) als Sicherheitsnetz.
"""

from collections import Counter
from typing import TYPE_CHECKING, Literal, Optional

from pydantic import BaseModel

from analysis.result_interpreter import PlacementReport, StudentOutcome
from models.enums import Semester
from models.keys import SlotKey
from models.placement_data import PlacementData

if TYPE_CHECKING:
    from solver.pinning import PinSet


class ValidationViolation(BaseModel):
    """Eine einzelne Constraint-Verletzung."""

    severity: Literal["error", "warning"]
    constraint: str      # z.B. "slot_capacity"
    description: str
    entity: str          # Slot / Abkommen / Bewerbung


class ValidationReport(BaseModel):
    """Ergebnis der Post-Solve Validierung."""

    violations: list[ValidationViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        errors = [v for v in self.violations if v.severity == "error"]
        warnings = [v for v in self.violations if v.severity == "warning"]

        status = (
            "[bold green]✓ VALIDE[/bold green]"
            if self.is_valid
            else "[bold red]✗ VERLETZUNGEN GEFUNDEN[/bold red]"
        )
        lines = [status, f"Fehler: {len(errors)} | Warnungen: {len(warnings)}"]
        console.print(Panel("\n".join(lines), title="Lösung-Validierung", border_style="cyan"))

        if not self.violations:
            console.print("[dim]Keine Verletzungen gefunden.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Constraint", width=20)
        table.add_column("Entität", width=14)
        table.add_column("Beschreibung")

        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.constraint,
                v.entity,
                v.description,
            )
        console.print(table)


class SolutionValidator:
    """Prüft einen fertigen PlacementReport auf Kapazitätsverletzungen."""

    def validate(
        self,
        report: PlacementReport,
        data: PlacementData,
        pins: Optional["PinSet"] = None,
    ) -> ValidationReport:
        """Führt alle Validierungschecks durch und gibt einen ValidationReport zurück."""
        violations: list[ValidationViolation] = []
        placed = [o for o in report.outcomes if o.slot is not None]

        violations.extend(self._check_exactly_one(report))
        violations.extend(self._check_slot_capacity(placed, data))
        violations.extend(self._check_agreement_capacity(placed, data))
        violations.extend(self._check_faculty_capacity(placed, data))
        if pins is not None:
            violations.extend(self._check_pins(report, pins))

        has_errors = any(v.severity == "error" for v in violations)
        return ValidationReport(violations=violations, is_valid=not has_errors)

    # ── Einzelne Prüfungen ────────────────────────────────────────────────────

    def _check_exactly_one(self, report: PlacementReport) -> list[ValidationViolation]:
        """Jede Bewerbung hat genau ein Ergebnis (ggf. Überlauf)."""
        return [
            ValidationViolation(
                severity="error",
                constraint="exactly_one",
                entity=str(o.student_id),
                description=f"{o.chosen_arcs} gewählte Slots statt genau einem.",
            )
            for o in report.outcomes if o.chosen_arcs != 1
        ]

    def _check_slot_capacity(
        self, placed: list[StudentOutcome], data: PlacementData
    ) -> list[ValidationViolation]:
        """Belegung pro Slot und pro Slot × Niveau ≤ Kapazität."""
        violations: list[ValidationViolation] = []
        totals: Counter = Counter()
        levels: Counter = Counter()
        for o in placed:
            student = data.student(o.student_id)
            totals[(o.slot, o.semester)] += 1
            if student is not None:
                levels[(o.slot, o.semester, student.level)] += 1

        for (key, sem), count in totals.items():
            limit = data.catalog[key].capacity(sem)
            if count > limit:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="slot_capacity",
                    entity=str(key),
                    description=f"{sem.label}: {count}/{limit} Plätze belegt.",
                ))
        for (key, sem, level), count in levels.items():
            limit = data.catalog[key].level_capacity(sem, level)
            if count > limit:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="slot_level_capacity",
                    entity=str(key),
                    description=f"{sem.label}, {level.value}: {count}/{limit} Plätze belegt.",
                ))
        return violations

    def _check_agreement_capacity(
        self, placed: list[StudentOutcome], data: PlacementData
    ) -> list[ValidationViolation]:
        """Summe über alle Slots eines Abkommens ≤ Abkommens-Kapazität."""
        violations: list[ValidationViolation] = []
        counts: Counter = Counter(
            (o.slot.agreement, o.semester) for o in placed if o.slot.agreement is not None
        )
        for (agreement, sem), count in counts.items():
            limit = data.catalog.agreement_capacity(agreement, sem)
            if count > limit:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="agreement_capacity",
                    entity=str(agreement),
                    description=f"{sem.label}: {count}/{limit} Plätze belegt.",
                ))
        return violations

    def _check_faculty_capacity(
        self, placed: list[StudentOutcome], data: PlacementData
    ) -> list[ValidationViolation]:
        """Fakultätsgrenzen (nur positive) je Slot und Semester."""
        violations: list[ValidationViolation] = []
        counts: Counter = Counter()
        for o in placed:
            student = data.student(o.student_id)
            slot = data.catalog[o.slot]
            if student is None or student.faculty not in slot.faculty_limits:
                continue
            counts[(o.slot, o.semester, student.faculty)] += 1

        for (key, sem, faculty), count in counts.items():
            limit = data.catalog[key].faculty_limits[faculty]
            if count > limit:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="slot_faculty_capacity",
                    entity=str(key),
                    description=(
                        f"{sem.label}, Fakultät {faculty.value}: "
                        f"{count}/{limit} Plätze belegt."
                    ),
                ))
        return violations

    def _check_pins(
        self, report: PlacementReport, pins: "PinSet"
    ) -> list[ValidationViolation]:
        """Manuelle Zuweisungen eingehalten, Ausschlüsse nicht gewählt."""
        violations: list[ValidationViolation] = []
        for pin in pins.manual:
            o = report.outcome(pin.student_id)
            if o is not None and o.slot != pin.slot:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="manual_assignment",
                    entity=str(pin.student_id),
                    description=f"Manuell auf {pin.slot} gesetzt, erhalten: {o.slot}.",
                ))
        for pin in pins.forbidden:
            if pin.slot == SlotKey.overflow():
                continue
            o = report.outcome(pin.student_id)
            if o is not None and o.slot == pin.slot:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="forbidden_assignment",
                    entity=str(pin.student_id),
                    description=f"Ausgeschlossener Slot {pin.slot} zugewiesen.",
                ))
        return violations


def count_by_semester(report: PlacementReport) -> dict[Semester, int]:
    """Platzierte Bewerbungen je Semester (für Zusammenfassungen)."""
    counts = {sem: 0 for sem in Semester}
    for o in report.assignments:
        counts[o.semester] += 1
    return counts
