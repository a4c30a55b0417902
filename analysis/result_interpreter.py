"""Auswertung einer Solver-Lösung: Zuweisungen, Rang-Statistik, Export-Zeilen."""

import logging
from typing import Optional

from pydantic import BaseModel

from config.defaults import NUM_PREFERENCES
from models.enums import Semester
from models.keys import ArcKey, SlotKey
from models.placement_data import PlacementData
from models.student import Student

logger = logging.getLogger(__name__)


# Spaltenreihenfolge des CSV-Exports
EXPORT_HEADER = [
    "Application ID",
    "Student number",
    "Student name",
    "University",
    "Agreement-ID",
    "Semester",
    "Preference",
    "Programme",
    "Study level",
    "Faculty",
    "Agreement-type",
]


class StudentOutcome(BaseModel):
    """Ergebnis einer Bewerbung nach dem Solver-Lauf."""

    student_id: int
    semester: Semester
    slot: Optional[SlotKey] = None   # None: kein Bogen über dem Schwellwert
    rank: Optional[int] = None       # 1..6 oder None (nicht unter den Präferenzen)
    listed_count: int = 0
    chosen_arcs: int = 1             # Anzahl gewählter Bögen (sollte 1 sein)

    @property
    def matched(self) -> bool:
        return self.slot is not None and self.slot.is_real

    @property
    def score(self) -> int:
        """Beitrag zum Präferenz-Durchschnitt: Rang, sonst gültige Präferenzen + 1."""
        if self.matched and self.rank is not None:
            return self.rank
        return self.listed_count + 1


class ExportRecord(BaseModel):
    """Eine CSV-Zeile pro Zuweisung (Feldreihenfolge = EXPORT_HEADER)."""

    application_id: int
    student_number: str = ""
    student_name: str = ""
    university: str
    agreement_id: int
    semester: int
    preference: Optional[int] = None
    programme: str = ""
    study_level: str = ""
    faculty: str = ""
    agreement_type: str = ""

    def as_row(self) -> list:
        return [
            self.application_id,
            self.student_number,
            self.student_name,
            self.university,
            self.agreement_id,
            self.semester,
            self.preference if self.preference is not None else "",
            self.programme,
            self.study_level,
            self.faculty,
            self.agreement_type,
        ]


class PlacementReport(BaseModel):
    """Komplettes Ergebnis eines Durchlaufs."""

    outcomes: list[StudentOutcome]            # nach Bewerbungs-ID sortiert
    rank_counts: dict[int, int]               # Rang 1..6 → Anzahl
    export_records: list[ExportRecord]
    solver_status: str = ""
    objective_value: Optional[float] = None
    solve_time_seconds: float = 0.0

    @property
    def total_students(self) -> int:
        return len(self.outcomes)

    @property
    def assignments(self) -> list[StudentOutcome]:
        """Erfolgreich platzierte Bewerbungen, nach ID sortiert."""
        return [o for o in self.outcomes if o.matched]

    @property
    def unmatched(self) -> list[StudentOutcome]:
        return [o for o in self.outcomes if not o.matched]

    @property
    def unmatched_count(self) -> int:
        return len(self.unmatched)

    @property
    def average_preference(self) -> float:
        if not self.outcomes:
            return 0.0
        return sum(o.score for o in self.outcomes) / len(self.outcomes)

    def outcome(self, student_id: int) -> Optional[StudentOutcome]:
        for o in self.outcomes:
            if o.student_id == student_id:
                return o
        return None

    def print_rich(self, data: Optional[PlacementData] = None, limit: int = 50) -> None:
        """Zusammenfassung, nicht platzierte Bewerbungen und Zuweisungstabelle."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        lines = [f"{rank}. Wahl: {self.rank_counts.get(rank, 0)}"
                 for rank in range(1, NUM_PREFERENCES + 1)]
        lines.append(f"[bold]Nicht platziert: {self.unmatched_count}[/bold]")
        lines.append(f"[bold]Bewerbungen gesamt: {self.total_students}[/bold]")
        lines.append(f"[bold]Durchschnittliche Präferenz: "
                     f"{self.average_preference:.3f}[/bold]")
        if self.solver_status:
            lines.append(f"[dim]Solver: {self.solver_status}, "
                         f"{self.solve_time_seconds:.1f}s[/dim]")
        console.print(Panel("\n".join(lines), title="Ergebnis", border_style="cyan"))

        def student_label(student_id: int) -> str:
            student = data.student(student_id) if data else None
            return student.label if student else str(student_id)

        if self.unmatched:
            table = Table(title="Nicht platziert", box=box.SIMPLE)
            table.add_column("Bewerbung")
            table.add_column("Präferenzen", justify="right")
            for o in self.unmatched:
                table.add_row(student_label(o.student_id), str(o.listed_count))
            console.print(table)

        table = Table(title="Zuweisungen", box=box.SIMPLE_HEAD)
        table.add_column("Bewerbung")
        table.add_column("Slot")
        table.add_column("Präferenz", justify="right")
        for o in self.assignments[:limit]:
            slot = data.catalog.get(o.slot) if data else None
            table.add_row(
                student_label(o.student_id),
                slot.label if slot else str(o.slot),
                str(o.rank) if o.rank else "manuell",
            )
        console.print(table)
        if len(self.assignments) > limit:
            console.print(f"[dim]… {len(self.assignments) - limit} weitere Zuweisungen[/dim]")


# ─── Interpreter ──────────────────────────────────────────────────────────────

class ResultInterpreter:
    """Dekodiert Variablenwerte strukturell in Ergebnisse pro Bewerbung."""

    def __init__(self, data: PlacementData, threshold: float = 0.9) -> None:
        self.data = data
        self.threshold = threshold

    def interpret(self, values: dict[ArcKey, float], **solver_info) -> PlacementReport:
        chosen: dict[int, list[SlotKey]] = {}
        for arc, value in values.items():
            if value > self.threshold:
                chosen.setdefault(arc.student_id, []).append(arc.slot)

        outcomes: list[StudentOutcome] = []
        rank_counts = {rank: 0 for rank in range(1, NUM_PREFERENCES + 1)}
        records: list[ExportRecord] = []

        for student in sorted(self.data.students, key=lambda s: s.id):
            slots = chosen.get(student.id, [])
            if len(slots) != 1:
                logger.error(
                    f"Bewerbung {student.id}: {len(slots)} gewählte Bögen statt genau einem")
            slot = slots[0] if slots else None
            rank = student.rank_of(slot) if slot is not None and slot.is_real else None
            outcome = StudentOutcome(
                student_id=student.id,
                semester=student.cohort,
                slot=slot,
                rank=rank,
                listed_count=student.listed_count,
                chosen_arcs=len(slots),
            )
            outcomes.append(outcome)
            if outcome.matched:
                if rank is not None:
                    rank_counts[rank] += 1
                records.append(self._export_record(student, slot, rank))

        unknown = set(chosen) - {s.id for s in self.data.students}
        if unknown:
            logger.error(f"Lösung enthält unbekannte Bewerbungen: {sorted(unknown)}")

        return PlacementReport(
            outcomes=outcomes,
            rank_counts=rank_counts,
            export_records=records,
            **solver_info,
        )

    def _export_record(
        self, student: Student, slot_key: SlotKey, rank: Optional[int]
    ) -> ExportRecord:
        slot = self.data.catalog[slot_key]
        return ExportRecord(
            application_id=student.id,
            student_number=student.student_number,
            student_name=student.full_name,
            university=slot.partner_name or str(slot.key),
            agreement_id=slot.key.agreement_id,
            semester=student.cohort.number,
            preference=rank,
            programme=student.study_field,
            study_level=student.level.value,
            faculty=student.faculty.value if student.faculty else "",
            agreement_type=slot.agreement_type,
        )


def interpret(values: dict[ArcKey, float], data: PlacementData,
              threshold: float = 0.9) -> PlacementReport:
    """Kurzform für ResultInterpreter(data, threshold).interpret(values)."""
    return ResultInterpreter(data, threshold).interpret(values)
