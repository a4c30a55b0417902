"""PlacementData: unveränderlicher Stand eines Durchlaufs (Katalog + Bewerbungen)."""

import logging
from functools import cached_property
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

from config.schema import PlacementConfig
from models.catalog import PlacementCatalog
from models.enums import Semester
from models.student import ApplicantRecord, Student
from models.university import UniversityRecord

logger = logging.getLogger(__name__)

class FeasibilityReport(BaseModel):
    """Ergebnis des Machbarkeits-Checks der manuellen Zuweisungen."""

    is_feasible: bool
    errors: list[str]      # Kritische Probleme (Lösung unmöglich)
    warnings: list[str]    # Hinweise (z.B. veraltete Ausschlüsse)

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        if self.is_feasible:
            status = "[bold green]✓ ERFÜLLBAR[/bold green]"
        else:
            status = "[bold red]✗ NICHT ERFÜLLBAR[/bold red]"

        lines = [status]
        if self.errors:
            lines.append("\n[red bold]Fehler (kritisch):[/red bold]")
            for e in self.errors:
                lines.append(f"  [red]• {e}[/red]")
        if self.warnings:
            lines.append("\n[yellow bold]Warnungen:[/yellow bold]")
            for w in self.warnings:
                lines.append(f"  [yellow]• {w}[/yellow]")
        if not self.errors and not self.warnings:
            lines.append("[dim]Keine Probleme gefunden.[/dim]")

        console.print(Panel("\n".join(lines), title="Machbarkeits-Check", border_style="cyan"))


class PlacementData(BaseModel):
    """Katalog und aufgelöste Bewerbungen eines Durchlaufs.

    Wird bei jedem Neuladen einer Quelldatei komplett neu erzeugt und an
    Verifier, ModelBuilder und Interpreter explizit übergeben.
    """

    model_config = ConfigDict(frozen=True)

    catalog: PlacementCatalog
    students: list[Student]

    @classmethod
    def build(
        cls,
        universities: Iterable[UniversityRecord],
        applicants: Iterable[ApplicantRecord],
        config: Optional[PlacementConfig] = None,
    ) -> "PlacementData":
        """Baut Katalog und Präferenzen aus den importierten Zeilen auf.

        Die synthetischen Slots (Überlauf, "nicht angegeben") fassen immer
        mindestens alle Bewerbungen, auch wenn die Konfiguration weniger angibt.
        """
        from solver.preferences import resolve_students

        config = config or PlacementConfig()
        applicants = list(applicants)
        catalog_config = config.catalog
        if catalog_config.synthetic_capacity < len(applicants):
            logger.info(
                f"Kapazität synthetischer Slots auf {len(applicants)} angehoben "
                f"(konfiguriert: {catalog_config.synthetic_capacity})")
            catalog_config = catalog_config.model_copy(
                update={"synthetic_capacity": len(applicants)})
        catalog = PlacementCatalog.build(universities, catalog_config)
        return cls(catalog=catalog, students=resolve_students(applicants, catalog))

    # ─── Lookups ───

    @cached_property
    def student_index(self) -> dict[int, Student]:
        return {s.id: s for s in self.students}

    def student(self, student_id: int) -> Optional[Student]:
        return self.student_index.get(student_id)

    def cohort(self, semester: Semester) -> list[Student]:
        """Bewerbungen einer Semester-Kohorte in Ladereihenfolge."""
        return [s for s in self.students if s.cohort is semester]

    # ─── Übersicht ───

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        real = self.catalog.real_slots
        agreements = {s.agreement for s in real}
        first = len(self.cohort(Semester.FIRST))
        no_faculty = sum(1 for s in self.students if s.faculty is None)
        no_prefs = sum(1 for s in self.students if s.listed_count == 0)
        lines = [
            f"Abkommen: {len(agreements)}",
            f"Slots: {len(real)} "
            f"({sum(1 for s in real if s.is_faculty_constrained)} mit Fakultätsgrenzen)",
            f"Bewerbungen: {len(self.students)} "
            f"({first} im 1. Semester, {len(self.students) - first} im 2. Semester)",
            f"Ohne gültige Präferenz: {no_prefs}" if no_prefs else "",
            f"Ohne Fakultät: {no_faculty}" if no_faculty else "",
        ]
        return "\n".join(l for l in lines if l)
