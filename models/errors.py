"""Fehlerklassen der Platzvergabe.

Datenfehler (unbekannte Fakultät, fehlerhafte Zeile) werden nur geloggt.
Alles, was einen Durchlauf abbrechen muss, leitet von PlacementError ab.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from models.placement_data import FeasibilityReport


class PlacementError(Exception):
    """Basisklasse aller Abbruchfehler eines Platzvergabe-Durchlaufs."""


class TableImportError(PlacementError):
    """Quelldatei unbrauchbar (fehlende Spalten, keine Datenzeilen, falsches Format)."""


class DuplicatePinError(PlacementError):
    """Ein Ausschluss (Bewerbung, Slot) wurde doppelt registriert."""


class PinFeasibilityError(PlacementError):
    """Manuelle Zuweisungen verletzen Kapazitäten; trägt den vollständigen Report."""

    def __init__(self, report: "FeasibilityReport") -> None:
        self.report = report
        super().__init__(
            f"Manuelle Zuweisungen nicht erfüllbar ({len(report.errors)} Fehler)"
        )


class ModelStructureError(PlacementError):
    """Modell und Pins passen nicht zusammen (erwarteter Bogen fehlt).

    Kein Kapazitätskonflikt, sondern ein Defekt im Modellaufbau.
    """


class SolverInfeasibleError(PlacementError):
    """Der Solver hat keine zulässige Lösung gefunden."""


class SolverTimeoutError(PlacementError):
    """Zeitlimit erreicht, ohne dass eine Lösung gefunden oder Unlösbarkeit bewiesen wurde.

    Kein Befund über die Daten: mehr Zeit oder Kerne können helfen.
    """
