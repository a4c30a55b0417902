"""PlacementSession: Schnittstelle für CLI/UI.

Hält den aktuellen Datenstand, die Konfiguration und die Pins. Lösungsläufe
arbeiten immer auf einer Zeitpunkt-Kopie der Pins; ein neuer asynchroner
Lauf ersetzt ältere, deren Callbacks dann unterdrückt werden.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Optional

from analysis.result_interpreter import PlacementReport
from config.schema import PlacementConfig
from models.keys import SlotKey
from models.placement_data import FeasibilityReport, PlacementData
from solver.feasibility import FeasibilityVerifier
from solver.pinning import ForbiddenAssignment, ManualAssignment, PinManager
from solver.placement_solver import PlacementSolver

logger = logging.getLogger(__name__)


class PlacementSession:
    """Manuelle Zuweisungen verwalten, prüfen und Lösungsläufe starten."""

    def __init__(
        self,
        data: PlacementData,
        config: Optional[PlacementConfig] = None,
        pins: Optional[PinManager] = None,
    ) -> None:
        self.data = data
        self.config = config or PlacementConfig()
        self.pins = pins or PinManager()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._generation = 0
        self._pending: Optional[Future] = None
        self._lock = threading.Lock()

    def reload(self, data: PlacementData) -> None:
        """Neuer Datenstand; Pins bleiben und werden beim nächsten Lauf neu geprüft."""
        self.data = data

    # ─── Pins ───

    def pin(self, student_id: int, slot: SlotKey) -> bool:
        """Setzt/aktualisiert die manuelle Zuweisung einer Bewerbung."""
        return self.pins.add_pin(ManualAssignment(student_id=student_id, slot=slot))

    def unpin(self, student_id: int) -> bool:
        return self.pins.remove_pin(student_id)

    def forbid(self, student_id: int, slot: SlotKey) -> None:
        self.pins.add_forbidden(ForbiddenAssignment(student_id=student_id, slot=slot))

    def allow(self, student_id: int, slot: SlotKey) -> bool:
        return self.pins.remove_forbidden(student_id, slot)

    def list_pins(self) -> tuple[list[ManualAssignment], list[ForbiddenAssignment]]:
        return self.pins.get_pins(), self.pins.get_forbidden()

    def save_pins(self, path: Path) -> None:
        self.pins.save_json(path)

    def load_pins(self, path: Path) -> None:
        self.pins.load_json(path)

    # ─── Läufe ───

    def check(self) -> FeasibilityReport:
        snapshot = self.pins.snapshot()
        return FeasibilityVerifier(self.data).check(snapshot.manual, snapshot.forbidden)

    def run(self) -> PlacementReport:
        """Synchroner Lauf (blockiert bis der Solver fertig ist)."""
        return PlacementSolver(self.data, self.config).solve(self.pins.snapshot())

    def submit(
        self, callback: Optional[Callable[[Future], None]] = None
    ) -> "Future[PlacementReport]":
        """Startet einen Lauf im Hintergrund und kehrt sofort zurück.

        Der Callback erhält das Future, sobald der Lauf fertig ist, aber nur
        wenn in der Zwischenzeit kein neuerer Lauf gestartet wurde.
        """
        data, config, pins = self.data, self.config, self.pins.snapshot()
        with self._lock:
            self._generation += 1
            generation = self._generation
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="placement-solve")
            if self._pending is not None:
                # noch nicht gestartete Läufe gar nicht erst rechnen
                self._pending.cancel()
            future = self._executor.submit(
                lambda: PlacementSolver(data, config).solve(pins))
            self._pending = future

        def done(fut: Future) -> None:
            if generation != self._generation:
                logger.info(f"Lauf #{generation} verworfen (neuerer Lauf gestartet)")
                return
            if callback is not None:
                callback(fut)

        future.add_done_callback(done)
        return future

    def shutdown(self) -> None:
        with self._lock:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None
