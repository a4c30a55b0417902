"""PinManager – manuelle Zuweisungen und Ausschlüsse vor dem Solver-Lauf.

Eine manuelle Zuweisung ist eine harte Constraint: Die Bewerbung MUSS genau
diesen Slot erhalten. Ein Ausschluss verbietet genau einen Slot für eine
Bewerbung. Pins überleben ein Neuladen der Quelldaten und werden vor jedem
Lauf gegen den aktuellen Datenstand geprüft.
"""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator

from models.errors import DuplicatePinError
from models.keys import SlotKey


class _Pin(BaseModel):
    model_config = ConfigDict(frozen=True)

    student_id: int   # Bewerbungs-ID ("ID of application")
    slot: SlotKey     # Ziel-Slot, z.B. "101_CS"

    @field_validator("slot", mode="before")
    @classmethod
    def parse_slot(cls, v: Any) -> Any:
        if isinstance(v, str):
            return SlotKey.parse(v)
        return v

    @field_serializer("slot")
    def serialize_slot(self, slot: SlotKey) -> str:
        return str(slot)


class ManualAssignment(_Pin):
    """Bewerbung wird fest auf einen Slot gesetzt."""


class ForbiddenAssignment(_Pin):
    """Bewerbung darf einen Slot nicht erhalten."""


class PinSet(BaseModel):
    """Zeitpunkt-Kopie aller Pins für einen Durchlauf."""

    model_config = ConfigDict(frozen=True)

    manual: tuple[ManualAssignment, ...] = ()
    forbidden: tuple[ForbiddenAssignment, ...] = ()


class PinManager:
    """Verwaltet manuelle Zuweisungen und Ausschlüsse (ein Schreiber)."""

    def __init__(self) -> None:
        self._pins: list[ManualAssignment] = []
        self._forbidden: list[ForbiddenAssignment] = []

    # ─── Manuelle Zuweisungen ───

    def add_pin(self, pin: ManualAssignment) -> bool:
        """Fügt eine Zuweisung hinzu. Ersetzt einen bestehenden Pin derselben Bewerbung.

        Gibt True zurück wenn ein bestehender Pin aktualisiert wurde.
        """
        before = len(self._pins)
        self._pins = [p for p in self._pins if p.student_id != pin.student_id]
        self._pins.append(pin)
        return len(self._pins) <= before

    def remove_pin(self, student_id: int) -> bool:
        """Entfernt den Pin einer Bewerbung. True wenn ein Pin entfernt wurde."""
        before = len(self._pins)
        self._pins = [p for p in self._pins if p.student_id != student_id]
        return len(self._pins) < before

    def get_pins(self) -> list[ManualAssignment]:
        """Gibt alle manuellen Zuweisungen zurück."""
        return list(self._pins)

    # ─── Ausschlüsse ───

    def add_forbidden(self, pin: ForbiddenAssignment) -> None:
        """Registriert einen Ausschluss. Doppelte Paare → DuplicatePinError."""
        if pin in self._forbidden:
            raise DuplicatePinError(
                f"Ausschluss bereits vorhanden: Bewerbung {pin.student_id} → {pin.slot}"
            )
        self._forbidden.append(pin)

    def remove_forbidden(self, student_id: int, slot: SlotKey) -> bool:
        """Entfernt einen Ausschluss. True wenn einer entfernt wurde."""
        before = len(self._forbidden)
        self._forbidden = [
            p for p in self._forbidden
            if not (p.student_id == student_id and p.slot == slot)
        ]
        return len(self._forbidden) < before

    def get_forbidden(self) -> list[ForbiddenAssignment]:
        """Gibt alle Ausschlüsse zurück."""
        return list(self._forbidden)

    def snapshot(self) -> PinSet:
        """Unveränderliche Kopie für einen Modellaufbau."""
        return PinSet(manual=tuple(self._pins), forbidden=tuple(self._forbidden))

    # ─── Persistenz ───

    def save_json(self, path: Path) -> None:
        """Speichert alle Pins als JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "manual": [p.model_dump() for p in self._pins],
            "forbidden": [p.model_dump() for p in self._forbidden],
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def load_json(self, path: Path) -> None:
        """Lädt Pins aus einer JSON-Datei (überschreibt aktuelle Pins)."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Pin-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        self._pins = []
        self._forbidden = []
        for item in data.get("manual", []):
            self.add_pin(ManualAssignment(**item))
        for item in data.get("forbidden", []):
            self.add_forbidden(ForbiddenAssignment(**item))

    def __len__(self) -> int:
        return len(self._pins) + len(self._forbidden)

    def __repr__(self) -> str:
        return (f"PinManager({len(self._pins)} pins, "
                f"{len(self._forbidden)} forbidden)")
