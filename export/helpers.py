"""Gemeinsame Hilfsfunktionen für CSV- und Excel-Export."""

from collections import defaultdict
from datetime import date

from analysis.result_interpreter import PlacementReport
from models.enums import Semester
from models.keys import SlotKey
from models.placement_data import PlacementData

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    "header":    "2E6DA4",
    "rank_1":    "B3FFB3",
    "rank_2":    "D9FFB3",
    "rank_3":    "FFF2B3",
    "rank_late": "FFD4B3",
    "manual":    "D4B3FF",
    "unmatched": "FF9999",
    "full":      "FFCCCC",
}


def today_str() -> str:
    """Gibt das heutige Datum als DD.MM.YYYY zurück."""
    return date.today().strftime("%d.%m.%Y")


def rank_color(rank) -> str:
    """Zellfarbe für einen erfüllten Präferenzrang (None = außerhalb der Liste)."""
    if rank is None:
        return COLORS["manual"]
    if rank <= 3:
        return COLORS[f"rank_{rank}"]
    return COLORS["rank_late"]


# ─── Auslastung ───────────────────────────────────────────────────────────────

def slot_usage(
    report: PlacementReport, data: PlacementData
) -> list[tuple[SlotKey, Semester, int, int]]:
    """(Slot, Semester, belegt, Kapazität) für alle echten Slots mit Kapazität > 0."""
    used: dict[tuple[SlotKey, Semester], int] = defaultdict(int)
    for o in report.assignments:
        used[(o.slot, o.semester)] += 1

    rows = []
    for slot in data.catalog.real_slots:
        for sem in Semester:
            capacity = slot.capacity(sem)
            if capacity > 0 or used.get((slot.key, sem)):
                rows.append((slot.key, sem, used.get((slot.key, sem), 0), capacity))
    return rows
