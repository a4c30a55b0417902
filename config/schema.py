from pydantic import BaseModel, Field, field_validator


# ─── KATALOG ───

class CatalogConfig(BaseModel):
    """Einstellungen für den Aufbau des Platz-Katalogs."""
    # Kapazität der synthetischen Slots (Überlauf + "nicht angegeben"-Ränge).
    # PlacementData.build hebt den Wert auf die Zahl der Bewerbungen an.
    synthetic_capacity: int = Field(10000, ge=1,
        description="Kapazität der synthetischen Slots (praktisch unbegrenzt)")
    # Abkommenstypen, deren Bögen immer mit dem rohen Rang (1..6) bewertet werden,
    # unabhängig von den konfigurierten Präferenzgewichten. Leer = alle skalieren.
    non_scaling_agreement_types: list[str] = Field(
        default_factory=list,
        description="Abkommenstypen ohne Gewichts-Skalierung (z.B. 'Exchange I')")


# ─── SOLVER ───

class SolverConfig(BaseModel):
    """Solver-Konfiguration und Präferenzgewichte."""
    # Kosten pro Präferenzrang (Index 0 = 1. Wahl). Höher = stärker vermieden.
    preference_weights: list[int] = Field(
        default=[1, 2, 3, 4, 5, 6],
        description="Kosten pro Präferenzrang 1..6 (nicht negativ)")
    # Zeitlimit für den Solver in Sekunden
    time_limit_seconds: int = Field(60, ge=1, le=3600,
        description="Zeitlimit Solver (Sekunden)")
    # Anzahl CPU-Kerne (0 = automatisch alle nutzen)
    num_workers: int = Field(0, ge=0,
        description="CPU-Kerne (0=automatisch)")
    # Ab diesem Variablenwert gilt ein Bogen als gewählt
    decision_threshold: float = Field(0.9, gt=0.0, lt=1.0,
        description="Schwellwert für gewählte Bögen")

    @field_validator("preference_weights")
    @classmethod
    def validate_weights(cls, v: list[int]) -> list[int]:
        if len(v) != 6:
            raise ValueError(
                f"Genau 6 Präferenzgewichte erwartet, erhalten: {len(v)}")
        if any(w < 0 for w in v):
            raise ValueError(f"Präferenzgewichte dürfen nicht negativ sein: {v}")
        return v


# ─── GESAMT-CONFIG ───

class PlacementConfig(BaseModel):
    """Gesamtkonfiguration eines Platzvergabe-Durchlaufs."""
    # Bezeichnung der Ausschreibung (nur Anzeige)
    programme_name: str = Field("Exchange placement",
        description="Bezeichnung der Ausschreibung")
    # Akademisches Jahr (nur Anzeige / Export)
    academic_year: str = Field("", description="Akademisches Jahr")
    # Katalog-Einstellungen
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    # Solver-Konfiguration und Gewichte
    solver: SolverConfig = Field(default_factory=SolverConfig)
