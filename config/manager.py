"""Konfigurationsmanager: Laden, Speichern, Validieren und interaktives Bearbeiten.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.prompt import Confirm, IntPrompt
from rich.table import Table
from rich import box
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.defaults import DEFAULT_PREFERENCE_WEIGHTS
from config.schema import PlacementConfig, SolverConfig

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Austausch-Platzvergabe — Konfiguration
# Version: 1.0
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "catalog": (
        "Katalog",
        "Synthetische Slots (Überlauf, nicht angegebene Ränge) und\n"
        "Abkommenstypen, die immer mit dem rohen Rang bewertet werden.",
    ),
    "solver": (
        "Solver",
        "preference_weights: Kosten pro Rang 1..6. Höher = stärker vermieden.",
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "placement_config.yaml"

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> PlacementConfig:
        """Lade Config aus YAML. Validiert automatisch via Pydantic."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'python main.py config init' aus."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            return PlacementConfig.model_validate(dict(raw or {}))
        except Exception as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e

    def load_or_default(self, path: Optional[Path] = None) -> PlacementConfig:
        """Wie load(), aber ohne Datei wird die Standard-Konfiguration geliefert."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            from config.defaults import default_placement_config
            return default_placement_config()
        return self.load(target)

    # ─── Speichern ───

    def save(self, config: PlacementConfig, path: Optional[Path] = None) -> None:
        """Speichere Config als YAML mit Kommentaren."""
        target = path or self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def _build_commented_yaml(self, config: PlacementConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        solver_map = CommentedMap(cm["solver"])
        solver_map.yaml_add_eol_comment("0 = alle Kerne", "num_workers")
        cm["solver"] = solver_map

        return cm

    # ─── Interaktives Bearbeiten ───

    def edit_weights_interactive(self, config: PlacementConfig) -> PlacementConfig:
        """Präferenzgewichte interaktiv anpassen (leere Eingabe = Standard)."""
        sc = config.solver
        table = Table(title="Präferenzgewichte", box=box.ROUNDED)
        table.add_column("Rang")
        table.add_column("Aktuell")
        table.add_column("Standard")
        for rank, (w, d) in enumerate(
            zip(sc.preference_weights, DEFAULT_PREFERENCE_WEIGHTS), 1
        ):
            table.add_row(str(rank), str(w), str(d))
        console.print(table)

        if Confirm.ask("Auf Standard (1..6) zurücksetzen?", default=False):
            weights = list(DEFAULT_PREFERENCE_WEIGHTS)
        else:
            weights = []
            for rank, current in enumerate(sc.preference_weights, 1):
                value = IntPrompt.ask(f"Gewicht {rank}. Wahl", default=current)
                weights.append(value if value >= 0 else current)

        solver = SolverConfig.model_validate(
            {**sc.model_dump(), "preference_weights": weights}
        )
        config = config.model_copy(update={"solver": solver})
        self.save(config)
        return config
