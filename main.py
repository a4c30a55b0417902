"""Austausch-Platzvergabe — Haupt-CLI.

Verwendung:
  python main.py config init                      Standard-Konfiguration anlegen
  python main.py config show                      Konfiguration anzeigen
  python main.py config weights                   Präferenzgewichte bearbeiten
  python main.py check <unis> <bewerbungen>       Daten laden und Übersicht zeigen
  python main.py verify <unis> <bewerbungen>      Manuelle Zuweisungen prüfen
  python main.py solve <unis> <bewerbungen>       Platzvergabe berechnen
  python main.py pin add <bewerbung> <slot>       Bewerbung fest zuweisen
  python main.py pin remove <bewerbung>           Zuweisung entfernen
  python main.py pin list                         Zuweisungen auflisten
  python main.py forbid add <bewerbung> <slot>    Slot für Bewerbung ausschließen
  python main.py forbid remove <bewerbung> <slot> Ausschluss entfernen
  python main.py forbid list                      Ausschlüsse auflisten
"""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()

# Standard-Pfad für gespeicherte Pins
DEFAULT_PINS_JSON = Path("output/pins.json")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=verbose)],
        force=True,
    )


def _load_config():
    """Lädt die Konfiguration (Standardwerte wenn keine Datei existiert)."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    try:
        return mgr, mgr.load_or_default()
    except ValueError as e:
        console.print(f"[red bold]{e}[/red bold]")
        sys.exit(1)


def _load_data(universities: Path, applicants: Path, config):
    """Importiert beide Quelldateien oder bricht mit Fehlermeldung ab."""
    from data.table_import import load_placement_data
    from models.errors import TableImportError

    console.print(f"[bold]Importiere:[/bold] {universities.name}, {applicants.name}")
    try:
        return load_placement_data(universities, applicants, config)
    except TableImportError as e:
        console.print(f"[red bold]Import fehlgeschlagen:[/red bold]\n{e}")
        sys.exit(1)


def _load_pins(pins_path: Path):
    """Lädt die Pin-Datei oder bricht bei unlesbarem Inhalt ab."""
    from models.errors import PlacementError
    from solver.pinning import PinManager
    pins = PinManager()
    if pins_path.exists():
        try:
            pins.load_json(pins_path)
        except (PlacementError, ValueError) as e:
            console.print(f"[red bold]Pin-Datei {pins_path} ungültig:[/red bold]\n{e}")
            sys.exit(1)
    return pins


def _parse_slot(text: str):
    from models.keys import SlotKey
    try:
        return SlotKey.parse(text)
    except ValueError as e:
        raise click.BadParameter(str(e))


_data_files = [
    click.argument("universities", type=click.Path(exists=True, dir_okay=False, path_type=Path)),
    click.argument("applicants", type=click.Path(exists=True, dir_okay=False, path_type=Path)),
]

_pins_option = click.option(
    "--pins", "pins_path", default=str(DEFAULT_PINS_JSON),
    type=click.Path(path_type=Path), help="Pfad zur Pin-Datei (JSON).")


def _with_data_files(f):
    for decorator in reversed(_data_files):
        f = decorator(f)
    return f


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen oder bearbeiten."""


@cmd_config.command("init")
@click.option("--force", is_flag=True, default=False, help="Bestehende Datei überschreiben.")
def config_init(force: bool):
    """Legt die Standard-Konfiguration als YAML an."""
    from config.defaults import default_placement_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check() and not force:
        console.print(
            "[yellow]Eine Konfiguration existiert bereits.[/yellow]\n"
            "Verwenden Sie [bold]--force[/bold] zum Überschreiben."
        )
        return
    mgr.save(default_placement_config())


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    mgr, config = _load_config()

    console.print(Panel(
        f"[bold]{config.programme_name}[/bold]"
        + (f"  |  {config.academic_year}" if config.academic_year else ""),
        title="Platzvergabe-Konfiguration",
        border_style="cyan",
    ))

    table = Table(title="Präferenzgewichte", box=box.ROUNDED)
    table.add_column("Rang")
    table.add_column("Gewicht")
    for rank, w in enumerate(config.solver.preference_weights, 1):
        table.add_row(str(rank), str(w))
    console.print(table)

    cc = config.catalog
    console.print(
        f"\n[bold]Katalog:[/bold] Synthetische Kapazität {cc.synthetic_capacity} | "
        f"Ohne Skalierung: {', '.join(cc.non_scaling_agreement_types) or '–'}"
    )
    sc = config.solver
    console.print(
        f"[bold]Solver:[/bold] Zeitlimit {sc.time_limit_seconds}s | "
        f"Kerne: {sc.num_workers or 'auto'} | "
        f"Schwellwert: {sc.decision_threshold}"
    )


@cmd_config.command("weights")
def config_weights():
    """Bearbeitet die Präferenzgewichte interaktiv."""
    mgr, config = _load_config()
    mgr.edit_weights_interactive(config)


# ─── CHECK / VERIFY ───────────────────────────────────────────────────────────

@click.command("check")
@_with_data_files
def cmd_check(universities: Path, applicants: Path):
    """Lädt beide Quelldateien und zeigt eine Übersicht."""
    mgr, config = _load_config()
    data = _load_data(universities, applicants, config)
    console.print("[green]✓[/green] Import erfolgreich!")
    console.print(f"\n{data.summary()}")


@click.command("verify")
@_with_data_files
@_pins_option
def cmd_verify(universities: Path, applicants: Path, pins_path: Path):
    """Prüft die manuellen Zuweisungen gegen alle Kapazitäten."""
    from solver.session import PlacementSession

    mgr, config = _load_config()
    data = _load_data(universities, applicants, config)
    session = PlacementSession(data, config, _load_pins(pins_path))

    report = session.check()
    report.print_rich()
    sys.exit(0 if report.is_feasible else 1)


# ─── SOLVE ────────────────────────────────────────────────────────────────────

@click.command("solve")
@_with_data_files
@_pins_option
@click.option("--csv", "csv_path", type=click.Path(path_type=Path), default=None,
              help="Zuweisungen als CSV speichern.")
@click.option("--xlsx", "xlsx_path", type=click.Path(path_type=Path), default=None,
              help="Ergebnis als Excel-Datei speichern.")
@click.option("--limit", default=50, help="Max. Zeilen der Zuweisungstabelle.")
def cmd_solve(universities: Path, applicants: Path, pins_path: Path,
              csv_path, xlsx_path, limit: int):
    """Berechnet die Platzvergabe (CP-SAT) und exportiert das Ergebnis."""
    from models.errors import PinFeasibilityError, PlacementError
    from solver.session import PlacementSession

    mgr, config = _load_config()
    data = _load_data(universities, applicants, config)
    console.print(f"\n{data.summary()}\n")
    session = PlacementSession(data, config, _load_pins(pins_path))

    future = session.submit()
    try:
        with console.status("[bold cyan]Solver läuft …[/bold cyan]"):
            report = future.result()
    except PinFeasibilityError as e:
        e.report.print_rich()
        sys.exit(1)
    except PlacementError as e:
        console.print(f"[red bold]{e}[/red bold]")
        sys.exit(1)
    finally:
        session.shutdown()

    report.print_rich(data, limit=limit)

    if csv_path:
        from export.csv_export import CsvExporter
        CsvExporter(report).export(csv_path)
        console.print(f"[green]✓[/green] CSV gespeichert: {csv_path}")
    if xlsx_path:
        from export.excel_export import ExcelExporter
        ExcelExporter(report, data, config).export(xlsx_path)
        console.print(f"[green]✓[/green] Excel gespeichert: {xlsx_path}")


# ─── PIN / FORBID ─────────────────────────────────────────────────────────────

@click.group("pin")
def cmd_pin():
    """Manuelle Zuweisungen verwalten."""


@cmd_pin.command("add")
@click.argument("student_id", type=int)
@click.argument("slot")
@_pins_option
def pin_add(student_id: int, slot: str, pins_path: Path):
    """Weist eine Bewerbung fest einem Slot zu (z.B. 101_CS)."""
    from solver.pinning import ManualAssignment

    pins = _load_pins(pins_path)
    updated = pins.add_pin(ManualAssignment(student_id=student_id, slot=_parse_slot(slot)))
    pins.save_json(pins_path)
    verb = "aktualisiert" if updated else "hinzugefügt"
    console.print(f"[green]✓[/green] Zuweisung {verb}: {student_id} → {slot}")


@cmd_pin.command("remove")
@click.argument("student_id", type=int)
@_pins_option
def pin_remove(student_id: int, pins_path: Path):
    """Entfernt die manuelle Zuweisung einer Bewerbung."""
    pins = _load_pins(pins_path)
    if not pins.remove_pin(student_id):
        console.print(f"[yellow]Keine Zuweisung für Bewerbung {student_id} vorhanden.[/yellow]")
        return
    pins.save_json(pins_path)
    console.print(f"[green]✓[/green] Zuweisung entfernt: {student_id}")


@cmd_pin.command("list")
@_pins_option
def pin_list(pins_path: Path):
    """Listet alle manuellen Zuweisungen auf."""
    pins = _load_pins(pins_path)
    if not pins.get_pins():
        console.print("[dim]Keine manuellen Zuweisungen vorhanden.[/dim]")
        return
    table = Table(title="Manuelle Zuweisungen", box=box.ROUNDED)
    table.add_column("Bewerbung", style="bold")
    table.add_column("Slot")
    for p in pins.get_pins():
        table.add_row(str(p.student_id), str(p.slot))
    console.print(table)


@click.group("forbid")
def cmd_forbid():
    """Ausschlüsse (Bewerbung darf Slot nicht erhalten) verwalten."""


@cmd_forbid.command("add")
@click.argument("student_id", type=int)
@click.argument("slot")
@_pins_option
def forbid_add(student_id: int, slot: str, pins_path: Path):
    """Schließt einen Slot für eine Bewerbung aus."""
    from models.errors import DuplicatePinError
    from solver.pinning import ForbiddenAssignment

    pins = _load_pins(pins_path)
    try:
        pins.add_forbidden(ForbiddenAssignment(student_id=student_id, slot=_parse_slot(slot)))
    except DuplicatePinError as e:
        console.print(f"[red bold]{e}[/red bold]")
        sys.exit(1)
    pins.save_json(pins_path)
    console.print(f"[green]✓[/green] Ausschluss hinzugefügt: {student_id} ↛ {slot}")


@cmd_forbid.command("remove")
@click.argument("student_id", type=int)
@click.argument("slot")
@_pins_option
def forbid_remove(student_id: int, slot: str, pins_path: Path):
    """Entfernt einen Ausschluss."""
    pins = _load_pins(pins_path)
    if not pins.remove_forbidden(student_id, _parse_slot(slot)):
        console.print(f"[yellow]Ausschluss {student_id} ↛ {slot} nicht vorhanden.[/yellow]")
        return
    pins.save_json(pins_path)
    console.print(f"[green]✓[/green] Ausschluss entfernt: {student_id} ↛ {slot}")


@cmd_forbid.command("list")
@_pins_option
def forbid_list(pins_path: Path):
    """Listet alle Ausschlüsse auf."""
    pins = _load_pins(pins_path)
    if not pins.get_forbidden():
        console.print("[dim]Keine Ausschlüsse vorhanden.[/dim]")
        return
    table = Table(title="Ausschlüsse", box=box.ROUNDED)
    table.add_column("Bewerbung", style="bold")
    table.add_column("Slot")
    for p in pins.get_forbidden():
        table.add_row(str(p.student_id), str(p.slot))
    console.print(table)


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug-Ausgaben anzeigen.")
def cli(verbose: bool):
    """Platzvergabe für Austauschstudien (Partneruniversitäten).

    Starten Sie mit: python main.py check <unis.xlsx> <bewerbungen.xlsx>
    """
    _setup_logging(verbose)


def main():
    """Einstiegspunkt."""
    cli()


# Befehle registrieren
cli.add_command(cmd_config)
cli.add_command(cmd_check)
cli.add_command(cmd_verify)
cli.add_command(cmd_solve)
cli.add_command(cmd_pin)
cli.add_command(cmd_forbid)


if __name__ == "__main__":
    main()
