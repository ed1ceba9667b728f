"""Interaktiver Setup-Wizard für die Ersteinrichtung des Kursplaners.

Führt den Nutzer Schritt für Schritt durch die Konfigurationsbereiche.
Nutzt rich für die Konsolenausgabe.
"""

from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table
from rich import box

from config.schema import (
    CampusConfig,
    EnrollmentConfig,
    PlacementStrategy,
    SchedulingConfig,
    TimeGridConfig,
)
from config.defaults import default_time_grid

console = Console()


def _header(title: str) -> None:
    console.print()
    console.print(Panel(f"[bold cyan]{title}[/bold cyan]", expand=False))


def _info(text: str) -> None:
    console.print(f"[dim]{text}[/dim]")


def _success(text: str) -> None:
    console.print(f"[green]✓[/green] {text}")


def _warn(text: str) -> None:
    console.print(f"[yellow]⚠[/yellow]  {text}")


def _show_time_grid_table(tg: TimeGridConfig) -> None:
    """Zeigt das Wochenraster als rich-Tabelle an."""
    table = Table(title="Wochenraster", box=box.ROUNDED)
    table.add_column("Parameter", style="bold")
    table.add_column("Wert")
    table.add_row("Tage", ", ".join(tg.day_names[: tg.days_per_week]))
    table.add_row("Unterricht", f"{tg.day_start} – {tg.day_end}")
    table.add_row("Mittagspause", f"{tg.lunch_start} – {tg.lunch_end}")
    table.add_row("Sitzungslängen", ", ".join(f"{h}h" for h in tg.session_lengths))
    table.add_row("Stunden/Tag", str(tg.teaching_hours_per_day))
    console.print(table)


# ─── SCHRITT 1: Einrichtung ───

def _wizard_institution() -> str:
    _header("Schritt 1 — Einrichtung")
    return Prompt.ask("Name der Einrichtung", default="Muster-Kolleg")


# ─── SCHRITT 2: Wochenraster ───

def _wizard_time_grid() -> TimeGridConfig:
    _header("Schritt 2 — Wochenraster")
    default_tg = default_time_grid()
    _show_time_grid_table(default_tg)

    if Confirm.ask("Standard-Wochenraster übernehmen?", default=True):
        _success("Standard-Wochenraster übernommen.")
        return default_tg

    _info("Alle Uhrzeiten als volle Stunden im Format HH:MM angeben.")
    start = Prompt.ask("Unterrichtsbeginn", default=default_tg.day_start)
    end = Prompt.ask("Unterrichtsende", default=default_tg.day_end)
    lunch_s = Prompt.ask("Beginn Mittagspause", default=default_tg.lunch_start)
    lunch_e = Prompt.ask("Ende Mittagspause", default=default_tg.lunch_end)
    max_len = IntPrompt.ask("Längste Sitzung (Stunden)", default=2)

    try:
        tg = TimeGridConfig(
            day_start=start,
            day_end=end,
            lunch_start=lunch_s,
            lunch_end=lunch_e,
            session_lengths=list(range(1, max_len + 1)),
        )
        _success("Wochenraster konfiguriert und validiert.")
        return tg
    except ValidationError as e:
        _warn(f"Validierungsfehler: {e}")
        _warn("Standard-Wochenraster wird verwendet.")
        return default_tg


# ─── SCHRITT 3: Planung ───

def _wizard_scheduling() -> SchedulingConfig:
    _header("Schritt 3 — Planung")
    defaults = SchedulingConfig()
    if Confirm.ask(
        f"Standardwerte übernehmen? ({defaults.section_capacity} Plätze/Sektion, "
        f"max. {defaults.max_teacher_hours_per_day}h pro Lehrkraft und Tag)",
        default=True,
    ):
        return defaults

    capacity = IntPrompt.ask("Plätze pro Sektion", default=defaults.section_capacity)
    daily = IntPrompt.ask("Max. Stunden pro Lehrkraft und Tag",
                          default=defaults.max_teacher_hours_per_day)
    console.print("Verfahren: [1] greedy (Slot für Slot)  [2] combinations (Tagesstreuung)")
    strategy = (PlacementStrategy.COMBINATIONS
                if Prompt.ask("Verfahren wählen", default="1") == "2"
                else PlacementStrategy.GREEDY)
    return SchedulingConfig(
        section_capacity=capacity,
        max_teacher_hours_per_day=daily,
        strategy=strategy,
    )


# ─── SCHRITT 4: Einschreibung ───

def _wizard_enrollment() -> EnrollmentConfig:
    _header("Schritt 4 — Einschreibung")
    max_courses = IntPrompt.ask("Max. Kurse pro Student und Semester", default=5)
    return EnrollmentConfig(max_courses_per_semester=max_courses)


# ─── HAUPT-WIZARD ───

def run_wizard() -> Optional[CampusConfig]:
    """Führt den interaktiven Setup-Wizard aus.

    Returns:
        Fertige CampusConfig oder None, wenn der Nutzer abbricht.
    """
    console.print()
    console.print(Panel(
        "[bold]Willkommen beim Kursplaner![/bold]\n\n"
        "Der Wizard führt Sie durch Wochenraster, Planungs- und Einschreiberegeln.\n"
        "[dim]Standard-Werte können mit Enter übernommen werden.[/dim]",
        title="[bold cyan]Kursplaner[/bold cyan]",
        border_style="cyan",
    ))

    if not Confirm.ask("\nMöchten Sie jetzt die Einrichtung konfigurieren?", default=True):
        console.print("[yellow]Einrichtung abgebrochen.[/yellow]")
        return None

    try:
        config = CampusConfig(
            institution_name=_wizard_institution(),
            time_grid=_wizard_time_grid(),
            scheduling=_wizard_scheduling(),
            enrollment=_wizard_enrollment(),
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Wizard abgebrochen.[/yellow]")
        return None
    except ValidationError as e:
        console.print(f"\n[red]Fehler während der Konfiguration: {e}[/red]")
        return None

    if not Confirm.ask("\nKonfiguration speichern?", default=True):
        console.print("[yellow]Konfiguration wird nicht gespeichert.[/yellow]")
        return None
    return config
