"""Kursplaner — Haupt-CLI.

Verwendung:
  python main.py setup                          Ersteinrichtung (Wizard)
  python main.py config show                    Konfiguration anzeigen
  python main.py generate                       Testdaten erzeugen und speichern
  python main.py validate                       Machbarkeits-Check
  python main.py schedule -s <semester>         Semester planen
  python main.py check-schedule -s <semester>   Semesterplan prüfen
  python main.py revert -s <semester>           Semesterplan verwerfen
  python main.py sections -s <semester>         Sektionen auflisten
  python main.py enroll <student> <sektion>     Einschreiben
  python main.py check-enrollment <st> <sek>    Einschreibung probeweise prüfen
  python main.py drop <student> <sektion>       Abmelden
  python main.py student schedule <student>     Stundenplan eines Studierenden
  python main.py student progress <student>     Studienfortschritt
  python main.py export -s <semester>           Excel-Export
  python main.py run                            generate → schedule → export
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

from exceptions import KursplanerError

console = Console()

# Standard-Pfad für den gespeicherten Datensatz
DEFAULT_DATA_JSON = Path("output/campus_data.json")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _load_config():
    """Lädt die Konfiguration (ohne Datei: Standardwerte) oder bricht ab."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    try:
        return mgr, mgr.load_or_default()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def _data_path(config, data: Optional[str]) -> Path:
    return Path(data or config.data_path or DEFAULT_DATA_JSON)


def _open_store_or_abort(path: Path):
    """Lädt den gespeicherten Datensatz oder bricht mit Hinweis ab."""
    from data.store import CampusStore
    if not path.exists():
        console.print(
            f"[red]Keine Datendatei gefunden: {path}[/red]\n"
            "Verwenden Sie zunächst [bold]python main.py generate[/bold]."
        )
        sys.exit(1)
    return CampusStore.open(path)


def _fail(error: KursplanerError) -> None:
    console.print(f"[red bold]Fehler:[/red bold] {error}")
    sys.exit(1)


data_option = click.option(
    "--data", "data", default=None,
    help="Pfad zum Datensatz (Standard: data_path aus der Konfiguration).",
)
semester_option = click.option(
    "--semester", "-s", "semester_id", type=int, required=True, help="Semester-ID.",
)


# ─── SETUP ────────────────────────────────────────────────────────────────────

@click.command("setup")
def cmd_setup():
    """Ersteinrichtung: Konfiguration mit dem Setup-Wizard anlegen."""
    from config.wizard import run_wizard
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check():
        console.print("[yellow]Eine Konfiguration existiert bereits.[/yellow]")
        if not click.confirm("Trotzdem neu einrichten?", default=False):
            return

    config = run_wizard()
    if config is not None:
        path = mgr.save(config)
        console.print(f"[bold green]Einrichtung abgeschlossen![/bold green] ({path})")
        console.print("Führen Sie jetzt [bold]python main.py generate[/bold] aus.")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen."""


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    mgr, config = _load_config()
    source = mgr.DEFAULT_CONFIG if not mgr.first_run_check() else "Standardwerte"

    console.print(Panel(
        f"[bold]{config.institution_name}[/bold]  |  Datensatz: {config.data_path}",
        title=f"Konfiguration ({source})",
        border_style="cyan",
    ))

    tg = config.time_grid
    table = Table(title="Wochenraster", box=box.ROUNDED)
    table.add_column("Parameter", style="bold")
    table.add_column("Wert")
    table.add_row("Tage", ", ".join(tg.day_names[: tg.days_per_week]))
    table.add_row("Unterricht", f"{tg.day_start} – {tg.day_end}")
    table.add_row("Mittagspause", f"{tg.lunch_start} – {tg.lunch_end}")
    table.add_row("Sitzungslängen", ", ".join(f"{h}h" for h in tg.session_lengths))
    console.print(table)

    sc = config.scheduling
    console.print(
        f"\n[bold]Planung:[/bold] {sc.section_capacity} Plätze/Sektion | "
        f"max. {sc.max_teacher_hours_per_day}h pro Lehrkraft und Tag | "
        f"Verfahren: {sc.strategy.value} | "
        f"max. {sc.max_combinations} Kombinationen"
    )
    console.print(
        f"[bold]Einschreibung:[/bold] max. {config.enrollment.max_courses_per_semester} "
        f"Kurse pro Semester"
    )
    pc = config.progress
    console.print(
        f"[bold]Fortschritt:[/bold] {pc.credits_required} Credits | "
        f"{pc.credits_per_grade} pro Jahrgang ab {pc.grade_offset + 1}"
    )


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--year", default=2025, help="Aktuelles Studienjahr.")
@click.option("--students", "num_students", default=80, help="Anzahl Studierende.")
@data_option
@click.option("--validate/--no-validate", "run_validate", default=True,
              help="Machbarkeits-Check nach Generierung.")
def cmd_generate(seed: int, year: int, num_students: int, data: Optional[str],
                 run_validate: bool):
    """Erzeugt Testdaten (Semester, Kurse, Lehrkräfte, Räume, Studierende)."""
    mgr, config = _load_config()
    from data.fake_data import FakeDataGenerator

    console.print("[bold]Testdaten werden generiert...[/bold]")
    gen = FakeDataGenerator(config, seed=seed, year=year, num_students=num_students)
    campus = gen.generate()
    gen.print_summary(campus)

    if run_validate:
        campus.validate_feasibility(config).print_rich()

    out_path = _data_path(config, data)
    campus.save_json(out_path)
    console.print(f"[green]✓[/green] Datensatz gespeichert: {out_path}")


# ─── VALIDATE ─────────────────────────────────────────────────────────────────

@click.command("validate")
@data_option
def cmd_validate(data: Optional[str]):
    """Führt einen Machbarkeits-Check auf dem gespeicherten Datensatz durch."""
    mgr, config = _load_config()
    store = _open_store_or_abort(_data_path(config, data))

    console.print(f"\n{store.data.summary()}\n")
    report = store.data.validate_feasibility(config)
    report.print_rich()

    sys.exit(0 if report.is_feasible else 1)


# ─── SCHEDULE ─────────────────────────────────────────────────────────────────

def _print_schedule_result(result, store) -> None:
    table = Table(title=f"Planungslauf Semester {result.semester_id}", box=box.ROUNDED)
    table.add_column("Sektion", style="bold")
    table.add_column("Lehrkraft")
    table.add_column("Raum")
    table.add_column("Termine")
    table.add_column("Status")
    for section in result.sections:
        course = store.get_course(section.course_id)
        teacher = store.get_teacher(section.teacher_id) if section.teacher_id else None
        room = store.get_classroom(section.classroom_id) if section.classroom_id else None
        slots = ", ".join(str(ts.to_slot()) for ts in store.get_timeslots(section.id))
        color = "green" if section.is_placed else "red"
        table.add_row(
            section.label(course.code if course else str(section.course_id)),
            teacher.full_name if teacher else "–",
            room.name if room else "–",
            slots or "–",
            f"[{color}]{section.status.value}[/{color}]",
        )
    console.print(table)
    console.print(
        f"[bold]Geplant:[/bold] {result.scheduled}  "
        f"[bold]Gescheitert:[/bold] {result.failed}  "
        f"[bold]Übersprungen:[/bold] {result.skipped}  "
        f"[dim]({result.solve_time_seconds:.2f}s, {result.strategy.value})[/dim]"
    )


@click.command("schedule")
@semester_option
@click.option("--strategy", type=click.Choice(["greedy", "combinations"]), default=None,
              help="Platzierungsverfahren (Standard aus der Konfiguration).")
@data_option
def cmd_schedule(semester_id: int, strategy: Optional[str], data: Optional[str]):
    """Plant alle Sektionen eines Semesters und speichert das Ergebnis."""
    mgr, config = _load_config()
    from scheduler import SemesterScheduler
    from config.schema import PlacementStrategy

    path = _data_path(config, data)
    store = _open_store_or_abort(path)
    scheduler = SemesterScheduler(store, config)
    try:
        result = scheduler.generate_schedule(
            semester_id, PlacementStrategy(strategy) if strategy else None
        )
    except KursplanerError as e:
        _fail(e)

    _print_schedule_result(result, store)
    store.save(path)
    console.print(f"[green]✓[/green] Datensatz gespeichert: {path}")


@click.command("check-schedule")
@semester_option
@data_option
def cmd_check_schedule(semester_id: int, data: Optional[str]):
    """Prüft den gespeicherten Semesterplan auf Regelverletzungen."""
    mgr, config = _load_config()
    from analysis.schedule_validator import ScheduleValidator

    store = _open_store_or_abort(_data_path(config, data))
    if store.get_semester(semester_id) is None:
        console.print(f"[red]Semester nicht gefunden: {semester_id}[/red]")
        sys.exit(1)
    report = ScheduleValidator(config).validate(store, semester_id)
    report.print_rich()
    sys.exit(0 if report.is_valid else 1)


@click.command("revert")
@semester_option
@click.option("--yes", "-y", is_flag=True, default=False, help="Ohne Rückfrage löschen.")
@data_option
def cmd_revert(semester_id: int, yes: bool, data: Optional[str]):
    """Löscht alle Sektionen eines Semesters samt Terminen und Einschreibungen."""
    mgr, config = _load_config()
    from scheduler import SemesterScheduler

    path = _data_path(config, data)
    store = _open_store_or_abort(path)
    if not yes and not click.confirm(
        f"Alle Sektionen von Semester {semester_id} löschen?", default=False
    ):
        console.print("[yellow]Abgebrochen.[/yellow]")
        return
    try:
        removed = SemesterScheduler(store, config).revert_schedule(semester_id)
    except KursplanerError as e:
        _fail(e)
    store.save(path)
    console.print(f"[green]✓[/green] {removed} Sektion(en) entfernt.")


@click.command("sections")
@semester_option
@click.option("--course", "course_code", default=None, help="Nur dieser Kurs (Code).")
@click.option("--status", type=click.Choice(
    ["unscheduled", "scheduled", "active", "completed", "cancelled"]), default=None)
@data_option
def cmd_sections(semester_id: int, course_code: Optional[str], status: Optional[str],
                 data: Optional[str]):
    """Listet die Sektionen eines Semesters auf."""
    mgr, config = _load_config()
    from scheduler import SemesterScheduler
    from models.section import SectionStatus

    store = _open_store_or_abort(_data_path(config, data))
    course_id = None
    if course_code:
        course = store.get_course_by_code(course_code)
        if course is None:
            console.print(f"[red]Kurs nicht gefunden: {course_code}[/red]")
            sys.exit(1)
        course_id = course.id
    try:
        sections = SemesterScheduler(store, config).get_sections(
            semester_id, course_id, SectionStatus(status) if status else None
        )
    except KursplanerError as e:
        _fail(e)

    table = Table(title=f"Sektionen Semester {semester_id}", box=box.ROUNDED)
    table.add_column("ID", justify="right")
    table.add_column("Sektion", style="bold")
    table.add_column("Std.", justify="right")
    table.add_column("Status")
    table.add_column("Belegung", justify="right")
    for section in sections:
        course = store.get_course(section.course_id)
        table.add_row(
            str(section.id),
            section.label(course.code if course else str(section.course_id)),
            str(section.hours_per_week),
            section.status.value,
            f"{store.count_enrolled(section.id)}/{section.capacity}",
        )
    console.print(table)


# ─── ENROLLMENT ───────────────────────────────────────────────────────────────

@click.command("enroll")
@click.argument("student_id", type=int)
@click.argument("section_id", type=int)
@data_option
def cmd_enroll(student_id: int, section_id: int, data: Optional[str]):
    """Schreibt einen Studierenden in eine Sektion ein."""
    mgr, config = _load_config()
    from enrollment import EnrollmentService
    from exceptions import EnrollmentValidationError

    path = _data_path(config, data)
    store = _open_store_or_abort(path)
    service = EnrollmentService(store, config.enrollment)
    try:
        enrollment = service.enroll(student_id, section_id)
    except EnrollmentValidationError as e:
        console.print(f"[red bold]Abgelehnt ({e.reason}):[/red bold] {e.message}")
        sys.exit(1)
    except KursplanerError as e:
        _fail(e)

    store.save(path)
    if enrollment.status.value == "waitlisted":
        console.print(f"[yellow]⚠[/yellow]  Sektion voll – Student {student_id} auf der Warteliste.")
    else:
        console.print(f"[green]✓[/green] Student {student_id} in Sektion {section_id} eingeschrieben.")


@click.command("check-enrollment")
@click.argument("student_id", type=int)
@click.argument("section_id", type=int)
@data_option
def cmd_check_enrollment(student_id: int, section_id: int, data: Optional[str]):
    """Prüft eine Einschreibung, ohne sie vorzunehmen."""
    mgr, config = _load_config()
    from enrollment import EnrollmentService

    store = _open_store_or_abort(_data_path(config, data))
    result = EnrollmentService(store, config.enrollment).validate_enrollment(student_id, section_id)

    status = "[bold green]✓ ZULÄSSIG[/bold green]" if result.valid else "[bold red]✗ UNZULÄSSIG[/bold red]"
    lines = [status]
    for e in result.errors:
        lines.append(f"  [red]• {e}[/red]")
    for w in result.warnings:
        lines.append(f"  [yellow]• {w}[/yellow]")
    console.print(Panel("\n".join(lines), title="Einschreibungs-Check", border_style="cyan"))
    sys.exit(0 if result.valid else 1)


@click.command("drop")
@click.argument("student_id", type=int)
@click.argument("section_id", type=int)
@data_option
def cmd_drop(student_id: int, section_id: int, data: Optional[str]):
    """Meldet einen Studierenden von einer Sektion ab."""
    mgr, config = _load_config()
    from enrollment import EnrollmentService

    path = _data_path(config, data)
    store = _open_store_or_abort(path)
    try:
        EnrollmentService(store, config.enrollment).drop(student_id, section_id)
    except KursplanerError as e:
        _fail(e)
    store.save(path)
    console.print(f"[green]✓[/green] Student {student_id} von Sektion {section_id} abgemeldet.")


# ─── STUDENT ──────────────────────────────────────────────────────────────────

@click.group("student")
def cmd_student():
    """Stundenplan und Studienfortschritt einzelner Studierender."""


@cmd_student.command("schedule")
@click.argument("student_id", type=int)
@semester_option
@data_option
def student_schedule(student_id: int, semester_id: int, data: Optional[str]):
    """Zeigt die belegten Sektionen eines Studierenden im Semester."""
    mgr, config = _load_config()
    from enrollment import StudentProgressService

    store = _open_store_or_abort(_data_path(config, data))
    try:
        items = StudentProgressService(store, config.progress).get_student_schedule(
            student_id, semester_id
        )
    except KursplanerError as e:
        _fail(e)

    if not items:
        console.print("[dim]Keine aktiven Einschreibungen.[/dim]")
        return
    table = Table(title=f"Stundenplan Student {student_id}", box=box.ROUNDED)
    table.add_column("Sektion", style="bold")
    table.add_column("Kurs")
    table.add_column("Lehrkraft")
    table.add_column("Raum")
    table.add_column("Termine")
    table.add_column("Status")
    for item in items:
        table.add_row(
            item.section.label(item.course.code),
            item.course.name,
            item.teacher_name or "–",
            item.classroom_name or "–",
            ", ".join(str(ts.to_slot()) for ts in item.timeslots) or "–",
            item.enrollment.status.value,
        )
    console.print(table)


@cmd_student.command("progress")
@click.argument("student_id", type=int)
@data_option
def student_progress(student_id: int, data: Optional[str]):
    """Zeigt Credits und Kursbilanz eines Studierenden."""
    mgr, config = _load_config()
    from enrollment import StudentProgressService

    store = _open_store_or_abort(_data_path(config, data))
    try:
        progress = StudentProgressService(store, config.progress).get_progress(student_id)
    except KursplanerError as e:
        _fail(e)

    table = Table(title=f"{progress.student_name} (Jahrgang {progress.grade_level})",
                  box=box.ROUNDED)
    table.add_column("Kennzahl", style="bold")
    table.add_column("Wert", justify="right")
    table.add_row("Credits erreicht", str(progress.credits_earned))
    table.add_row("Credits benötigt", str(progress.credits_required))
    table.add_row("Credits offen", str(progress.credits_remaining))
    table.add_row("Kurse belegt", str(progress.courses_taken))
    table.add_row("Bestanden", str(progress.courses_passed))
    table.add_row("Nicht bestanden", str(progress.courses_failed))
    table.add_row("Aktuell eingeschrieben", str(progress.courses_enrolled))
    table.add_row("Im Plan", "[green]ja[/green]" if progress.on_track else "[red]nein[/red]")
    console.print(table)


# ─── EXPORT ───────────────────────────────────────────────────────────────────

@click.command("export")
@semester_option
@click.option("--output", "-o", default=None, help="Ausgabepfad der Excel-Datei.")
@data_option
def cmd_export(semester_id: int, output: Optional[str], data: Optional[str]):
    """Exportiert den Semesterplan als Excel-Datei."""
    mgr, config = _load_config()
    from export import ExcelExporter

    store = _open_store_or_abort(_data_path(config, data))
    out_path = Path(output or f"output/semesterplan_{semester_id}.xlsx")
    try:
        ExcelExporter(store, config, semester_id).export(out_path)
    except KursplanerError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Excel gespeichert: {out_path}")


# ─── RUN ──────────────────────────────────────────────────────────────────────

@click.command("run")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--semester", "-s", "semester_id", type=int, default=3,
              help="Zu planendes Semester (Standard: Herbst des aktuellen Jahres).")
@click.option("--output", "-o", default=None, help="Ausgabepfad der Excel-Datei.")
@data_option
def cmd_run(seed: int, semester_id: int, output: Optional[str], data: Optional[str]):
    """Führt generate → schedule → check-schedule → export aus."""
    mgr, config = _load_config()
    from analysis.schedule_validator import ScheduleValidator
    from data.fake_data import FakeDataGenerator
    from data.store import CampusStore
    from export import ExcelExporter
    from scheduler import SemesterScheduler

    console.print("[bold]Pipeline: generate → schedule → check → export[/bold]")
    path = _data_path(config, data)
    store = CampusStore(FakeDataGenerator(config, seed=seed).generate(), path=path)

    try:
        result = SemesterScheduler(store, config).generate_schedule(semester_id)
    except KursplanerError as e:
        _fail(e)
    _print_schedule_result(result, store)

    ScheduleValidator(config).validate(store, semester_id).print_rich()
    store.save()

    out_path = Path(output or f"output/semesterplan_{semester_id}.xlsx")
    ExcelExporter(store, config, semester_id).export(out_path)
    console.print(f"[green]✓[/green] Datensatz: {path}  |  Excel: {out_path}")


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Ausführliche Log-Ausgabe.")
def cli(verbose: bool):
    """Kursplaner: Sektionsplanung und Einschreibung.

    Starten Sie mit: python main.py setup
    """
    _setup_logging(verbose)


def main():
    """Einstiegspunkt. Startet automatisch den Wizard beim ersten Aufruf."""
    from config.manager import ConfigManager
    mgr = ConfigManager()

    if len(sys.argv) == 1 and mgr.first_run_check():
        console.print(Panel(
            "[bold]Willkommen beim Kursplaner![/bold]\n\n"
            "Keine Konfiguration gefunden.\n"
            "Der Setup-Wizard wird jetzt gestartet...",
            border_style="cyan",
        ))
        sys.argv.append("setup")

    cli()


# Befehle registrieren
cli.add_command(cmd_setup)
cli.add_command(cmd_config)
cli.add_command(cmd_generate)
cli.add_command(cmd_validate)
cli.add_command(cmd_schedule)
cli.add_command(cmd_check_schedule)
cli.add_command(cmd_revert)
cli.add_command(cmd_sections)
cli.add_command(cmd_enroll)
cli.add_command(cmd_check_enrollment)
cli.add_command(cmd_drop)
cli.add_command(cmd_student)
cli.add_command(cmd_export)
cli.add_command(cmd_run)


if __name__ == "__main__":
    main()
