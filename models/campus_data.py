"""CampusData: Vollständiger Datensatz der Einrichtung + Machbarkeits-Check (Pydantic v2)."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from config.schema import CampusConfig
from models.course import Course, find_prerequisite_cycle
from models.enrollment import Enrollment
from models.room import Classroom
from models.section import Section
from models.semester import Semester
from models.specialization import Specialization
from models.student import CourseHistoryEntry, Student
from models.teacher import Teacher
from models.timeslot import SectionTimeslot


class FeasibilityReport(BaseModel):
    """Ergebnis des Machbarkeits-Checks."""

    is_feasible: bool
    errors: list[str]      # Kritische Probleme (Planung unmöglich)
    warnings: list[str]    # Hinweise (Planung schwierig aber möglich)

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        if self.is_feasible:
            status = "[bold green]✓ PLANBAR[/bold green]"
        else:
            status = "[bold red]✗ NICHT PLANBAR[/bold red]"

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


class CampusData(BaseModel):
    """Vollständiger Datensatz: Stammdaten, Sektionen, Termine und Einschreibungen."""

    institution_name: str = "Muster-Kolleg"
    semesters: list[Semester] = []
    specializations: list[Specialization] = []
    courses: list[Course] = []
    teachers: list[Teacher] = []
    classrooms: list[Classroom] = []
    students: list[Student] = []
    course_history: list[CourseHistoryEntry] = []
    sections: list[Section] = []
    timeslots: list[SectionTimeslot] = []
    enrollments: list[Enrollment] = []
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    data_version: str = "1.0"

    # ─── Übersicht ───

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        active_students = sum(1 for s in self.students if s.is_active)
        scheduled = sum(1 for s in self.sections if s.is_placed)
        lines = [
            f"Einrichtung: {self.institution_name}",
            f"Semester: {len(self.semesters)}",
            f"Fachrichtungen: {len(self.specializations)}",
            f"Kurse: {len(self.courses)} "
            f"({sum(1 for c in self.courses if c.has_prerequisite)} mit Voraussetzung)",
            f"Lehrkräfte: {len(self.teachers)}",
            f"Räume: {len(self.classrooms)}",
            f"Studierende: {len(self.students)} ({active_students} aktiv)",
            f"Kurshistorie: {len(self.course_history)} Einträge",
            f"Sektionen: {len(self.sections)} ({scheduled} mit Lehrkraft und Raum)"
            if self.sections else "",
            f"Einschreibungen: {len(self.enrollments)}" if self.enrollments else "",
        ]
        return "\n".join(l for l in lines if l)

    # ─── Machbarkeits-Check ───

    def validate_feasibility(self, config: Optional[CampusConfig] = None) -> FeasibilityReport:
        """Prüft ob die Stammdaten grundsätzlich planbar sind.

        Prüfungen:
        1. Pro Kurs: Fachrichtung vorhanden
        2. Pro Fachrichtung: qualifizierte Lehrkräfte und passende Räume
        3. Voraussetzungen: verweisen auf existierende Kurse, keine Zyklen
        4. Wochenstunden innerhalb Tagesobergrenze × Unterrichtstage
        5. Semester: mindestens ein Kurs mit passender Semester-Ordnung
        """
        config = config or CampusConfig()
        errors: list[str] = []
        warnings: list[str] = []

        spec_map = {s.id: s for s in self.specializations}
        course_map = {c.id: c for c in self.courses}

        # ── 1 + 2. Fachrichtung, Lehrkräfte, Räume ───────────────────────
        teachers_per_spec: dict[int, int] = {}
        for teacher in self.teachers:
            teachers_per_spec[teacher.specialization_id] = (
                teachers_per_spec.get(teacher.specialization_id, 0) + 1
            )
        rooms_per_type: dict[int, int] = {}
        for room in self.classrooms:
            rooms_per_type[room.room_type_id] = rooms_per_type.get(room.room_type_id, 0) + 1

        for course in self.courses:
            spec = spec_map.get(course.specialization_id)
            if spec is None:
                errors.append(
                    f"Kurs {course.code}: Fachrichtung {course.specialization_id} "
                    f"existiert nicht – alle Sektionen scheitern."
                )
                continue
            if teachers_per_spec.get(spec.id, 0) == 0:
                errors.append(f"Kurs {course.code}: Keine Lehrkraft für '{spec.name}' vorhanden!")
            elif teachers_per_spec[spec.id] == 1:
                warnings.append(f"Fachrichtung '{spec.name}': Nur eine Lehrkraft vorhanden.")
            if rooms_per_type.get(spec.room_type_id, 0) == 0:
                errors.append(
                    f"Kurs {course.code}: Benötigt Raumtyp {spec.room_type_id}, "
                    f"aber keine solchen Räume konfiguriert!"
                )

        # ── 3. Voraussetzungen ───────────────────────────────────────────
        reported_cycles: set[frozenset[int]] = set()
        for course in self.courses:
            if course.prerequisite_id is not None and course.prerequisite_id not in course_map:
                errors.append(
                    f"Kurs {course.code}: Voraussetzung {course.prerequisite_id} existiert nicht."
                )
            cycle = find_prerequisite_cycle(course.id, course_map.get)
            if cycle and frozenset(cycle) not in reported_cycles:
                reported_cycles.add(frozenset(cycle))
                codes = " → ".join(course_map[cid].code for cid in cycle)
                errors.append(f"Voraussetzungs-Zyklus: {codes} → {course_map[cycle[0]].code}")

        # ── 4. Wochenstunden ─────────────────────────────────────────────
        tg = config.time_grid
        weekly_limit = min(
            config.scheduling.max_teacher_hours_per_day, tg.teaching_hours_per_day
        ) * tg.days_per_week
        for course in self.courses:
            if course.hours_per_week > weekly_limit:
                errors.append(
                    f"Kurs {course.code}: {course.hours_per_week}h/Woche, aber pro Lehrkraft "
                    f"sind höchstens {weekly_limit}h/Woche planbar."
                )

        # ── 5. Semester ──────────────────────────────────────────────────
        orders = {c.semester_order for c in self.courses}
        for semester in self.semesters:
            if semester.order_in_year not in orders:
                warnings.append(
                    f"Semester '{semester.name}': Kein Kurs mit Semester-Ordnung "
                    f"{semester.order_in_year}."
                )
        if not self.students:
            warnings.append("Keine Studierenden – Bedarfsanalyse liefert keine Sektionen.")

        return FeasibilityReport(
            is_feasible=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    # ─── Persistenz ────────────────────────────────────────────────────────

    def save_json(self, path: Path) -> None:
        """Speichert den kompletten Datensatz als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        now = datetime.now(timezone.utc)
        updated = self.model_copy(update={
            "modified_at": now,
            "created_at": self.created_at or now,
        })
        with open(path, "w", encoding="utf-8") as f:
            f.write(updated.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "CampusData":
        """Lädt einen Datensatz aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
