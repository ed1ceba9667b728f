"""Nachträgliche Validierung eines geplanten Semesters.

Prüft den gespeicherten Zustand auf Regelverletzungen, als Sicherheitsnetz
unabhängig vom Planer und von der Einschreibung.
"""

from collections import defaultdict
from itertools import combinations
from typing import Literal

from pydantic import BaseModel

from config.schema import CampusConfig
from data.store import CampusStore
from models.enrollment import EnrollmentStatus
from models.section import Section, SectionStatus
from models.timeslot import SectionTimeslot, intervals_overlap
from scheduler.time_grid import TimeSlotGenerator


class ValidationViolation(BaseModel):
    """Eine einzelne Regelverletzung."""

    severity: Literal["error", "warning"]
    constraint: str      # z.B. "teacher_double_booking"
    description: str
    entity: str          # Sektion / Lehrkraft / Raum / Student


class ValidationReport(BaseModel):
    """Ergebnis der Validierung."""

    violations: list[ValidationViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)

    def by_constraint(self, constraint: str) -> list[ValidationViolation]:
        return [v for v in self.violations if v.constraint == constraint]

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        errors = [v for v in self.violations if v.severity == "error"]
        warnings = [v for v in self.violations if v.severity == "warning"]

        status = (
            "[bold green]✓ VALIDE[/bold green]"
            if self.is_valid
            else "[bold red]✗ VERLETZUNGEN GEFUNDEN[/bold red]"
        )
        lines = [status, f"Fehler: {len(errors)} | Warnungen: {len(warnings)}"]
        console.print(Panel("\n".join(lines), title="Semesterplan-Validierung", border_style="cyan"))

        if not self.violations:
            console.print("[dim]Keine Verletzungen gefunden.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Regel", width=26)
        table.add_column("Entität", width=14)
        table.add_column("Beschreibung")

        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.constraint,
                v.entity,
                v.description,
            )
        console.print(table)


class ScheduleValidator:
    """Prüft ein Semester im Store auf Regelverletzungen."""

    def __init__(self, config: CampusConfig) -> None:
        self.config = config
        self.generator = TimeSlotGenerator(config.time_grid)

    def validate(self, store: CampusStore, semester_id: int) -> ValidationReport:
        """Führt alle Prüfungen durch und gibt einen ValidationReport zurück."""
        sections = [
            s for s in store.get_sections_by_semester(semester_id)
            if s.status != SectionStatus.CANCELLED
        ]
        slots = {s.id: store.get_timeslots(s.id) for s in sections}
        violations: list[ValidationViolation] = []

        violations.extend(self._check_placement(sections, slots))
        violations.extend(self._check_double_booking(sections, slots, "teacher_id",
                                                     "teacher_double_booking", "Lehrkraft"))
        violations.extend(self._check_double_booking(sections, slots, "classroom_id",
                                                     "room_double_booking", "Raum"))
        violations.extend(self._check_daily_cap(sections, slots))
        violations.extend(self._check_enrollments(store, sections, semester_id))

        has_errors = any(v.severity == "error" for v in violations)
        return ValidationReport(violations=violations, is_valid=not has_errors)

    # ── Einzelne Prüfungen ────────────────────────────────────────────────────

    def _check_placement(
        self, sections: list[Section], slots: dict[int, list[SectionTimeslot]]
    ) -> list[ValidationViolation]:
        """Geplante Sektionen: Lehrkraft, Raum, Wochenstunden, Termine im Raster."""
        violations: list[ValidationViolation] = []
        for section in sections:
            entity = f"Sektion {section.id}"
            if section.status == SectionStatus.UNSCHEDULED:
                if slots[section.id]:
                    violations.append(ValidationViolation(
                        severity="warning",
                        constraint="unscheduled_with_slots",
                        entity=entity,
                        description="Ungeplante Sektion besitzt bereits Termine.",
                    ))
                continue

            if not section.is_placed:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="missing_assignment",
                    entity=entity,
                    description="Als geplant markiert, aber ohne Lehrkraft oder Raum.",
                ))
            total = sum(ts.duration_hours for ts in slots[section.id])
            if total != section.hours_per_week:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="weekly_hours_mismatch",
                    entity=entity,
                    description=(
                        f"Termine ergeben {total:g}h, gefordert sind "
                        f"{section.hours_per_week}h pro Woche."
                    ),
                ))
            for ts in slots[section.id]:
                if not self.generator.is_within_grid(ts.day, ts.start_time, ts.end_time):
                    violations.append(ValidationViolation(
                        severity="error",
                        constraint="outside_time_grid",
                        entity=entity,
                        description=(
                            f"Termin {ts.to_slot()} liegt außerhalb der Unterrichtszeit "
                            f"oder in der Mittagspause."
                        ),
                    ))
        return violations

    def _check_double_booking(
        self,
        sections: list[Section],
        slots: dict[int, list[SectionTimeslot]],
        attribute: str,
        constraint: str,
        label: str,
    ) -> list[ValidationViolation]:
        """Keine Lehrkraft / kein Raum darf zwei sich schneidende Termine haben."""
        violations: list[ValidationViolation] = []
        by_owner: dict[int, list[tuple[Section, SectionTimeslot]]] = defaultdict(list)
        for section in sections:
            owner = getattr(section, attribute)
            if owner is None:
                continue
            for ts in slots[section.id]:
                by_owner[owner].append((section, ts))

        for owner, entries in by_owner.items():
            for (sec_a, a), (sec_b, b) in combinations(entries, 2):
                if sec_a.id == sec_b.id or a.day != b.day:
                    continue
                if intervals_overlap(a.start_time, a.end_time, b.start_time, b.end_time):
                    violations.append(ValidationViolation(
                        severity="error",
                        constraint=constraint,
                        entity=f"{label} {owner}",
                        description=(
                            f"Sektion {sec_a.id} ({a.to_slot()}) und Sektion {sec_b.id} "
                            f"({b.to_slot()}) überschneiden sich."
                        ),
                    ))
        return violations

    def _check_daily_cap(
        self, sections: list[Section], slots: dict[int, list[SectionTimeslot]]
    ) -> list[ValidationViolation]:
        """Unterrichtsstunden pro Lehrkraft und Tag ≤ Tagesobergrenze."""
        cap = self.config.scheduling.max_teacher_hours_per_day
        hours: dict[tuple[int, int], float] = defaultdict(float)
        for section in sections:
            if section.teacher_id is None:
                continue
            for ts in slots[section.id]:
                hours[(section.teacher_id, ts.day)] += ts.duration_hours

        day_names = self.config.time_grid.day_names
        return [
            ValidationViolation(
                severity="error",
                constraint="daily_cap_exceeded",
                entity=f"Lehrkraft {teacher_id}",
                description=f"{day_names[day]}: {total:g}h (Obergrenze {cap}h).",
            )
            for (teacher_id, day), total in sorted(hours.items())
            if total > cap
        ]

    def _check_enrollments(
        self, store: CampusStore, sections: list[Section], semester_id: int
    ) -> list[ValidationViolation]:
        """Kapazität, Kursbelastung und doppelte Kursbelegung."""
        violations: list[ValidationViolation] = []
        for section in sections:
            enrolled = store.count_enrolled(section.id)
            if enrolled > section.capacity:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="capacity_exceeded",
                    entity=f"Sektion {section.id}",
                    description=f"{enrolled} eingeschrieben bei Kapazität {section.capacity}.",
                ))

        section_map = {s.id: s for s in sections}
        per_student: dict[int, list[Section]] = defaultdict(list)
        for e in store.data.enrollments:
            if e.is_active and e.section_id in section_map:
                per_student[e.student_id].append(section_map[e.section_id])

        limit = self.config.enrollment.max_courses_per_semester
        for student_id, enrolled_sections in sorted(per_student.items()):
            if len(enrolled_sections) > limit:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="course_load_exceeded",
                    entity=f"Student {student_id}",
                    description=f"{len(enrolled_sections)} aktive Einschreibungen (max. {limit}).",
                ))
            course_ids = [s.course_id for s in enrolled_sections]
            for course_id in sorted({c for c in course_ids if course_ids.count(c) > 1}):
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="duplicate_course_enrollment",
                    entity=f"Student {student_id}",
                    description=f"Mehrfach aktiv im Kurs {course_id} eingeschrieben.",
                ))

        waitlisted = sum(
            1 for e in store.data.enrollments
            if e.status == EnrollmentStatus.WAITLISTED and e.section_id in section_map
        )
        if waitlisted:
            violations.append(ValidationViolation(
                severity="warning",
                constraint="waitlist",
                entity=f"Semester {semester_id}",
                description=f"{waitlisted} Einschreibung(en) auf der Warteliste.",
            ))
        return violations
