"""Testdaten-Generator für den Kursplaner.

Erzeugt einen realistischen Datensatz: zwei Studienjahre mit je Herbst- und
Frühjahrssemester, den Kurskatalog aus config.defaults, Lehrkräfte pro
Fachrichtung, Räume pro Raumtyp und Studierende der Jahrgänge 9–12 mit
Kurshistorie aus dem Vorjahr.

Absichtliche Engpässe:
  1. Chemie: Nur 1 Lehrkraft und 2 Labore, die auch Physik nutzt
  2. Kunst: 1 Lehrkraft, 1 Atelier
  3. Historie: ~15% der Vorjahreskurse nicht bestanden → Voraussetzungen fehlen
"""

import random
from typing import Optional

from config.defaults import COURSE_CATALOG, ROOM_TYPES, SPECIALIZATION_METADATA
from config.schema import CampusConfig
from models.campus_data import CampusData
from models.course import Course
from models.room import Classroom
from models.semester import Semester
from models.specialization import Specialization
from models.student import CourseHistoryEntry, Student
from models.teacher import Teacher

# ─── Namens-Listen ────────────────────────────────────────────────────────────

_FIRST_NAMES_M = [
    "Andreas", "Bernd", "Christian", "Dieter", "Franz", "Hans", "Jürgen",
    "Klaus", "Ludwig", "Markus", "Michael", "Norbert", "Peter", "Stefan",
    "Thomas", "Tobias", "Ulrich", "Werner", "Yusuf", "Martin", "Robert",
    "Jonas", "Leon", "Finn", "Elias", "Paul", "Noah", "Emil",
]

_FIRST_NAMES_F = [
    "Anna", "Birgit", "Christine", "Eva", "Gabi", "Iris", "Kathrin",
    "Karin", "Lena", "Maria", "Olga", "Renate", "Sandra", "Tanja",
    "Ulrike", "Vera", "Xenia", "Zoe", "Monika", "Sabine", "Heike",
    "Mia", "Emma", "Hanna", "Lina", "Clara", "Ella", "Marie",
]

_LAST_NAMES = [
    "Müller", "Schmidt", "Schneider", "Fischer", "Weber", "Meyer",
    "Wagner", "Becker", "Schulz", "Hoffmann", "Schäfer", "Koch",
    "Bauer", "Richter", "Klein", "Wolf", "Schröder", "Neumann",
    "Schwarz", "Zimmermann", "Braun", "Krüger", "Hofmann", "Hartmann",
    "Lange", "Schmitt", "Werner", "Schmitz", "Krause", "Meier",
    "Lehmann", "Schmid", "Schulze", "Maier", "Köhler", "Herrmann",
    "Kaiser", "Fuchs", "Lang", "Weiß", "Berger", "Roth", "Simon",
]

# Lehrkräfte pro Fachrichtung
_TEACHERS_PER_SPECIALIZATION: dict[str, int] = {
    "Mathematik": 3,
    "Englisch":   2,
    "Geschichte": 2,
    "Physik":     2,
    "Chemie":     1,
    "Informatik": 2,
    "Kunst":      1,
}

# Räume pro Raumtyp (room_type_id → Anzahl)
_ROOMS_PER_TYPE: dict[int, int] = {1: 4, 2: 2, 3: 2, 4: 1}

_PASS_RATE = 0.85
_INACTIVE_RATE = 0.05
_FIRST_GRADE = 9
_LAST_GRADE = 12


class FakeDataGenerator:
    """Generiert vollständige Testdaten auf Basis der CampusConfig."""

    def __init__(
        self,
        config: CampusConfig,
        seed: Optional[int] = None,
        year: int = 2025,
        num_students: int = 80,
    ) -> None:
        self.config = config
        self.rng = random.Random(seed)
        self.year = year
        self.num_students = num_students

    def _person_name(self) -> tuple[str, str]:
        first_names = _FIRST_NAMES_F if self.rng.random() < 0.5 else _FIRST_NAMES_M
        return self.rng.choice(first_names), self.rng.choice(_LAST_NAMES)

    # ─── Semester ─────────────────────────────────────────────────────────────

    def _generate_semesters(self) -> list[Semester]:
        """Vorjahr (für die Kurshistorie) und aktuelles Jahr, je Herbst + Frühjahr."""
        semesters = []
        for offset, year in enumerate((self.year - 1, self.year)):
            for order, label in ((1, "Herbst"), (2, "Frühjahr")):
                semesters.append(Semester(
                    id=offset * 2 + order,
                    name=f"{label} {year}",
                    year=year,
                    order_in_year=order,
                    is_active=(year == self.year and order == 1),
                ))
        return semesters

    # ─── Fachrichtungen / Kurse ───────────────────────────────────────────────

    def _generate_specializations(self) -> list[Specialization]:
        return [
            Specialization(
                id=meta["id"],
                name=name,
                room_type_id=meta["room_type"],
                description=f"{name} ({ROOM_TYPES[meta['room_type']]})",
            )
            for name, meta in SPECIALIZATION_METADATA.items()
        ]

    def _generate_courses(self) -> list[Course]:
        """Erzeugt den Kurskatalog; Voraussetzungen werden über den Code aufgelöst."""
        ids = {code: i for i, code in enumerate(COURSE_CATALOG, start=1)}
        courses = []
        for code, (name, spec, credits, hours, prereq, order, g_min, g_max) in COURSE_CATALOG.items():
            courses.append(Course(
                id=ids[code],
                code=code,
                name=name,
                credits=credits,
                hours_per_week=hours,
                specialization_id=SPECIALIZATION_METADATA[spec]["id"],
                prerequisite_id=ids[prereq] if prereq else None,
                semester_order=order,
                grade_level_min=g_min,
                grade_level_max=g_max,
            ))
        return courses

    # ─── Lehrkräfte / Räume ───────────────────────────────────────────────────

    def _generate_teachers(self) -> list[Teacher]:
        teachers = []
        for spec_name, count in _TEACHERS_PER_SPECIALIZATION.items():
            for _ in range(count):
                first, last = self._person_name()
                teachers.append(Teacher(
                    id=len(teachers) + 1,
                    first_name=first,
                    last_name=last,
                    specialization_id=SPECIALIZATION_METADATA[spec_name]["id"],
                ))
        return teachers

    def _generate_classrooms(self) -> list[Classroom]:
        rooms = []
        for room_type, count in _ROOMS_PER_TYPE.items():
            for i in range(1, count + 1):
                rooms.append(Classroom(
                    id=len(rooms) + 1,
                    name=f"{ROOM_TYPES[room_type]} {i}",
                    room_type_id=room_type,
                    capacity=30 if room_type == 1 else 20,
                ))
        return rooms

    # ─── Studierende / Historie ───────────────────────────────────────────────

    def _generate_students(self) -> list[Student]:
        """Gleichmäßig auf die Jahrgänge 9–12 verteilt."""
        students = []
        grades = list(range(_FIRST_GRADE, _LAST_GRADE + 1))
        for i in range(self.num_students):
            grade = grades[i % len(grades)]
            first, last = self._person_name()
            enrollment_year = self.year - (grade - _FIRST_GRADE)
            students.append(Student(
                id=i + 1,
                first_name=first,
                last_name=last,
                grade_level=grade,
                enrollment_year=enrollment_year,
                expected_graduation_year=enrollment_year + (_LAST_GRADE - _FIRST_GRADE),
                status="inactive" if self.rng.random() < _INACTIVE_RATE else "active",
            ))
        return students

    def _generate_history(
        self,
        students: list[Student],
        courses: list[Course],
        semesters: list[Semester],
    ) -> list[CourseHistoryEntry]:
        """Kurse des Vorjahres: belegt, wer damals im Jahrgangsbereich war.

        Kurse mit Voraussetzung werden nur belegt, wenn diese bereits bestanden ist.
        """
        previous = {s.order_in_year: s for s in semesters if s.year == self.year - 1}
        history: list[CourseHistoryEntry] = []
        passed: set[tuple[int, int]] = set()
        ordered = sorted(courses, key=lambda c: (c.semester_order, c.id))

        for student in students:
            last_grade = student.grade_level - 1
            if last_grade < _FIRST_GRADE:
                continue
            for course in ordered:
                if not course.grade_level_min <= last_grade <= course.grade_level_max:
                    continue
                if course.prerequisite_id and (student.id, course.prerequisite_id) not in passed:
                    continue
                ok = self.rng.random() < _PASS_RATE
                if ok:
                    passed.add((student.id, course.id))
                history.append(CourseHistoryEntry(
                    student_id=student.id,
                    course_id=course.id,
                    semester_id=previous[course.semester_order].id,
                    status="passed" if ok else "failed",
                ))
        return history

    # ─── Vollständiger Datensatz ──────────────────────────────────────────────

    def generate(self) -> CampusData:
        """Erzeugt den vollständigen Datensatz als CampusData-Objekt."""
        semesters = self._generate_semesters()
        courses = self._generate_courses()
        students = self._generate_students()
        return CampusData(
            institution_name=self.config.institution_name,
            semesters=semesters,
            specializations=self._generate_specializations(),
            courses=courses,
            teachers=self._generate_teachers(),
            classrooms=self._generate_classrooms(),
            students=students,
            course_history=self._generate_history(students, courses, semesters),
        )

    # ─── Ausgabe ──────────────────────────────────────────────────────────────

    def print_summary(self, data: CampusData) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht der erzeugten Daten aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title="Erzeugte Testdaten", box=box.ROUNDED)
        table.add_column("Kategorie", style="bold cyan")
        table.add_column("Anzahl", justify="right")
        table.add_column("Details")

        active = sum(1 for s in data.students if s.is_active)
        failed = sum(1 for h in data.course_history if not h.is_passed)
        table.add_row("Semester", str(len(data.semesters)),
                      ", ".join(s.name for s in data.semesters))
        table.add_row("Kurse", str(len(data.courses)),
                      f"{sum(1 for c in data.courses if c.has_prerequisite)} mit Voraussetzung")
        table.add_row("Lehrkräfte", str(len(data.teachers)),
                      f"{len(data.specializations)} Fachrichtungen")
        table.add_row("Räume", str(len(data.classrooms)),
                      f"{len(set(r.room_type_id for r in data.classrooms))} Raumtypen")
        table.add_row("Studierende", str(len(data.students)), f"{active} aktiv")
        table.add_row("Kurshistorie", str(len(data.course_history)),
                      f"{failed} nicht bestanden")

        console.print(table)
