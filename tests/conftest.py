"""Gemeinsame Fixtures: ein kleiner, vollständig kontrollierter Datensatz.

Aufbau:
  Semester 1 = Herbst 2024, 2 = Frühjahr 2025, 3 = Herbst 2025 (aktiv)
  Mathematik (Raumtyp 1): MAT101 → MAT201 → MAT301, 2 Lehrkräfte, 2 Räume
  Physik (Raumtyp 2): PHY101 (4h), PHY201 (Frühjahr), 1 Lehrkraft, 1 Labor
  12 aktive Studierende im Jahrgang 10, keine Kurshistorie
"""

from datetime import time
from typing import Optional

import pytest

from config.defaults import default_campus_config
from config.schema import CampusConfig
from data.store import CampusStore
from models.campus_data import CampusData
from models.course import Course
from models.room import Classroom
from models.section import Section, SectionStatus
from models.semester import Semester
from models.specialization import Specialization
from models.student import CourseHistoryEntry, Student
from models.teacher import Teacher
from models.timeslot import SectionTimeslot


# ─── Bausteine ────────────────────────────────────────────────────────────────

def make_student(student_id: int, grade: int = 10, status: str = "active") -> Student:
    return Student(
        id=student_id,
        first_name="Test",
        last_name=f"Student{student_id}",
        grade_level=grade,
        enrollment_year=2024,
        expected_graduation_year=2027,
        status=status,
    )


def make_course(
    course_id: int,
    code: str,
    hours: int = 2,
    specialization_id: int = 1,
    prerequisite_id: Optional[int] = None,
    semester_order: int = 1,
    credits: int = 3,
) -> Course:
    return Course(
        id=course_id,
        code=code,
        name=f"Kurs {code}",
        credits=credits,
        hours_per_week=hours,
        specialization_id=specialization_id,
        prerequisite_id=prerequisite_id,
        semester_order=semester_order,
        grade_level_min=9,
        grade_level_max=12,
    )


def passed(student_id: int, course_id: int, semester_id: int = 1) -> CourseHistoryEntry:
    return CourseHistoryEntry(
        student_id=student_id, course_id=course_id, semester_id=semester_id, status="passed"
    )


def failed(student_id: int, course_id: int, semester_id: int = 1) -> CourseHistoryEntry:
    return CourseHistoryEntry(
        student_id=student_id, course_id=course_id, semester_id=semester_id, status="failed"
    )


def build_campus() -> CampusData:
    return CampusData(
        institution_name="Test-Kolleg",
        semesters=[
            Semester(id=1, name="Herbst 2024", year=2024, order_in_year=1),
            Semester(id=2, name="Frühjahr 2025", year=2025, order_in_year=2),
            Semester(id=3, name="Herbst 2025", year=2025, order_in_year=1, is_active=True),
        ],
        specializations=[
            Specialization(id=1, name="Mathematik", room_type_id=1),
            Specialization(id=2, name="Physik", room_type_id=2),
        ],
        courses=[
            make_course(1, "MAT101", hours=3),
            make_course(2, "MAT201", hours=2, prerequisite_id=1),
            make_course(3, "MAT301", hours=2, prerequisite_id=2, credits=4),
            make_course(4, "PHY101", hours=4, specialization_id=2),
            make_course(5, "PHY201", hours=3, specialization_id=2,
                        prerequisite_id=4, semester_order=2),
        ],
        teachers=[
            Teacher(id=1, first_name="Anna", last_name="Müller", specialization_id=1),
            Teacher(id=2, first_name="Hans", last_name="Weber", specialization_id=1),
            Teacher(id=3, first_name="Eva", last_name="Koch", specialization_id=2),
        ],
        classrooms=[
            Classroom(id=1, name="R 101", room_type_id=1),
            Classroom(id=2, name="R 102", room_type_id=1),
            Classroom(id=3, name="Labor 1", room_type_id=2, capacity=20),
        ],
        students=[make_student(i) for i in range(1, 13)],
    )


# ─── Fixtures ─────────────────────────────────────────────────────────────────

@pytest.fixture
def config() -> CampusConfig:
    return default_campus_config()


@pytest.fixture
def campus() -> CampusData:
    return build_campus()


@pytest.fixture
def store(campus: CampusData) -> CampusStore:
    return CampusStore(campus)


@pytest.fixture
def add_section(store: CampusStore):
    """Legt eine geplante Sektion mit festen Terminen an.

    slots: Liste aus (Tag, Startstunde, Endstunde).
    """
    def _add(
        course_id: int,
        slots: list[tuple[int, int, int]],
        semester_id: int = 3,
        teacher_id: Optional[int] = 1,
        classroom_id: Optional[int] = 1,
        capacity: int = 10,
        status: SectionStatus = SectionStatus.SCHEDULED,
    ) -> Section:
        course = store.get_course(course_id)
        number = len(store.get_sections_by_course_and_semester(course_id, semester_id)) + 1
        section = store.save_section(Section(
            course_id=course_id,
            semester_id=semester_id,
            section_number=number,
            capacity=capacity,
            teacher_id=teacher_id,
            classroom_id=classroom_id,
            hours_per_week=course.hours_per_week if course else 2,
            status=status,
        ))
        for day, start, end in slots:
            store.add_timeslot(SectionTimeslot(
                section_id=section.id, day=day, start_time=time(start), end_time=time(end)
            ))
        return section
    return _add
