"""Studienfortschritt und Stundenplan einzelner Studierender."""

import logging
from typing import Optional

from pydantic import BaseModel

from config.schema import ProgressConfig
from data.store import CampusStore
from exceptions import NotFoundError
from models.course import Course
from models.enrollment import Enrollment
from models.section import Section
from models.timeslot import SectionTimeslot

logger = logging.getLogger(__name__)


class StudentProgress(BaseModel):
    """Credits und Kursbilanz eines Studierenden."""

    student_id: int
    student_name: str
    grade_level: int
    credits_earned: int
    credits_required: int
    credits_remaining: int
    courses_taken: int
    courses_passed: int
    courses_failed: int
    courses_enrolled: int
    on_track: bool


class ScheduleItem(BaseModel):
    """Eine belegte Sektion im persönlichen Stundenplan."""

    enrollment: Enrollment
    section: Section
    course: Course
    teacher_name: Optional[str] = None
    classroom_name: Optional[str] = None
    timeslots: list[SectionTimeslot] = []


class StudentProgressService:
    def __init__(self, store: CampusStore, config: Optional[ProgressConfig] = None) -> None:
        self.store = store
        self.config = config or ProgressConfig()

    def get_progress(self, student_id: int) -> StudentProgress:
        """Bilanz aus der Kurshistorie.

        Im Plan ist, wer mindestens (Jahrgang − Offset) × Credits-pro-Jahrgang
        erreicht hat.
        """
        student = self.store.get_student(student_id)
        if student is None:
            raise NotFoundError("Student", student_id)

        history = self.store.get_course_history(student_id)
        passed_ids = {h.course_id for h in history if h.is_passed}
        failed = sum(1 for h in history if not h.is_passed)
        earned = self.store.sum_credits(passed_ids)
        required = self.config.credits_required
        expected = (student.grade_level - self.config.grade_offset) * self.config.credits_per_grade
        enrolled = sum(1 for e in self.store.get_student_enrollments(student_id) if e.is_active)

        return StudentProgress(
            student_id=student.id,
            student_name=student.full_name,
            grade_level=student.grade_level,
            credits_earned=earned,
            credits_required=required,
            credits_remaining=max(0, required - earned),
            courses_taken=len(history),
            courses_passed=len(history) - failed,
            courses_failed=failed,
            courses_enrolled=enrolled,
            on_track=earned >= expected,
        )

    def get_student_schedule(self, student_id: int, semester_id: int) -> list[ScheduleItem]:
        """Aktive Einschreibungen im Semester mit Kurs, Lehrkraft, Raum und Terminen."""
        if self.store.get_student(student_id) is None:
            raise NotFoundError("Student", student_id)
        if self.store.get_semester(semester_id) is None:
            raise NotFoundError("Semester", semester_id)

        items = []
        for enrollment in self.store.get_active_enrollments(student_id, semester_id):
            section = self.store.get_section(enrollment.section_id)
            course = self.store.get_course(section.course_id)
            if course is None:
                logger.warning(
                    f"Sektion {section.id}: Kurs {section.course_id} nicht gefunden, "
                    f"Eintrag übersprungen"
                )
                continue
            teacher = self.store.get_teacher(section.teacher_id) if section.teacher_id else None
            room = self.store.get_classroom(section.classroom_id) if section.classroom_id else None
            items.append(ScheduleItem(
                enrollment=enrollment,
                section=section,
                course=course,
                teacher_name=teacher.full_name if teacher else None,
                classroom_name=room.name if room else None,
                timeslots=self.store.get_timeslots(section.id),
            ))
        return items
