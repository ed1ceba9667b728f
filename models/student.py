"""Datenmodelle für Studierende und ihre Kurshistorie (Pydantic v2)."""

from typing import Literal

from pydantic import BaseModel, model_validator


class Student(BaseModel):
    """Repräsentiert einen Studierenden."""

    id: int
    first_name: str
    last_name: str
    grade_level: int
    enrollment_year: int
    expected_graduation_year: int
    status: Literal["active", "inactive"] = "active"

    @model_validator(mode="after")
    def _check_years(self):
        if self.expected_graduation_year < self.enrollment_year:
            raise ValueError(
                f"Student {self.id}: Abschlussjahr {self.expected_graduation_year} "
                f"vor Eintrittsjahr {self.enrollment_year}"
            )
        return self

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def is_enrolled_in_year(self, year: int) -> bool:
        """True wenn das Jahr zwischen Eintritt und erwartetem Abschluss liegt."""
        return self.enrollment_year <= year <= self.expected_graduation_year


class CourseHistoryEntry(BaseModel):
    """Abgeschlossener Kurs eines Studierenden (bestanden/nicht bestanden)."""

    student_id: int
    course_id: int
    semester_id: int
    status: Literal["passed", "failed"]

    @property
    def is_passed(self) -> bool:
        return self.status == "passed"
